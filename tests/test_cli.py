import json

import pytest

from roomgen.cli import build_parser, main
from roomgen.generator import RoomGenerator
from roomgen.render import render_ascii


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("ROOMGEN_SEED", raising=False)
    monkeypatch.delenv("ROOMGEN_ROUND", raising=False)


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.config is None
    assert args.seed is None
    assert args.round_number is None
    assert args.format == "json"
    assert args.strict is False


def test_json_output(capsys):
    assert main(["--seed", "42", "--round", "2"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["round"] == 2
    assert data["bounding_size"] == [14, 12]
    assert "signature" in data


def test_json_output_is_deterministic(capsys):
    main(["--seed", "kitchen"])
    first = capsys.readouterr().out
    main(["--seed", "kitchen"])
    assert capsys.readouterr().out == first


def test_env_seed_used_when_flag_missing(capsys, monkeypatch):
    main(["--seed", "77"])
    flagged = json.loads(capsys.readouterr().out)["signature"]
    monkeypatch.setenv("ROOMGEN_SEED", "77")
    main([])
    assert json.loads(capsys.readouterr().out)["signature"] == flagged


def test_ascii_output(capsys):
    assert main(["--seed", "3", "--format", "ascii"]) == 0
    out = capsys.readouterr().out
    assert out.count("@") == 1
    assert "C" in out
    assert "#" in out


def test_bad_config_path(tmp_path, capsys):
    assert main(["--config", str(tmp_path / "missing.yaml")]) == 1
    assert "error:" in capsys.readouterr().err


def test_render_marks_every_room_cell(square_settings, simple_catalog):
    room = RoomGenerator(square_settings, simple_catalog, seed=8).generate()
    lines = render_ascii(room).splitlines()
    assert len(lines) == 10
    assert all(len(line) == 10 for line in lines)
    assert lines[0] == "#" * 10
    assert lines[-1] == "#" * 10
    text = "".join(lines)
    assert text.count("C") == 1
    assert text.count("R") == 4
    assert text.count("@") == 1
    assert text.count(".") == 64 - 5 - 1
