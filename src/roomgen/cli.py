from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .config import GenerationConfig, load_config, load_default_config
from .errors import RoomGenError
from .generator import generate_room
from .logging_config import configure_logging
from .render import render_ascii

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="roomgen", description="Generate a procedural arena room")
    p.add_argument("--config", type=Path, default=None, help="Room config YAML (defaults to the bundled config)")
    p.add_argument("--seed", default=None, help="Master seed (int or string); random when omitted")
    p.add_argument("--round", dest="round_number", type=int, default=None, help="Round number (>= 1)")
    p.add_argument("--format", choices=("json", "ascii"), default="json", help="Output format")
    p.add_argument("--strict", action="store_true", help="Fail when a required prop cannot be placed")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p


def _resolve_config(args: argparse.Namespace) -> GenerationConfig:
    config = load_config(args.config) if args.config else load_default_config()
    config = config.with_env_overrides()
    if args.seed is not None:
        seed = int(args.seed) if args.seed.isdigit() else args.seed
        config = replace(config, seed=seed)
    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(debug=args.debug)

    try:
        config = _resolve_config(args)
        room = generate_room(config, round_number=args.round_number, strict=args.strict)
    except RoomGenError as e:
        logger.error("Room generation failed: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.format == "json":
        # sorted so runs can be diffed
        print(json.dumps(room.to_dict(), indent=2, sort_keys=True))
    else:
        print(render_ascii(room))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
