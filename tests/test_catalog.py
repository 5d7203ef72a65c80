import pytest

from roomgen.catalog import (
    Catalog,
    OptionalProp,
    PropDefinition,
    RequiredProp,
    TileDefinition,
    WeightedTileSet,
    weighted_index,
)
from roomgen.errors import ConfigurationError
from roomgen.rng import RandomSource


def test_weighted_index_always_valid_for_rolls_in_range():
    sets = [
        [100.0],
        [50.0, 50.0],
        [10.0, 0.0, 90.0],
        [33.3, 33.3, 33.4],
        [0.0, 0.0, 100.0],
    ]
    for probabilities in sets:
        u = 0.0
        while u < 100.0:
            idx = weighted_index(probabilities, u)
            assert 0 <= idx < len(probabilities)
            u += 0.25


def test_weighted_index_picks_first_cumulative_bucket():
    probabilities = [25.0, 25.0, 50.0]
    assert weighted_index(probabilities, 0.0) == 0
    assert weighted_index(probabilities, 25.0) == 0
    assert weighted_index(probabilities, 25.01) == 1
    assert weighted_index(probabilities, 50.5) == 2
    assert weighted_index(probabilities, 100.0) == 2


def test_weighted_index_skips_zero_probability_entries():
    assert weighted_index([0.0, 100.0], 0.5) == 1


def test_tile_set_must_sum_to_100():
    with pytest.raises(ConfigurationError, match="sum to 100"):
        WeightedTileSet("floor", (TileDefinition("a", 60.0), TileDefinition("b", 30.0)))


def test_tile_set_must_not_be_empty():
    with pytest.raises(ConfigurationError):
        WeightedTileSet("floor", ())


def test_tile_set_rejects_out_of_range_probability():
    with pytest.raises(ConfigurationError):
        WeightedTileSet("floor", (TileDefinition("a", 120.0), TileDefinition("b", -20.0)))


def test_tile_set_sampling_follows_weights():
    tiles = WeightedTileSet("floor", (TileDefinition("common", 90.0), TileDefinition("rare", 10.0)))
    rng = RandomSource(seed=42)
    trials = 5000
    rare = sum(1 for _ in range(trials) if tiles.sample(rng).id == "rare")
    p_rare = rare / trials
    assert 0.07 <= p_rare <= 0.13, f"p_rare={p_rare} out of expected range"


def test_certain_tile_always_sampled():
    tiles = WeightedTileSet("border", (TileDefinition("never", 0.0), TileDefinition("always", 100.0)))
    rng = RandomSource(seed=1)
    assert {tiles.sample(rng).id for _ in range(200)} == {"always"}


def test_optional_prop_probabilities_validated(border_tiles, floor_tiles, lunchbox):
    chair = PropDefinition("chair", 1, 1)
    with pytest.raises(ConfigurationError, match="optional_props"):
        Catalog(
            border_tiles=border_tiles,
            floor_tiles=floor_tiles,
            centerpiece=lunchbox,
            optional_props=(OptionalProp(chair, 70.0),),
        )


def test_required_instances_expand_by_quantity(border_tiles, floor_tiles, lunchbox):
    crate = PropDefinition("crate", 1, 1, variations=("wood",))
    bin_ = PropDefinition("bin", 1, 1, variations=("green",))
    catalog = Catalog(
        border_tiles=border_tiles,
        floor_tiles=floor_tiles,
        centerpiece=lunchbox,
        required_props=(RequiredProp(crate, quantity=3), RequiredProp(bin_, quantity=0)),
    )
    ids = [r.prop.id for r in catalog.required_instances()]
    assert ids == ["crate", "crate", "crate"]


def test_prop_definition_validation():
    with pytest.raises(ConfigurationError):
        PropDefinition("bad", 0, 1)
    with pytest.raises(ConfigurationError):
        PropDefinition("bad", 1, 1, left_margin=-1)
    with pytest.raises(ConfigurationError):
        RequiredProp(PropDefinition("ok", 1, 1), quantity=-1)


def test_variation_choice():
    rng = RandomSource(seed=3)
    plain = PropDefinition("plain", 1, 1)
    assert plain.choose_variation(rng) is None
    fancy = PropDefinition("fancy", 1, 1, variations=("a", "b"))
    assert {fancy.choose_variation(rng) for _ in range(50)} == {"a", "b"}


def test_missing_variations_logged(border_tiles, floor_tiles, caplog):
    caplog.set_level("WARNING")
    Catalog(border_tiles=border_tiles, floor_tiles=floor_tiles, centerpiece=PropDefinition("bare", 1, 1))
    assert "without visual variations" in caplog.text
