import pytest

from roomgen.catalog import TileDefinition, WeightedTileSet
from roomgen.config import RoomSettings
from roomgen.errors import ConfigurationError
from roomgen.layout import GridLayoutBuilder, Rect, expansion_anchor_range
from roomgen.rng import RandomSource


def test_base_rectangle_is_centered(square_settings, border_tiles):
    layout = GridLayoutBuilder(square_settings, border_tiles, RandomSource(seed=1)).build()

    assert (layout.grid_width, layout.grid_height) == (30, 30)
    assert layout.base == Rect(10, 10, 10, 10)
    cells = set(layout.cells.cells())
    assert cells == set(layout.base.cells())
    assert set(layout.border_tiles) == cells
    assert set(layout.border_tiles.values()) <= {"border_a", "border_b"}


def test_border_tiles_follow_weights(square_settings):
    only_brick = WeightedTileSet("border", (TileDefinition("moss", 0.0), TileDefinition("brick", 100.0)))
    layout = GridLayoutBuilder(square_settings, only_brick, RandomSource(seed=7)).build()
    assert set(layout.border_tiles.values()) == {"brick"}


def test_room_grows_with_round(border_tiles):
    settings = RoomSettings(base_width=8, base_height=6, round_size_increment=2)
    assert settings.room_size(1) == (8, 6)
    assert settings.room_size(3) == (12, 10)
    assert settings.grid_size(3) == (36, 30)

    layout = GridLayoutBuilder(settings, border_tiles, RandomSource(seed=2)).build(round_number=3)
    assert (layout.room_width, layout.room_height) == (12, 10)
    assert layout.cells.count() == 120


def test_round_number_must_be_positive():
    with pytest.raises(ConfigurationError):
        RoomSettings(base_width=8, base_height=8).room_size(0)


def test_base_dimensions_must_be_at_least_four():
    with pytest.raises(ConfigurationError):
        RoomSettings(base_width=3, base_height=8)


def test_expansions_stay_in_grid_and_touch_base(expanding_settings, border_tiles):
    for seed in range(30):
        builder = GridLayoutBuilder(expanding_settings, border_tiles, RandomSource(seed=seed))
        layout = builder.build(round_number=1 + seed % 3)

        assert len(layout.expansions) == expanding_settings.expansion_count
        for rect in layout.expansions:
            assert 0 <= rect.x and rect.x + rect.w <= layout.grid_width
            assert 0 <= rect.y and rect.y + rect.h <= layout.grid_height
            assert expanding_settings.min_expansion_width <= rect.w <= layout.room_width
            assert expanding_settings.min_expansion_height <= rect.h <= layout.room_height
            assert rect.overlaps(layout.base)
            for cell in rect.cells():
                assert layout.cells[cell]

        for x, y in layout.cells.cells():
            assert layout.cells.in_bounds(x, y)
        assert set(layout.border_tiles) == set(layout.cells.cells())


def test_expansions_never_overwrite_existing_tiles(expanding_settings, border_tiles):
    base_only = RoomSettings(base_width=12, base_height=9)
    base_layout = GridLayoutBuilder(base_only, border_tiles, RandomSource(seed=4)).build()
    expanded = GridLayoutBuilder(expanding_settings, border_tiles, RandomSource(seed=4)).build()
    # the base is drawn first from the same stream, so expansions must leave it untouched
    for cell in base_layout.base.cells():
        assert expanded.border_tiles[cell] == base_layout.border_tiles[cell]


def test_anchor_range_overlaps_base():
    room = 10
    for width in range(1, room + 1):
        lo, hi = expansion_anchor_range(room, width)
        assert lo <= hi
        assert lo + width > room
        assert hi < room * 2
        assert hi + width <= room * 3


def test_min_expansion_larger_than_room_is_fatal(border_tiles):
    settings = RoomSettings(
        base_width=5,
        base_height=5,
        expansions_enabled=True,
        expansion_count=1,
        min_expansion_width=6,
        min_expansion_height=4,
    )
    builder = GridLayoutBuilder(settings, border_tiles, RandomSource(seed=0))
    with pytest.raises(ConfigurationError, match="width"):
        builder.build()


def test_empty_anchor_interval_is_fatal(border_tiles):
    settings = RoomSettings(
        base_width=4,
        base_height=4,
        expansions_enabled=True,
        expansion_count=1,
        min_expansion_width=1,
        min_expansion_height=4,
    )
    with pytest.raises(ConfigurationError, match="anchor"):
        GridLayoutBuilder(settings, border_tiles, RandomSource(seed=0)).build()


def test_expansion_limits_ignored_when_disabled(border_tiles):
    settings = RoomSettings(base_width=5, base_height=5, min_expansion_width=50, min_expansion_height=50)
    layout = GridLayoutBuilder(settings, border_tiles, RandomSource(seed=0)).build()
    assert layout.cells.count() == 25
