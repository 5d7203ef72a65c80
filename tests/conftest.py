import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from roomgen.catalog import (  # noqa: E402
    Catalog,
    OptionalProp,
    PropDefinition,
    RequiredProp,
    TileDefinition,
    WeightedTileSet,
)
from roomgen.config import RoomSettings  # noqa: E402


def even_tiles(name: str) -> WeightedTileSet:
    return WeightedTileSet(
        name=name,
        tiles=(TileDefinition(f"{name}_a", 50.0), TileDefinition(f"{name}_b", 50.0)),
    )


@pytest.fixture
def border_tiles() -> WeightedTileSet:
    return even_tiles("border")


@pytest.fixture
def floor_tiles() -> WeightedTileSet:
    return even_tiles("floor")


@pytest.fixture
def lunchbox() -> PropDefinition:
    return PropDefinition("lunchbox", 1, 1, variations=("lunchbox_red", "lunchbox_blue"))


@pytest.fixture
def simple_catalog(border_tiles, floor_tiles, lunchbox) -> Catalog:
    """Centerpiece 1x1, one required 2x2 crate, no optional props."""
    crate = PropDefinition("crate", 2, 2, variations=("crate_wood",))
    return Catalog(
        border_tiles=border_tiles,
        floor_tiles=floor_tiles,
        centerpiece=lunchbox,
        required_props=(RequiredProp(crate, quantity=1),),
    )


@pytest.fixture
def busy_catalog(border_tiles, floor_tiles) -> Catalog:
    """Rotating, margined required and optional props for packing checks."""
    centerpiece = PropDefinition("lunchbox", 1, 1, 1, 1, 1, 1, variations=("lunchbox_red",))
    vending = PropDefinition("vending", 2, 1, top_margin=1, variations=("soda",))
    bin_ = PropDefinition("bin", 1, 1, 1, 1, 1, 1, variations=("green",))
    table = PropDefinition("table", 3, 2, 1, 0, 2, 1, variations=("round",))
    chair = PropDefinition("chair", 1, 1, variations=("plastic",))
    return Catalog(
        border_tiles=border_tiles,
        floor_tiles=floor_tiles,
        centerpiece=centerpiece,
        required_props=(
            RequiredProp(vending, quantity=2, rotation_enabled=True),
            RequiredProp(bin_, quantity=3),
        ),
        optional_props=(
            OptionalProp(table, 40.0, rotation_enabled=True),
            OptionalProp(chair, 60.0, rotation_enabled=True),
        ),
    )


@pytest.fixture
def square_settings() -> RoomSettings:
    return RoomSettings(base_width=10, base_height=10)


@pytest.fixture
def expanding_settings() -> RoomSettings:
    return RoomSettings(
        base_width=12,
        base_height=9,
        round_size_increment=2,
        expansions_enabled=True,
        expansion_count=4,
        min_expansion_width=4,
        min_expansion_height=4,
        optional_spawn_probability=30.0,
    )
