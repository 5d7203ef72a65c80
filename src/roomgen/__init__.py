"""Procedural arena room generation: layout, interior, props and spawn points."""

from importlib.metadata import PackageNotFoundError, version

from .catalog import Catalog, OptionalProp, PropDefinition, RequiredProp, TileDefinition, WeightedTileSet
from .config import GenerationConfig, RoomSettings, load_config, load_default_config
from .errors import ConfigurationError, PlacementExhausted, QuerySpaceEmpty, RoomGenError
from .generator import GeneratedRoom, RoomGenerator, generate_room

try:
    __version__ = version("roomgen")
except PackageNotFoundError:  # pragma: no cover - during tests without packaging
    __version__ = "0.0.0"

__all__ = [
    "Catalog",
    "ConfigurationError",
    "GeneratedRoom",
    "GenerationConfig",
    "OptionalProp",
    "PlacementExhausted",
    "PropDefinition",
    "QuerySpaceEmpty",
    "RequiredProp",
    "RoomGenError",
    "RoomGenerator",
    "RoomSettings",
    "TileDefinition",
    "WeightedTileSet",
    "__version__",
    "generate_room",
    "load_config",
    "load_default_config",
]
