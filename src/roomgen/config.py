from __future__ import annotations

import json
import logging
import os
from copy import deepcopy
from dataclasses import dataclass, replace
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import yaml
from jsonschema import Draft202012Validator, exceptions as js_exceptions, validators

from .catalog import Catalog, OptionalProp, PropDefinition, RequiredProp, TileDefinition, WeightedTileSet
from .errors import ConfigFileError, ConfigurationError

logger = logging.getLogger(__name__)

MIN_BASE_DIMENSION = 4

_DATA_PKG = "roomgen.data"
_SCHEMA_FILE = "room_config.schema.json"
_DEFAULT_CONFIG_FILE = "default_room.yaml"


@dataclass(frozen=True)
class RoomSettings:
    """Room shape and placement knobs.

    - base_width/base_height: size of the base rectangle on round 1 (>= 4).
    - round_size_increment: cells added to both dimensions per round after the first.
    - expansions_*: optional rectangles grown off the base, always overlapping it.
    - optional_spawn_probability: per-cell percent chance the optional pass tries a prop.
    - cell_size/origin: the grid-to-world transform handed to spawn consumers.
    """

    base_width: int
    base_height: int
    round_size_increment: int = 0
    expansions_enabled: bool = False
    expansion_count: int = 0
    min_expansion_width: int = MIN_BASE_DIMENSION
    min_expansion_height: int = MIN_BASE_DIMENSION
    optional_spawn_probability: float = 0.0
    cell_size: float = 1.0
    origin: Tuple[float, float] = (0.0, 0.0)

    def __post_init__(self) -> None:
        if self.base_width < MIN_BASE_DIMENSION or self.base_height < MIN_BASE_DIMENSION:
            raise ConfigurationError(
                f"Base room must be at least {MIN_BASE_DIMENSION}x{MIN_BASE_DIMENSION}, "
                f"got {self.base_width}x{self.base_height}"
            )
        if self.round_size_increment < 0:
            raise ConfigurationError("round_size_increment must be >= 0")
        if self.expansion_count < 0:
            raise ConfigurationError("expansion_count must be >= 0")
        if self.min_expansion_width < 1 or self.min_expansion_height < 1:
            raise ConfigurationError("Minimum expansion dimensions must be >= 1")
        if not 0.0 <= self.optional_spawn_probability <= 100.0:
            raise ConfigurationError("optional_spawn_probability must be within [0, 100]")
        if self.cell_size <= 0:
            raise ConfigurationError("cell_size must be > 0")

    def room_size(self, round_number: int = 1) -> Tuple[int, int]:
        """Room width/height for a round; round 1 uses the base size."""
        if round_number < 1:
            raise ConfigurationError(f"round_number must be >= 1, got {round_number}")
        growth = (round_number - 1) * self.round_size_increment
        return (self.base_width + growth, self.base_height + growth)

    def grid_size(self, round_number: int = 1) -> Tuple[int, int]:
        """Allocated grid size: three rooms per axis bounds every expansion and margin."""
        width, height = self.room_size(round_number)
        return (width * 3, height * 3)


@dataclass(frozen=True)
class GenerationConfig:
    settings: RoomSettings
    catalog: Catalog
    seed: Union[int, str, None] = None
    round_number: int = 1

    def with_env_overrides(self, environ: Optional[Mapping[str, str]] = None) -> "GenerationConfig":
        """Apply ROOMGEN_SEED / ROOMGEN_ROUND from the environment when set."""
        env = os.environ if environ is None else environ
        cfg = self
        seed = env.get("ROOMGEN_SEED")
        if seed:
            cfg = replace(cfg, seed=int(seed) if seed.isdigit() else seed)
        round_raw = env.get("ROOMGEN_ROUND")
        if round_raw:
            try:
                round_number = int(round_raw)
            except ValueError as e:
                raise ConfigurationError(f"ROOMGEN_ROUND must be an integer, got {round_raw!r}") from e
            cfg = replace(cfg, round_number=round_number)
        if cfg is not self:
            logger.info("Applied environment overrides: seed=%r round=%d", cfg.seed, cfg.round_number)
        return cfg


def _extend_with_default(validator_class):
    """Extend a jsonschema validator to set schema defaults onto instances before validating them."""

    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        if isinstance(instance, dict):
            for prop, subschema in properties.items():
                if "default" in subschema and prop not in instance:
                    instance[prop] = deepcopy(subschema["default"])
        for error in validate_properties(validator, properties, instance, schema):
            yield error

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultingValidator = _extend_with_default(Draft202012Validator)


@lru_cache(maxsize=1)
def _load_schema() -> Dict[str, Any]:
    text = resources.files(_DATA_PKG).joinpath(_SCHEMA_FILE).read_text(encoding="utf-8")
    logger.debug("Loaded room config schema resource")
    return json.loads(text)


def _format_schema_errors(errors: Sequence[js_exceptions.ValidationError]) -> str:
    lines = ["schema validation failed:"]
    for err in errors:
        where = ".".join(str(p) for p in err.absolute_path) or "$"
        lines.append(f" - at {where}: {err.message}")
    return "\n".join(lines)


def _parse_prop(raw: Mapping[str, Any]) -> PropDefinition:
    margins = raw.get("margins", {})
    return PropDefinition(
        id=str(raw["id"]),
        width=int(raw["width"]),
        height=int(raw["height"]),
        top_margin=int(margins.get("top", 0)),
        bottom_margin=int(margins.get("bottom", 0)),
        left_margin=int(margins.get("left", 0)),
        right_margin=int(margins.get("right", 0)),
        variations=tuple(str(v) for v in raw.get("variations", [])),
    )


def _parse_tiles(name: str, raw: Sequence[Mapping[str, Any]]) -> WeightedTileSet:
    tiles = tuple(TileDefinition(id=str(t["id"]), spawn_probability=float(t["probability"])) for t in raw)
    return WeightedTileSet(name=name, tiles=tiles)


def build_config(raw: Mapping[str, Any], source: object = "<memory>") -> GenerationConfig:
    """Validate a raw config mapping against the bundled schema and build typed config objects."""
    data = deepcopy(dict(raw))
    validator = DefaultingValidator(_load_schema())
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    if errors:
        for err in errors:
            logger.error("Room config error at %s: %s", list(err.absolute_path), err.message)
        raise ConfigFileError(source, _format_schema_errors(errors), errors)

    room = data["room"]
    expansions = room["expansions"]
    grid = data["grid"]
    settings = RoomSettings(
        base_width=int(room["base_width"]),
        base_height=int(room["base_height"]),
        round_size_increment=int(room["round_size_increment"]),
        expansions_enabled=bool(expansions["enabled"]),
        expansion_count=int(expansions["count"]),
        min_expansion_width=int(expansions["min_width"]),
        min_expansion_height=int(expansions["min_height"]),
        optional_spawn_probability=float(room["optional_spawn_probability"]),
        cell_size=float(grid["cell_size"]),
        origin=(float(grid["origin"][0]), float(grid["origin"][1])),
    )

    props = data["props"]
    required: List[RequiredProp] = [
        RequiredProp(prop=_parse_prop(p), quantity=int(p["quantity"]), rotation_enabled=bool(p["rotation"]))
        for p in props["required"]
    ]
    optional: List[OptionalProp] = [
        OptionalProp(
            prop=_parse_prop(p),
            spawn_probability=float(p["probability"]),
            rotation_enabled=bool(p["rotation"]),
        )
        for p in props["optional"]
    ]
    catalog = Catalog(
        border_tiles=_parse_tiles("border_tiles", data["tiles"]["border"]),
        floor_tiles=_parse_tiles("floor_tiles", data["tiles"]["floor"]),
        centerpiece=_parse_prop(props["centerpiece"]),
        required_props=tuple(required),
        optional_props=tuple(optional),
    )

    generation = data["generation"]
    cfg = GenerationConfig(
        settings=settings,
        catalog=catalog,
        seed=generation["seed"],
        round_number=int(generation["round"]),
    )
    logger.debug(
        "Built room config from %s: base=%dx%d required=%d optional=%d",
        source,
        settings.base_width,
        settings.base_height,
        len(required),
        len(optional),
    )
    return cfg


def _parse_yaml(text: str, source: object) -> Mapping[str, Any]:
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigFileError(source, f"invalid YAML: {e}") from e
    if not isinstance(raw, Mapping):
        raise ConfigFileError(source, "root must be a mapping")
    return raw


def load_config(path: Union[str, Path]) -> GenerationConfig:
    """Load a room configuration YAML file."""
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigFileError(config_path, "config file not found")
    with config_path.open("r", encoding="utf-8") as f:
        text = f.read()
    logger.debug("Loaded room config from path: %s", config_path)
    return build_config(_parse_yaml(text, config_path), source=config_path)


def load_default_config() -> GenerationConfig:
    """Load the room configuration bundled with the package."""
    text = resources.files(_DATA_PKG).joinpath(_DEFAULT_CONFIG_FILE).read_text(encoding="utf-8")
    logger.debug("Loaded embedded default room config resource")
    return build_config(_parse_yaml(text, _DEFAULT_CONFIG_FILE), source=_DEFAULT_CONFIG_FILE)


__all__ = [
    "GenerationConfig",
    "RoomSettings",
    "build_config",
    "load_config",
    "load_default_config",
]
