from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .catalog import Catalog
from .config import GenerationConfig, RoomSettings
from .errors import ConfigurationError, QuerySpaceEmpty
from .grid import BoolGrid, Cell
from .interior import InteriorCarver
from .layout import GridLayoutBuilder, RoomLayout
from .props import PlacedProp, PlacementReport, PropPlacer
from .rng import RNGManager, SeedLike
from .spawn import GridTransform, SpawnSelector, WorldPoint

logger = logging.getLogger(__name__)


@dataclass
class GeneratedRoom:
    """Everything one generation pass produced, plus the enemy-spawn query for later use."""

    round_number: int
    seed_hex: str
    layout: RoomLayout
    interior: BoolGrid
    border_tiles: Dict[Cell, str]
    floor_tiles: Dict[Cell, str]
    wall_cells: List[Cell]
    occupied: BoolGrid
    margins: BoolGrid
    props: List[PlacedProp]
    report: PlacementReport
    transform: GridTransform
    spawner: SpawnSelector
    player_spawn: WorldPoint

    @property
    def player_cell(self) -> Cell:
        cell = self.spawner.player_cell
        assert cell is not None
        return cell

    @property
    def bounding_size(self) -> Tuple[int, int]:
        """Outer room size used downstream for clamping and off-screen checks."""
        return (self.layout.room_width, self.layout.room_height)

    def navigation_bounds(self) -> Tuple[WorldPoint, WorldPoint]:
        """(center, size) in world units of the whole grid, for the pathfinding scan that follows generation."""
        size = (
            self.layout.grid_width * self.transform.cell_size,
            self.layout.grid_height * self.transform.cell_size,
        )
        center = (self.transform.origin[0] + size[0] / 2.0, self.transform.origin[1] + size[1] / 2.0)
        return center, size

    def enemy_spawn(self, point: WorldPoint, radius: int) -> WorldPoint:
        return self.spawner.enemy_spawn(point, radius)

    def prop_world_anchor(self, prop: PlacedProp) -> WorldPoint:
        return self.transform.cell_corner(prop.anchor)

    def signature(self) -> str:
        """Deterministic digest of tiles, props and spawn."""
        payload = {
            "round": self.round_number,
            "border": sorted([list(c), t] for c, t in self.border_tiles.items()),
            "floor": sorted([list(c), t] for c, t in self.floor_tiles.items()),
            "props": [p.to_dict() for p in self.props],
            "player": list(self.player_cell),
        }
        raw = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
        return hashlib.blake2b(raw, digest_size=16).hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        center, size = self.navigation_bounds()
        return {
            "seed_hex": self.seed_hex,
            "round": self.round_number,
            "bounding_size": list(self.bounding_size),
            "grid_size": [self.layout.grid_width, self.layout.grid_height],
            "room_cells": self.layout.cells.count(),
            "interior_cells": self.interior.count(),
            "open_cells": self.occupied.count(),
            "wall_cells": len(self.wall_cells),
            "expansions": [[r.x, r.y, r.w, r.h] for r in self.layout.expansions],
            "props": [p.to_dict() for p in self.props],
            "placement": {
                "required_placed": self.report.required_placed,
                "optional_placed": self.report.optional_placed,
                "unplaced_required": list(self.report.unplaced_required),
                "cells_consumed": self.report.cells_consumed,
            },
            "player_spawn": {"cell": list(self.player_cell), "world": list(self.player_spawn)},
            "navigation_bounds": {"center": list(center), "size": list(size)},
            "signature": self.signature(),
        }


class RoomGenerator:
    """Runs layout -> interior -> props -> player spawn for one round.

    Each stage draws from its own stream derived from (seed, stage, round), so the same
    seed and round always rebuild the same room.
    """

    def __init__(self, settings: RoomSettings, catalog: Catalog, seed: SeedLike = None) -> None:
        self.settings = settings
        self.catalog = catalog
        self.rngm = RNGManager(seed)

    @classmethod
    def from_config(cls, config: GenerationConfig) -> "RoomGenerator":
        return cls(config.settings, config.catalog, config.seed)

    def generate(self, round_number: int = 1, strict: bool = False) -> GeneratedRoom:
        logger.debug("Generating room for round %d", round_number)
        builder = GridLayoutBuilder(
            self.settings, self.catalog.border_tiles, self.rngm.context_rng("room_layout", round_number)
        )
        layout = builder.build(round_number)

        carver = InteriorCarver(self.catalog.floor_tiles, self.rngm.context_rng("interior", round_number))
        carved = carver.carve(layout)

        placer = PropPlacer(
            self.catalog, self.settings.optional_spawn_probability, self.rngm.context_rng("props", round_number)
        )
        placement = placer.place_all(carved.interior, layout.center, strict=strict)

        transform = GridTransform(origin=self.settings.origin, cell_size=self.settings.cell_size)
        spawner = SpawnSelector(placement.occupied, transform, self.rngm.context_rng("spawn", round_number))
        try:
            player_spawn = spawner.player_spawn()
        except QuerySpaceEmpty as e:
            raise ConfigurationError(
                f"Props filled every open cell of the round {round_number} room; "
                "lower optional_spawn_probability or add prop margins to leave room for the player"
            ) from e

        room = GeneratedRoom(
            round_number=round_number,
            seed_hex=self.rngm.get_master_seed_hex(),
            layout=layout,
            interior=carved.interior,
            border_tiles=carved.border_tiles,
            floor_tiles=carved.floor_tiles,
            wall_cells=carved.wall_cells,
            occupied=placement.occupied,
            margins=placement.margins,
            props=placement.props,
            report=placement.report,
            transform=transform,
            spawner=spawner,
            player_spawn=player_spawn,
        )
        logger.info(
            "Generated round %d room %dx%d: %d props, player spawn at %s",
            round_number,
            layout.room_width,
            layout.room_height,
            len(room.props),
            room.player_cell,
        )
        return room


def generate_room(config: GenerationConfig, round_number: Optional[int] = None, strict: bool = False) -> GeneratedRoom:
    """High-level API: build a room from a loaded config."""
    generator = RoomGenerator.from_config(config)
    return generator.generate(config.round_number if round_number is None else round_number, strict=strict)


__all__ = ["GeneratedRoom", "RoomGenerator", "generate_room"]
