from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .catalog import WeightedTileSet
from .config import RoomSettings
from .errors import ConfigurationError
from .grid import BoolGrid, Cell
from .rng import RandomSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    w: int
    h: int

    def cells(self) -> List[Cell]:
        return [(x, y) for x in range(self.x, self.x + self.w) for y in range(self.y, self.y + self.h)]

    def overlaps(self, other: "Rect") -> bool:
        return not (
            self.x + self.w <= other.x
            or other.x + other.w <= self.x
            or self.y + self.h <= other.y
            or other.y + other.h <= self.y
        )


@dataclass
class RoomLayout:
    """Room cells (base rectangle plus expansions) and the border tile chosen for each."""

    room_width: int
    room_height: int
    cells: BoolGrid
    border_tiles: Dict[Cell, str] = field(default_factory=dict)
    base: Rect = Rect(0, 0, 0, 0)
    expansions: Tuple[Rect, ...] = ()

    @property
    def grid_width(self) -> int:
        return self.cells.width

    @property
    def grid_height(self) -> int:
        return self.cells.height

    @property
    def center(self) -> Cell:
        return (self.grid_width // 2, self.grid_height // 2)


def expansion_anchor_range(room_dimension: int, expansion_dimension: int) -> Tuple[int, int]:
    """Inclusive anchor range keeping an expansion overlapping the base rectangle.

    The base spans [room, 2*room) on this axis. Anchors in the returned range keep at
    least one shared row/column with the base and stay inside the 3x grid.
    """
    return (room_dimension - expansion_dimension + 3, room_dimension * 2 - 3)


class GridLayoutBuilder:
    """Builds the outer room shape: a centered base rectangle plus optional expansions.

    Every room cell gets a border tile sampled from the weighted border set. Expansions
    pick a random size in [min, room] per axis and an anchor that always overlaps the
    base, then fill only cells that are still empty.
    """

    def __init__(self, settings: RoomSettings, border_tiles: WeightedTileSet, rng: RandomSource) -> None:
        self.settings = settings
        self.border_tiles = border_tiles
        self.rng = rng

    def validate(self, room_width: int, room_height: int) -> None:
        """Raise ConfigurationError when the expansion constraints leave no valid anchor."""
        s = self.settings
        if not s.expansions_enabled:
            return
        for axis, room_dim, min_dim in (
            ("width", room_width, s.min_expansion_width),
            ("height", room_height, s.min_expansion_height),
        ):
            if min_dim > room_dim:
                raise ConfigurationError(
                    f"Minimum expansion {axis} ({min_dim}) exceeds the room {axis} ({room_dim}); "
                    "expansions would not fit inside the room bounds"
                )
            # narrowest expansion has the tightest anchor interval
            lo, hi = expansion_anchor_range(room_dim, min_dim)
            if lo > hi:
                raise ConfigurationError(f"No valid expansion anchor along the {axis} axis for room {axis} {room_dim}")

    def build(self, round_number: int = 1) -> RoomLayout:
        room_width, room_height = self.settings.room_size(round_number)
        self.validate(room_width, room_height)
        grid_width, grid_height = room_width * 3, room_height * 3

        layout = RoomLayout(
            room_width=room_width,
            room_height=room_height,
            cells=BoolGrid(grid_width, grid_height),
            base=Rect(room_width, room_height, room_width, room_height),
        )
        logger.debug(
            "Building room layout: round=%d room=%dx%d grid=%dx%d",
            round_number,
            room_width,
            room_height,
            grid_width,
            grid_height,
        )

        for cell in layout.base.cells():
            self._fill(layout, cell)

        if self.settings.expansions_enabled:
            expansions: List[Rect] = []
            for _ in range(self.settings.expansion_count):
                rect = self._pick_expansion(room_width, room_height)
                added = 0
                for cell in rect.cells():
                    if not layout.cells[cell]:
                        self._fill(layout, cell)
                        added += 1
                expansions.append(rect)
                logger.debug("Expansion %s added %d cells", rect, added)
            layout.expansions = tuple(expansions)

        logger.debug("Room layout has %d cells (%d expansions)", layout.cells.count(), len(layout.expansions))
        return layout

    def _pick_expansion(self, room_width: int, room_height: int) -> Rect:
        s = self.settings
        width = self.rng.randint(s.min_expansion_width, room_width)
        height = self.rng.randint(s.min_expansion_height, room_height)
        x_lo, x_hi = expansion_anchor_range(room_width, width)
        y_lo, y_hi = expansion_anchor_range(room_height, height)
        return Rect(self.rng.randint(x_lo, x_hi), self.rng.randint(y_lo, y_hi), width, height)

    def _fill(self, layout: RoomLayout, cell: Cell) -> None:
        tile = self.border_tiles.sample(self.rng)
        layout.border_tiles[cell] = tile.id
        layout.cells[cell] = True


__all__ = ["GridLayoutBuilder", "Rect", "RoomLayout", "expansion_anchor_range"]
