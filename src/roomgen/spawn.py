from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .errors import QuerySpaceEmpty
from .grid import BoolGrid, Cell
from .rng import RandomSource

logger = logging.getLogger(__name__)

WorldPoint = Tuple[float, float]


@dataclass(frozen=True)
class GridTransform:
    """Grid-to-world mapping owned by the rendering side: world origin of cell (0, 0) plus cell size."""

    origin: WorldPoint = (0.0, 0.0)
    cell_size: float = 1.0

    def cell_corner(self, cell: Cell) -> WorldPoint:
        """Bottom-left corner of a cell; props are anchored here."""
        return (self.origin[0] + cell[0] * self.cell_size, self.origin[1] + cell[1] * self.cell_size)

    def cell_center(self, cell: Cell) -> WorldPoint:
        x, y = self.cell_corner(cell)
        half = self.cell_size / 2.0
        return (x + half, y + half)

    def world_to_cell(self, point: WorldPoint) -> Cell:
        return (
            int(math.floor((point[0] - self.origin[0]) / self.cell_size)),
            int(math.floor((point[1] - self.origin[1]) / self.cell_size)),
        )


class SpawnSelector:
    """Picks spawn cells from whatever the prop passes left open.

    The player spawn is chosen once and cached. Enemy queries can run any time after
    generation; they only read the occupied mask and never hand out the player's cell.
    """

    def __init__(self, occupied: BoolGrid, transform: GridTransform, rng: RandomSource) -> None:
        self.occupied = occupied
        self.transform = transform
        self.rng = rng
        self._player_cell: Optional[Cell] = None

    @property
    def player_cell(self) -> Optional[Cell]:
        return self._player_cell

    def player_spawn(self) -> WorldPoint:
        if self._player_cell is None:
            candidates = list(self.occupied.cells())
            if not candidates:
                raise QuerySpaceEmpty()
            self._player_cell = self.rng.choice(candidates)
            logger.debug("Player spawn cell %s chosen from %d open cells", self._player_cell, len(candidates))
        return self.transform.cell_center(self._player_cell)

    def window_cells(self, center: Cell, radius: int) -> List[Cell]:
        """Open cells in [center-radius, center+radius) on both axes, minus the player cell."""
        cx, cy = center
        x_lo, x_hi = max(0, cx - radius), min(self.occupied.width, cx + radius)
        y_lo, y_hi = max(0, cy - radius), min(self.occupied.height, cy + radius)
        cells: List[Cell] = []
        for x in range(x_lo, x_hi):
            for y in range(y_lo, y_hi):
                if self.occupied.get(x, y) and (x, y) != self._player_cell:
                    cells.append((x, y))
        return cells

    def enemy_spawn_cell(self, center: Cell, radius: int) -> Cell:
        if radius < 1:
            raise ValueError(f"Spawn radius must be >= 1, got {radius}")
        candidates = self.window_cells(center, radius)
        if not candidates:
            logger.debug("Enemy spawn query at %s radius=%d found no open cell", center, radius)
            raise QuerySpaceEmpty(center, radius)
        return self.rng.choice(candidates)

    def enemy_spawn(self, point: WorldPoint, radius: int) -> WorldPoint:
        """World-space spawn point near `point`; raises QuerySpaceEmpty when the window is full."""
        cell = self.enemy_spawn_cell(self.transform.world_to_cell(point), radius)
        return self.transform.cell_center(cell)


__all__ = ["GridTransform", "SpawnSelector", "WorldPoint"]
