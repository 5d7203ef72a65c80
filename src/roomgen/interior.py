from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from .catalog import WeightedTileSet
from .grid import BoolGrid, Cell
from .layout import RoomLayout
from .rng import RandomSource

logger = logging.getLogger(__name__)

_NEIGHBOURS_8 = ((-1, -1), (0, -1), (1, -1), (-1, 0), (1, 0), (-1, 1), (0, 1), (1, 1))


def is_enclosed(cells: BoolGrid, x: int, y: int) -> bool:
    """True if (x, y) is a room cell off the grid edge whose 8 neighbours are all room cells."""
    if not cells.get(x, y):
        return False
    if x == 0 or y == 0 or x == cells.width - 1 or y == cells.height - 1:
        return False
    return all(cells.get(x + dx, y + dy) for dx, dy in _NEIGHBOURS_8)


def interior_mask(layout: RoomLayout) -> BoolGrid:
    """Flag every enclosed room cell. The layout is only read, so the result is scan-order independent."""
    mask = BoolGrid(layout.grid_width, layout.grid_height)
    for x, y in layout.cells.cells():
        if is_enclosed(layout.cells, x, y):
            mask.set(x, y, True)
    return mask


@dataclass
class CarvedRoom:
    interior: BoolGrid
    border_tiles: Dict[Cell, str] = field(default_factory=dict)
    floor_tiles: Dict[Cell, str] = field(default_factory=dict)
    wall_cells: List[Cell] = field(default_factory=list)


class InteriorCarver:
    """Hollows the room: enclosed cells lose their border tile and receive a floor tile.

    Room cells that are not enclosed stay solid; they are reported as wall cells so the
    rendering side can put a collider on each.
    """

    def __init__(self, floor_tiles: WeightedTileSet, rng: RandomSource) -> None:
        self.floor_tiles = floor_tiles
        self.rng = rng

    def carve(self, layout: RoomLayout) -> CarvedRoom:
        mask = interior_mask(layout)
        carved = CarvedRoom(interior=mask)
        for cell in layout.cells.cells():
            if mask[cell]:
                continue
            carved.border_tiles[cell] = layout.border_tiles[cell]
            carved.wall_cells.append(cell)

        for cell in mask.cells():
            carved.floor_tiles[cell] = self.floor_tiles.sample(self.rng).id

        logger.debug("Carved interior: %d floor cells, %d wall cells", len(carved.floor_tiles), len(carved.wall_cells))
        return carved


__all__ = ["CarvedRoom", "InteriorCarver", "interior_mask", "is_enclosed"]
