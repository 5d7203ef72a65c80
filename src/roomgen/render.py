from __future__ import annotations

from typing import Dict, List

from .generator import GeneratedRoom
from .grid import Cell
from .props import PropKind

WALL = "#"
FLOOR = "."
MARGIN = ","
PLAYER = "@"
EMPTY = " "

_PROP_CHARS = {PropKind.CENTERPIECE: "C", PropKind.REQUIRED: "R", PropKind.OPTIONAL: "o"}


def render_ascii(room: GeneratedRoom) -> str:
    """Render the room cropped to its room cells, top row first.

    '#' wall, '.' open floor, ',' floor reserved by a prop margin, 'C'/'R'/'o'
    centerpiece/required/optional footprints, '@' player spawn.
    """
    cells = list(room.layout.cells.cells())
    if not cells:
        return ""
    min_x = min(x for x, _ in cells)
    max_x = max(x for x, _ in cells)
    min_y = min(y for _, y in cells)
    max_y = max(y for _, y in cells)

    footprints: Dict[Cell, str] = {}
    for prop in room.props:
        for cell in prop.footprint_cells():
            footprints[cell] = _PROP_CHARS.get(prop.kind, "?")

    lines: List[str] = []
    for y in range(max_y, min_y - 1, -1):
        row: List[str] = []
        for x in range(min_x, max_x + 1):
            cell = (x, y)
            if cell == room.player_cell:
                row.append(PLAYER)
            elif cell in footprints:
                row.append(footprints[cell])
            elif room.interior[cell]:
                row.append(FLOOR if room.margins[cell] else MARGIN)
            elif room.layout.cells[cell]:
                row.append(WALL)
            else:
                row.append(EMPTY)
        lines.append("".join(row).rstrip())
    return "\n".join(lines)


__all__ = ["render_ascii"]
