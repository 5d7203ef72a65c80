from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple
import logging

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]


@dataclass(frozen=True)
class Size:
    width: int
    height: int


class BoolGrid:
    """
    A dense, owned boolean grid addressed by integer (x, y).

    Coordinate system is 0-based: x in [0, width), y in [0, height), y grows up
    (row 0 is the bottom row). Reads outside the grid return False so neighbour
    and footprint scans never need their own bounds checks; writes outside the
    grid raise IndexError.
    """

    def __init__(self, width: int, height: int, default: bool = False) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("BoolGrid width/height must be > 0")
        self._size = Size(width, height)
        self._cells: List[List[bool]] = [[default for _ in range(width)] for _ in range(height)]

    @property
    def size(self) -> Size:
        return self._size

    @property
    def width(self) -> int:
        return self._size.width

    @property
    def height(self) -> int:
        return self._size.height

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> bool:
        if not self.in_bounds(x, y):
            return False
        return self._cells[y][x]

    def set(self, x: int, y: int, value: bool) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(f"Cell ({x},{y}) out of bounds for {self.width}x{self.height} grid")
        self._cells[y][x] = bool(value)

    def __getitem__(self, cell: Cell) -> bool:
        return self.get(cell[0], cell[1])

    def __setitem__(self, cell: Cell, value: bool) -> None:
        self.set(cell[0], cell[1], value)

    def cells(self) -> Iterator[Cell]:
        """Yield every True cell, column-major (x outer, y inner)."""
        for x in range(self.width):
            for y in range(self.height):
                if self._cells[y][x]:
                    yield (x, y)

    def count(self) -> int:
        return sum(sum(1 for v in row if v) for row in self._cells)

    def copy(self) -> "BoolGrid":
        clone = BoolGrid(self.width, self.height)
        clone._cells = [row[:] for row in self._cells]
        return clone

    def rows(self) -> List[Tuple[bool, ...]]:
        """Immutable snapshot of the grid, bottom row first."""
        return [tuple(row) for row in self._cells]

    @classmethod
    def from_ascii(cls, rows: Sequence[str], true_chars: Sequence[str] = ("#",)) -> "BoolGrid":
        """
        Build a grid from ASCII rows for tests/tools. The first row is the top of the
        grid (highest y), matching how the rows read on screen.
        """
        if not rows:
            raise ValueError("rows must not be empty")
        height = len(rows)
        width = len(rows[0])
        for r in rows:
            if len(r) != width:
                raise ValueError("All rows must be same width")
        grid = cls(width, height)
        true_set = set(true_chars)
        for row_index, row in enumerate(rows):
            y = height - 1 - row_index
            for x, ch in enumerate(row):
                if ch in true_set:
                    grid.set(x, y, True)
        return grid

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoolGrid):
            return NotImplemented
        return self._size == other._size and self._cells == other._cells

    def __repr__(self) -> str:
        return f"BoolGrid({self.width}x{self.height}, true={self.count()})"
