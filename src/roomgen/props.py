from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Sequence, Tuple

from .catalog import Catalog, PropDefinition
from .errors import ConfigurationError, PlacementExhausted
from .grid import BoolGrid, Cell
from .layout import Rect
from .rng import RandomSource

logger = logging.getLogger(__name__)


class Rotation(IntEnum):
    """Counter-clockwise quarter turns about the anchor cell's bottom-left corner."""

    ROTATE_0 = 0
    ROTATE_90 = 90
    ROTATE_180 = 180
    ROTATE_270 = 270

    @property
    def scan_x_right(self) -> bool:
        return self in (Rotation.ROTATE_0, Rotation.ROTATE_270)

    @property
    def scan_y_up(self) -> bool:
        return self in (Rotation.ROTATE_0, Rotation.ROTATE_90)


ALL_ROTATIONS: Tuple[Rotation, ...] = tuple(Rotation)


class PropKind:
    CENTERPIECE = "centerpiece"
    REQUIRED = "required"
    OPTIONAL = "optional"


def placement_rects(prop: PropDefinition, rotation: Rotation, x: int, y: int) -> Tuple[Rect, Rect]:
    """Return (footprint, footprint plus margins) for `prop` anchored at (x, y).

    Margins are defined for the zero-degree rotation and turn with the prop. The x
    scan direction decides whether the footprint grows right of or left of the anchor,
    the y scan direction whether it grows up or down.

    Quarter turns swap the footprint's width and height and carry the margins round
    with it, rather than re-scanning the unturned rectangle in the new directions.
    """
    top, bottom, left, right = prop.top_margin, prop.bottom_margin, prop.left_margin, prop.right_margin
    if rotation in (Rotation.ROTATE_90, Rotation.ROTATE_270):
        span_x, span_y = prop.height, prop.width
    else:
        span_x, span_y = prop.width, prop.height
    footprint = Rect(
        x if rotation.scan_x_right else x - span_x,
        y if rotation.scan_y_up else y - span_y,
        span_x,
        span_y,
    )
    if rotation is Rotation.ROTATE_0:
        low_x, high_x, low_y, high_y = left, right, bottom, top
    elif rotation is Rotation.ROTATE_90:
        low_x, high_x, low_y, high_y = top, bottom, left, right
    elif rotation is Rotation.ROTATE_180:
        low_x, high_x, low_y, high_y = right, left, top, bottom
    else:
        low_x, high_x, low_y, high_y = bottom, top, right, left
    outer = Rect(
        footprint.x - low_x,
        footprint.y - low_y,
        footprint.w + low_x + high_x,
        footprint.h + low_y + high_y,
    )
    return footprint, outer


@dataclass(frozen=True)
class PlacedProp:
    prop_id: str
    kind: str
    anchor: Cell
    rotation: Rotation
    variation: Optional[str]
    footprint: Rect
    bounds: Rect

    def footprint_cells(self) -> List[Cell]:
        return self.footprint.cells()

    def margin_cells(self) -> List[Cell]:
        inner = set(self.footprint.cells())
        return [c for c in self.bounds.cells() if c not in inner]

    def to_dict(self) -> dict:
        return {
            "id": self.prop_id,
            "kind": self.kind,
            "anchor": list(self.anchor),
            "rotation": int(self.rotation),
            "variation": self.variation,
            "footprint": [self.footprint.x, self.footprint.y, self.footprint.w, self.footprint.h],
        }


@dataclass
class PlacementReport:
    required_placed: int = 0
    optional_placed: int = 0
    unplaced_required: List[str] = field(default_factory=list)
    cells_consumed: int = 0

    @property
    def complete(self) -> bool:
        return not self.unplaced_required


@dataclass
class PlacementResult:
    occupied: BoolGrid
    margins: BoolGrid
    props: List[PlacedProp]
    report: PlacementReport


class PropPlacer:
    """Places the centerpiece, then required props, then optional props onto open interior cells.

    Two masks start as copies of the interior:
    - occupied: cells still free for a footprint (spawn points read this one)
    - margins: cells still free for a footprint or a margin

    A placement is feasible only if its whole footprint+margin rectangle is in bounds and
    free in the margin mask. Committing clears the footprint in both masks and the margin
    ring in the margin mask only, so a consumed margin cell can never host a later
    footprint either. The placer owns both masks for the duration of one pass.
    """

    def __init__(self, catalog: Catalog, optional_spawn_probability: float, rng: RandomSource) -> None:
        self.catalog = catalog
        self.optional_spawn_probability = optional_spawn_probability
        self.rng = rng
        self._interior: Optional[BoolGrid] = None
        self._occupied: Optional[BoolGrid] = None
        self._margins: Optional[BoolGrid] = None
        self._props: List[PlacedProp] = []

    def reset(self, interior: BoolGrid) -> None:
        self._interior = interior
        self._occupied = interior.copy()
        self._margins = interior.copy()
        self._props = []

    @property
    def occupied(self) -> BoolGrid:
        if self._occupied is None:
            raise RuntimeError("PropPlacer.reset() must be called before placing props")
        return self._occupied

    @property
    def margins(self) -> BoolGrid:
        if self._margins is None:
            raise RuntimeError("PropPlacer.reset() must be called before placing props")
        return self._margins

    @property
    def props(self) -> List[PlacedProp]:
        return list(self._props)

    def place_all(self, interior: BoolGrid, center: Cell, strict: bool = False) -> PlacementResult:
        self.reset(interior)
        report = PlacementReport()
        self.place_centerpiece(center)
        unplaced = self.place_required()
        report.required_placed = sum(1 for p in self._props if p.kind == PropKind.REQUIRED)
        report.unplaced_required = unplaced
        report.optional_placed = self.place_optional()
        report.cells_consumed = interior.count() - self.occupied.count()

        logger.info(
            "Placed %d props (required=%d optional=%d), %d cells consumed, %d open cells left",
            len(self._props),
            report.required_placed,
            report.optional_placed,
            report.cells_consumed,
            self.occupied.count(),
        )
        if unplaced and strict:
            raise PlacementExhausted(unplaced)
        return PlacementResult(occupied=self.occupied, margins=self.margins, props=self.props, report=report)

    def feasible(self, prop: PropDefinition, rotation: Rotation, x: int, y: int) -> Optional[Tuple[Rect, Rect]]:
        """Return the placement rectangles if every cell they cover is in bounds and free of margins."""
        footprint, outer = placement_rects(prop, rotation, x, y)
        margins = self.margins
        for cx in range(outer.x, outer.x + outer.w):
            for cy in range(outer.y, outer.y + outer.h):
                # BoolGrid.get() is False outside the grid
                if not margins.get(cx, cy):
                    return None
        return footprint, outer

    def first_feasible_rotation(
        self, prop: PropDefinition, rotation_enabled: bool, x: int, y: int
    ) -> Optional[Tuple[Rotation, Rect, Rect]]:
        candidates: Sequence[Rotation] = (
            self.rng.shuffled(ALL_ROTATIONS) if rotation_enabled else (Rotation.ROTATE_0,)
        )
        for rotation in candidates:
            rects = self.feasible(prop, rotation, x, y)
            if rects is not None:
                return rotation, rects[0], rects[1]
        return None

    def commit(
        self, prop: PropDefinition, kind: str, anchor: Cell, rotation: Rotation, footprint: Rect, outer: Rect
    ) -> PlacedProp:
        for cell in outer.cells():
            self.margins[cell] = False
        for cell in footprint.cells():
            self.occupied[cell] = False
        placed = PlacedProp(
            prop_id=prop.id,
            kind=kind,
            anchor=anchor,
            rotation=rotation,
            variation=prop.choose_variation(self.rng),
            footprint=footprint,
            bounds=outer,
        )
        self._props.append(placed)
        logger.debug("Placed %s prop %s at %s rot=%d", kind, prop.id, anchor, int(rotation))
        return placed

    def place_centerpiece(self, center: Cell) -> PlacedProp:
        prop = self.catalog.centerpiece
        x, y = center
        rects = self.feasible(prop, Rotation.ROTATE_0, x, y)
        if rects is None:
            raise ConfigurationError(
                f"Centerpiece {prop.id!r} cannot be placed at the room center {center}; "
                "reduce its size or margins, or enlarge the base room"
            )
        return self.commit(prop, PropKind.CENTERPIECE, center, Rotation.ROTATE_0, rects[0], rects[1])

    def open_cells(self) -> List[Cell]:
        return self.rng.shuffled(list(self.occupied.cells()))

    def place_required(self) -> List[str]:
        """Scan shuffled open cells once; returns ids of required instances left unplaced."""
        remaining = self.rng.shuffled(self.catalog.required_instances())
        for x, y in self.open_cells():
            if not remaining:
                break
            if not self.occupied.get(x, y):
                continue
            for index, required in enumerate(remaining):
                hit = self.first_feasible_rotation(required.prop, required.rotation_enabled, x, y)
                if hit is None:
                    continue
                rotation, footprint, outer = hit
                self.commit(required.prop, PropKind.REQUIRED, (x, y), rotation, footprint, outer)
                del remaining[index]
                break

        unplaced = [r.prop.id for r in remaining]
        if unplaced:
            logger.error(
                "Not all required props could be placed (%d missing: %s); check prop margins or room size",
                len(unplaced),
                ", ".join(unplaced),
            )
        return unplaced

    def place_optional(self) -> int:
        """Gate each open cell, then try shuffled optional props until one is feasible and passes its roll."""
        optional = self.catalog.optional_props
        if not optional:
            return 0
        placed = 0
        for x, y in self.open_cells():
            if not self.occupied.get(x, y):
                continue
            if self.rng.percent() > self.optional_spawn_probability:
                continue
            for candidate in self.rng.shuffled(optional):
                hit = self.first_feasible_rotation(candidate.prop, candidate.rotation_enabled, x, y)
                if hit is None:
                    continue
                if self.rng.percent() > candidate.spawn_probability:
                    continue
                rotation, footprint, outer = hit
                self.commit(candidate.prop, PropKind.OPTIONAL, (x, y), rotation, footprint, outer)
                placed += 1
                break
        if placed == 0 and self.optional_spawn_probability > 0:
            logger.warning("Optional pass placed no props")
        return placed


__all__ = [
    "ALL_ROTATIONS",
    "PlacedProp",
    "PlacementReport",
    "PlacementResult",
    "PropKind",
    "PropPlacer",
    "Rotation",
    "placement_rects",
]
