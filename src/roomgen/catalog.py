from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import ConfigurationError
from .rng import RandomSource

logger = logging.getLogger(__name__)

PROBABILITY_TOTAL = 100.0
_TOTAL_TOLERANCE = 1e-6


def weighted_index(probabilities: Sequence[float], u: float) -> int:
    """Return the index of the first entry whose cumulative probability is >= u.

    `u` is a percent roll in [0, 100]. Float rounding can leave the cumulative
    total a hair below 100, in which case the last entry is returned.
    """
    if not probabilities:
        raise ValueError("weighted_index requires at least one probability")
    cumulative = 0.0
    for i, p in enumerate(probabilities):
        cumulative += p
        if u <= cumulative:
            return i
    return len(probabilities) - 1


def validate_probability_total(name: str, probabilities: Iterable[float]) -> None:
    values = list(probabilities)
    for p in values:
        if p < 0 or p > PROBABILITY_TOTAL:
            raise ConfigurationError(f"{name}: probability {p} outside [0, 100]")
    total = sum(values)
    if not math.isclose(total, PROBABILITY_TOTAL, abs_tol=_TOTAL_TOLERANCE):
        raise ConfigurationError(f"{name}: probabilities must sum to 100, got {total:g}")


@dataclass(frozen=True)
class TileDefinition:
    id: str
    spawn_probability: float


@dataclass(frozen=True)
class WeightedTileSet:
    """Weighted tile distribution; probabilities are validated to sum to 100 once, on construction."""

    name: str
    tiles: Tuple[TileDefinition, ...]

    def __post_init__(self) -> None:
        if not self.tiles:
            raise ConfigurationError(f"{self.name}: tile set must not be empty")
        validate_probability_total(self.name, (t.spawn_probability for t in self.tiles))

    def sample(self, rng: RandomSource) -> TileDefinition:
        return self.tiles[weighted_index([t.spawn_probability for t in self.tiles], rng.percent())]


@dataclass(frozen=True)
class PropDefinition:
    """Footprint size, margins (relative to the zero-degree rotation) and visual variations."""

    id: str
    width: int
    height: int
    top_margin: int = 0
    bottom_margin: int = 0
    left_margin: int = 0
    right_margin: int = 0
    variations: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ConfigurationError(f"Prop {self.id!r}: width and height must be >= 1")
        margins = (self.top_margin, self.bottom_margin, self.left_margin, self.right_margin)
        if any(m < 0 for m in margins):
            raise ConfigurationError(f"Prop {self.id!r}: margins must be >= 0")

    def choose_variation(self, rng: RandomSource) -> Optional[str]:
        if not self.variations:
            return None
        return rng.choice(self.variations)


@dataclass(frozen=True)
class RequiredProp:
    prop: PropDefinition
    quantity: int = 1
    rotation_enabled: bool = False

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ConfigurationError(f"Required prop {self.prop.id!r}: quantity must be >= 0")


@dataclass(frozen=True)
class OptionalProp:
    prop: PropDefinition
    spawn_probability: float
    rotation_enabled: bool = False


@dataclass(frozen=True)
class Catalog:
    """Static tile and prop configuration shared by every generated room."""

    border_tiles: WeightedTileSet
    floor_tiles: WeightedTileSet
    centerpiece: PropDefinition
    required_props: Tuple[RequiredProp, ...] = ()
    optional_props: Tuple[OptionalProp, ...] = ()

    def __post_init__(self) -> None:
        if self.optional_props:
            validate_probability_total(
                "optional_props", (p.spawn_probability for p in self.optional_props)
            )
        no_variations = [p.id for p in self._all_props() if not p.variations]
        if no_variations:
            logger.warning("Props without visual variations: %s", ", ".join(sorted(set(no_variations))))

    def _all_props(self) -> List[PropDefinition]:
        props = [self.centerpiece]
        props.extend(r.prop for r in self.required_props)
        props.extend(o.prop for o in self.optional_props)
        return props

    def required_instances(self) -> List[RequiredProp]:
        """Expand required props into one entry per instance to place."""
        instances: List[RequiredProp] = []
        for required in self.required_props:
            instances.extend([required] * required.quantity)
        return instances


__all__ = [
    "Catalog",
    "OptionalProp",
    "PropDefinition",
    "RequiredProp",
    "TileDefinition",
    "WeightedTileSet",
    "validate_probability_total",
    "weighted_index",
]
