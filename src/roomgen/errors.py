from __future__ import annotations

from typing import Optional, Sequence, Tuple


class RoomGenError(Exception):
    """Base error for room generation domain exceptions."""


class ConfigurationError(RoomGenError):
    """Raised when static configuration makes a playable room impossible."""


class ConfigFileError(ConfigurationError):
    """Raised when a configuration file is missing, unparsable or fails schema validation."""

    def __init__(self, path: object, message: str, errors: Optional[Sequence[object]] = None) -> None:
        self.path = path
        self.errors = list(errors or [])
        super().__init__(f"{path}: {message}")


class PlacementExhausted(RoomGenError):
    """Raised (strict mode) when required props could not be placed after a full cell scan."""

    def __init__(self, unplaced: Sequence[str]) -> None:
        self.unplaced = tuple(unplaced)
        joined = ", ".join(self.unplaced)
        super().__init__(f"{len(self.unplaced)} required prop(s) could not be placed: {joined}")


class QuerySpaceEmpty(RoomGenError):
    """Raised when a spawn query finds no eligible open cell."""

    def __init__(self, center: Optional[Tuple[int, int]] = None, radius: Optional[int] = None) -> None:
        self.center = center
        self.radius = radius
        if center is None:
            message = "No open interior cell available for spawning"
        else:
            message = f"No open cell within radius {radius} of cell {center}"
        super().__init__(message)


__all__ = [
    "RoomGenError",
    "ConfigurationError",
    "ConfigFileError",
    "PlacementExhausted",
    "QuerySpaceEmpty",
]
