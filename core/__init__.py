"""Core astronomical utilities for the Seasons API."""

from .seasons import (
    SeasonalEvent,
    SeasonalEventKind,
    SeasonalMarkerScanner,
    calculate_equinoxes_and_solstices,
)

__all__ = [
    "SeasonalEvent",
    "SeasonalEventKind",
    "SeasonalMarkerScanner",
    "calculate_equinoxes_and_solstices",
]
