"""Scan the Sun's declination for equinoxes and solstices."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Callable, List, Optional, Tuple

from joblib import Parallel, cpu_count, delayed

from .astro import apparent_solar_declination
from .interpolate import extremum

__all__ = [
    "SeasonalEvent",
    "SeasonalEventKind",
    "SeasonalMarkerScanner",
    "calculate_equinoxes_and_solstices",
]

LOGGER = logging.getLogger(__name__)

DeclinationFunction = Callable[[float], float]


class SeasonalEventKind(str, Enum):
    """The four seasonal markers."""

    northward_equinox = "northward_equinox"
    southward_equinox = "southward_equinox"
    northern_solstice = "northern_solstice"
    southern_solstice = "southern_solstice"


@dataclass(frozen=True)
class SeasonalEvent:
    """An equinox or solstice located by :class:`SeasonalMarkerScanner`.

    ``declination`` holds the interpolated extreme declination in degrees for
    solstices and is ``None`` for equinoxes.
    """

    kind: SeasonalEventKind
    jd: float
    declination: Optional[float] = None

    @property
    def is_solstice(self) -> bool:
        return self.kind in (
            SeasonalEventKind.northern_solstice,
            SeasonalEventKind.southern_solstice,
        )


class SeasonalMarkerScanner:
    """Step through Julian Dates and refine declination sign changes and extrema.

    Parameters
    ----------
    declination:
        Optional callable returning the declination in degrees for a Julian
        Date. When omitted the apparent solar declination is sampled, honouring
        the ``high_precision`` flag passed to :meth:`calculate`.
    """

    def __init__(self, declination: Optional[DeclinationFunction] = None) -> None:
        self._declination = declination

    def _sampler(self, high_precision: bool) -> DeclinationFunction:
        if self._declination is not None:
            return self._declination
        return partial(apparent_solar_declination, high_precision=high_precision)

    def calculate(
        self,
        start_jd: float,
        end_jd: float,
        step_interval: float,
        high_precision: bool = True,
    ) -> List[SeasonalEvent]:
        """Return the seasonal markers in ``[start_jd, end_jd)`` in time order.

        Parameters
        ----------
        start_jd, end_jd:
            Range to search; ``start_jd`` must be less than ``end_jd``.
        step_interval:
            Sampling step in days, strictly positive.
        high_precision:
            Accuracy mode forwarded to the solar position computation.
        """

        sample = self._sampler(high_precision)
        events: List[SeasonalEvent] = []

        # Two extra samples past end_jd so events just before it can still be detected.
        scan_end_jd = end_jd + step_interval + step_interval
        jd = start_jd
        jd0: Optional[float] = None
        y0: Optional[float] = None
        y1: Optional[float] = None
        samples = 0
        while jd < scan_end_jd:
            y = sample(jd)
            samples += 1

            if y0 is not None:
                kind: Optional[SeasonalEventKind] = None
                if y0 < 0 <= y:
                    kind = SeasonalEventKind.northward_equinox
                elif y0 > 0 >= y:
                    kind = SeasonalEventKind.southward_equinox
                if kind is not None:
                    fraction = (0 - y0) / (y - y0)
                    event_jd = jd0 + fraction * step_interval
                    if event_jd < end_jd:
                        events.append(SeasonalEvent(kind, event_jd))

            if y0 is not None and y1 is not None:
                kind = None
                if y0 > y and y0 > y1:
                    kind = SeasonalEventKind.northern_solstice
                elif y0 < y and y0 < y1:
                    kind = SeasonalEventKind.southern_solstice
                if kind is not None:
                    value, fraction = extremum(y1, y0, y)
                    event_jd = jd - step_interval + fraction * step_interval
                    if event_jd < end_jd:
                        events.append(SeasonalEvent(kind, event_jd, value))

            y1, y0, jd0 = y0, y, jd
            jd += step_interval

        LOGGER.debug(
            json.dumps(
                {
                    "event": "seasons_scanned",
                    "start_jd": start_jd,
                    "end_jd": end_jd,
                    "step": step_interval,
                    "samples": samples,
                    "found": len(events),
                }
            )
        )
        return events

    def calculate_parallel(
        self,
        start_jd: float,
        end_jd: float,
        step_interval: float,
        high_precision: bool = True,
        n_jobs: Optional[int] = None,
        backend: Optional[str] = None,
    ) -> List[SeasonalEvent]:
        """Same result as :meth:`calculate`, scanning sub-ranges with joblib.

        The range is cut into step-aligned chunks, one per worker. Each chunk
        after the first starts two steps early so its sample window is full at
        its lower bound, and drops events refined before that bound; those
        belong to the preceding chunk.
        """

        workers = cpu_count() if n_jobs is None else n_jobs
        total_steps = max(1, math.ceil((end_jd - start_jd) / step_interval))
        workers = max(1, min(workers, total_steps))
        if workers == 1:
            return self.calculate(start_jd, end_jd, step_interval, high_precision)

        chunk_steps = math.ceil(total_steps / workers)
        bounds: List[Tuple[float, float]] = []
        first_step = 0
        while first_step < total_steps:
            lower = start_jd + first_step * step_interval
            upper = min(start_jd + (first_step + chunk_steps) * step_interval, end_jd)
            bounds.append((lower, upper))
            first_step += chunk_steps

        results = Parallel(n_jobs=len(bounds), backend=backend)(
            delayed(_scan_chunk)(self, lower, upper, step_interval, high_precision, index > 0)
            for index, (lower, upper) in enumerate(bounds)
        )
        events = [event for chunk in results for event in chunk]
        LOGGER.debug(
            json.dumps(
                {
                    "event": "seasons_scanned_parallel",
                    "start_jd": start_jd,
                    "end_jd": end_jd,
                    "chunks": len(bounds),
                    "found": len(events),
                }
            )
        )
        return events


def _scan_chunk(
    scanner: SeasonalMarkerScanner,
    lower: float,
    upper: float,
    step_interval: float,
    high_precision: bool,
    seeded: bool,
) -> List[SeasonalEvent]:
    if not seeded:
        return scanner.calculate(lower, upper, step_interval, high_precision)
    events = scanner.calculate(
        lower - 2 * step_interval, upper, step_interval, high_precision
    )
    return [event for event in events if event.jd >= lower]


def calculate_equinoxes_and_solstices(
    start_jd: float,
    end_jd: float,
    step_interval: float,
    high_precision: bool = True,
) -> List[SeasonalEvent]:
    """Find the Sun's equinoxes and solstices in ``[start_jd, end_jd)``."""

    return SeasonalMarkerScanner().calculate(
        start_jd, end_jd, step_interval, high_precision
    )
