"""Apparent solar coordinates used to locate equinoxes and solstices."""

from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Tuple

import erfa
import numpy as np

__all__ = [
    "apparent_ecliptic_longitude",
    "apparent_ecliptic_latitude",
    "apparent_solar_declination",
    "ecliptic_to_equatorial",
    "jd_to_datetime",
    "mean_obliquity_of_ecliptic",
    "true_obliquity_of_ecliptic",
]

JD_J2000 = 2451545.0
JD_UNIX_EPOCH = 2440587.5
DAYS_PER_JULIAN_CENTURY = 36525.0
C_AU_PER_DAY = 173.144632674  # Speed of light (AU/day).


def _julian_centuries(jd: float) -> float:
    return (jd - JD_J2000) / DAYS_PER_JULIAN_CENTURY


@lru_cache(maxsize=256)
def _apparent_ecliptic_coordinates(jd: float) -> Tuple[float, float]:
    """Geocentric apparent ecliptic longitude and latitude of the Sun (degrees).

    The geometric direction comes from the ERFA Earth ephemeris, annual
    aberration is applied with the Earth's barycentric velocity, and the
    vector is rotated to the true equator and equinox of date (IAU 2006/2000A)
    and from there onto the true ecliptic of date.
    """

    pvh, pvb = erfa.epv00(jd, 0.0)
    sun = -np.asarray(pvh["p"], dtype=float)
    distance = float(np.linalg.norm(sun))
    velocity = np.asarray(pvb["v"], dtype=float) / C_AU_PER_DAY
    bm1 = math.sqrt(1.0 - float(np.dot(velocity, velocity)))
    apparent = np.asarray(erfa.ab(sun / distance, velocity, distance, bm1), dtype=float)

    x, y, z = np.asarray(erfa.pnm06a(jd, 0.0), dtype=float) @ apparent
    eps = math.radians(true_obliquity_of_ecliptic(jd))
    cos_eps, sin_eps = math.cos(eps), math.sin(eps)
    y_ecl = y * cos_eps + z * sin_eps
    z_ecl = -y * sin_eps + z * cos_eps

    longitude = math.degrees(math.atan2(y_ecl, x)) % 360.0
    latitude = math.degrees(math.atan2(z_ecl, math.hypot(x, y_ecl)))
    return longitude, latitude


def _low_precision_longitude(jd: float) -> float:
    # Mean elements with the equation of centre; ~0.01 degree accuracy.
    t = _julian_centuries(jd)
    mean_longitude = 280.46646 + t * (36000.76983 + 0.0003032 * t)
    mean_anomaly = math.radians(357.52911 + t * (35999.05029 - 0.0001537 * t))
    centre = (
        (1.914602 - t * (0.004817 + 0.000014 * t)) * math.sin(mean_anomaly)
        + (0.019993 - 0.000101 * t) * math.sin(2.0 * mean_anomaly)
        + 0.000289 * math.sin(3.0 * mean_anomaly)
    )
    omega = math.radians(125.04 - 1934.136 * t)
    apparent = mean_longitude + centre - 0.00569 - 0.00478 * math.sin(omega)
    return apparent % 360.0


def apparent_ecliptic_longitude(jd: float, high_precision: bool = True) -> float:
    """Apparent geocentric ecliptic longitude of the Sun in degrees ``[0, 360)``.

    Parameters
    ----------
    jd:
        Julian Date on the TT scale.
    high_precision:
        Use the full ERFA reduction instead of the truncated series.
    """

    if high_precision:
        return _apparent_ecliptic_coordinates(jd)[0]
    return _low_precision_longitude(jd)


def apparent_ecliptic_latitude(jd: float, high_precision: bool = True) -> float:
    """Apparent geocentric ecliptic latitude of the Sun in degrees.

    The truncated series treats the Sun as lying on the ecliptic.
    """

    if high_precision:
        return _apparent_ecliptic_coordinates(jd)[1]
    return 0.0


def mean_obliquity_of_ecliptic(jd: float) -> float:
    """Mean obliquity of the ecliptic (IAU 2006) in degrees."""

    return math.degrees(float(erfa.obl06(jd, 0.0)))


def true_obliquity_of_ecliptic(jd: float) -> float:
    """Mean obliquity plus the IAU 2000A nutation in obliquity, in degrees."""

    _, deps = erfa.nut06a(jd, 0.0)
    return mean_obliquity_of_ecliptic(jd) + math.degrees(float(deps))


def ecliptic_to_equatorial(
    longitude: float, latitude: float, obliquity: float
) -> Tuple[float, float]:
    """Convert ecliptic coordinates to equatorial ones.

    Parameters
    ----------
    longitude, latitude:
        Ecliptic coordinates in degrees.
    obliquity:
        Obliquity of the ecliptic in degrees.

    Returns
    -------
    tuple[float, float]
        Right ascension in hours ``[0, 24)`` and declination in degrees.
    """

    lam = math.radians(longitude)
    beta = math.radians(latitude)
    eps = math.radians(obliquity)
    right_ascension = math.atan2(
        math.sin(lam) * math.cos(eps) - math.tan(beta) * math.sin(eps), math.cos(lam)
    )
    declination = math.asin(
        float(
            np.clip(
                math.sin(beta) * math.cos(eps)
                + math.cos(beta) * math.sin(eps) * math.sin(lam),
                -1.0,
                1.0,
            )
        )
    )
    return (math.degrees(right_ascension) / 15.0) % 24.0, math.degrees(declination)


def apparent_solar_declination(jd: float, high_precision: bool = True) -> float:
    """Apparent declination of the Sun in degrees at Julian Date *jd* (TT)."""

    lam = apparent_ecliptic_longitude(jd, high_precision)
    beta = apparent_ecliptic_latitude(jd, high_precision)
    epsilon = true_obliquity_of_ecliptic(jd)
    _, declination = ecliptic_to_equatorial(lam, beta, epsilon)
    return declination


def jd_to_datetime(jd_tt: float) -> datetime:
    """Convert a TT Julian Date into a timezone-aware UTC datetime.

    Raises
    ------
    ValueError
        If the instant cannot be represented as a :class:`datetime`.
    """

    tai1, tai2 = erfa.tttai(jd_tt, 0.0)
    utc1, utc2 = erfa.taiutc(tai1, tai2)
    days = (float(utc1) - JD_UNIX_EPOCH) + float(utc2)
    try:
        return datetime(1970, 1, 1, tzinfo=UTC) + timedelta(days=days)
    except OverflowError as exc:
        raise ValueError(f"Julian Date {jd_tt} is outside the datetime range") from exc
