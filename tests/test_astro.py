from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from core.astro import (
    apparent_ecliptic_latitude,
    apparent_ecliptic_longitude,
    apparent_solar_declination,
    ecliptic_to_equatorial,
    jd_to_datetime,
    mean_obliquity_of_ecliptic,
    true_obliquity_of_ecliptic,
)
from core.interpolate import extremum

# 1992 October 13.0 TD
JDE_1992_OCT_13 = 2448908.5
# 1987 April 10.0 TD
JDE_1987_APR_10 = 2446895.5


def test_low_precision_sun_longitude():
    assert apparent_ecliptic_longitude(JDE_1992_OCT_13, high_precision=False) == pytest.approx(
        199.90895, abs=1e-4
    )
    assert apparent_ecliptic_latitude(JDE_1992_OCT_13, high_precision=False) == 0.0


def test_high_precision_sun_agrees_with_truncated_series():
    high = apparent_ecliptic_longitude(JDE_1992_OCT_13)
    low = apparent_ecliptic_longitude(JDE_1992_OCT_13, high_precision=False)
    assert abs(high - low) < 0.01
    assert abs(apparent_ecliptic_latitude(JDE_1992_OCT_13)) < 0.001


def test_sun_declination():
    assert apparent_solar_declination(JDE_1992_OCT_13, high_precision=False) == pytest.approx(
        -7.78507, abs=0.002
    )
    assert apparent_solar_declination(JDE_1992_OCT_13) == pytest.approx(-7.785, abs=0.005)


def test_obliquity_of_the_ecliptic():
    assert mean_obliquity_of_ecliptic(JDE_1987_APR_10) == pytest.approx(23.440946, abs=1e-4)
    assert true_obliquity_of_ecliptic(JDE_1987_APR_10) == pytest.approx(23.443569, abs=1e-4)


def test_ecliptic_to_equatorial_pollux():
    ra_hours, dec = ecliptic_to_equatorial(113.215630, 6.684170, 23.4392911)
    assert ra_hours == pytest.approx(116.328942 / 15.0, abs=1e-5)
    assert dec == pytest.approx(28.026183, abs=1e-5)


@pytest.mark.parametrize(
    "longitude, expected_ra",
    [(0.0, 0.0), (90.0, 6.0), (180.0, 12.0), (270.0, 18.0)],
)
def test_ecliptic_to_equatorial_cardinal_points(longitude: float, expected_ra: float):
    obliquity = 23.44
    ra_hours, dec = ecliptic_to_equatorial(longitude, 0.0, obliquity)
    assert ra_hours == pytest.approx(expected_ra, abs=1e-9)
    if longitude == 90.0:
        assert dec == pytest.approx(obliquity)
    elif longitude == 270.0:
        assert dec == pytest.approx(-obliquity)
    else:
        assert dec == pytest.approx(0.0, abs=1e-9)


def test_extremum_of_tabulated_distance():
    value, fraction = extremum(1.3814294, 1.3812213, 1.3812453)
    assert value == pytest.approx(1.3812030, abs=1e-7)
    assert fraction == pytest.approx(0.39659, abs=1e-5)


def test_extremum_of_symmetric_peak():
    value, fraction = extremum(1.0, 2.0, 1.0)
    assert value == pytest.approx(2.0)
    assert fraction == pytest.approx(0.0)


def test_jd_to_datetime_at_j2000():
    expected = datetime(2000, 1, 1, 11, 58, 55, 816000, tzinfo=timezone.utc)
    assert abs(jd_to_datetime(2451545.0) - expected) < timedelta(milliseconds=1)


def test_jd_to_datetime_out_of_range():
    with pytest.raises(ValueError):
        jd_to_datetime(6_000_000.5)
