"""Functions for computing sunset times without an ephemeris library.

Low-precision solar position model (mean anomaly, equation of centre,
declination, hour angle). Accurate to within a few minutes at temperate
latitudes, which is plenty for a "meet an hour before sunset" message.
"""

import math
from datetime import datetime, timedelta

from .utils import EPOCH, ensure_utc
from .models import SolarScheduleError


RAD = math.pi / 180

# Paired with the 0.5 day shift in to_julian/from_julian
J1970 = 2440588
J2000 = 2451545.0

# Apparent altitude of the sun's centre at sunset (refraction + semi-diameter)
SUNSET_ALTITUDE = -0.83 * RAD
OBLIQUITY = 23.4397 * RAD
PERIHELION = 102.9372 * RAD


class NoSunsetError(SolarScheduleError):
    """Raised when the sun does not cross the horizon on the requested day."""

    def __init__(self, latitude: float, longitude: float, reason: str = "polar",
                 polar_day: bool = False):
        self.latitude = latitude
        self.longitude = longitude
        self.reason = reason
        self.polar_day = polar_day
        kind = "polar day" if polar_day else "polar night"
        super().__init__(
            f"No sunset at ({latitude}, {longitude}): {reason} ({kind})"
        )


def to_julian(instant: datetime) -> float:
    seconds = (ensure_utc(instant) - EPOCH).total_seconds()
    return seconds / 86400 - 0.5 + J1970


def from_julian(julian_day: float) -> datetime:
    return EPOCH + timedelta(days=julian_day + 0.5 - J1970)


def solar_mean_anomaly(d: float) -> float:
    return RAD * (357.5291 + 0.98560028 * d)


def ecliptic_longitude(mean_anomaly: float) -> float:
    m = mean_anomaly
    centre = RAD * (1.9148 * math.sin(m) + 0.02 * math.sin(2 * m) + 0.0003 * math.sin(3 * m))
    return m + centre + PERIHELION + math.pi


def declination(ecliptic_lon: float) -> float:
    return math.asin(math.sin(OBLIQUITY) * math.sin(ecliptic_lon))


def julian_cycle(d: float, lw: float) -> int:
    # Round half up
    return math.floor(d - 0.0009 - lw / (2 * math.pi) + 0.5)


def approx_transit(hour_angle: float, lw: float, n: int) -> float:
    return 0.0009 + (hour_angle + lw) / (2 * math.pi) + n


def solar_transit_j(ds: float, mean_anomaly: float, ecliptic_lon: float) -> float:
    return J2000 + ds + 0.0053 * math.sin(mean_anomaly) - 0.0069 * math.sin(2 * ecliptic_lon)


def hour_angle_cosine(altitude: float, phi: float, dec: float) -> float:
    """Cosine of the hour angle at which the sun reaches ``altitude``."""
    denominator = math.cos(phi) * math.cos(dec)
    numerator = math.sin(altitude) - math.sin(phi) * math.sin(dec)
    if denominator == 0:
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def get_sunset_time(anchor: datetime, latitude: float, longitude: float) -> datetime:
    """
    Get sunset time for the day containing ``anchor``.

    Args:
        anchor: Timezone-aware instant on the day of interest; local noon works best
        latitude: Latitude in decimal degrees (north positive)
        longitude: Longitude in decimal degrees (east positive)

    Returns:
        Datetime of sunset in UTC

    Raises:
        NoSunsetError: If the sun stays above or below the horizon all day
        ValueError: If ``anchor`` is naive
    """
    lw = -longitude * RAD
    phi = latitude * RAD
    d = to_julian(anchor) - J2000

    n = julian_cycle(d, lw)
    m = solar_mean_anomaly(d)
    ecl = ecliptic_longitude(m)
    dec = declination(ecl)

    cos_h = hour_angle_cosine(SUNSET_ALTITUDE, phi, dec)
    if not -1 <= cos_h <= 1:
        # Below -1 the sun never gets down to the horizon, above 1 it never rises
        raise NoSunsetError(latitude, longitude, reason="polar", polar_day=cos_h < -1)

    ds = approx_transit(math.acos(cos_h), lw, n)
    return from_julian(solar_transit_j(ds, m, ecl))
