from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from conftest import utc
from solar_schedule import NoSunsetError, get_sunset_time
from solar_schedule.sunset import from_julian, to_julian


def test_sunset_is_deterministic():
    anchor = utc(2024, 3, 20, 12, 0)

    first = get_sunset_time(anchor, 51.5, 0.0)
    second = get_sunset_time(anchor, 51.5, 0.0)

    assert first == second
    assert anchor == utc(2024, 3, 20, 12, 0)


def test_greenwich_sunset_near_march_equinox_matches_published_time():
    # Published sunset for London on 2024-03-20 is 18:13 GMT
    sunset = get_sunset_time(utc(2024, 3, 20, 12, 0), 51.5, 0.0)

    assert sunset.tzinfo == timezone.utc
    assert abs(sunset - utc(2024, 3, 20, 18, 13)) <= timedelta(minutes=5)


def test_sunset_accepts_any_aware_timezone():
    anchor_utc = utc(2024, 3, 20, 12, 0)
    anchor_msk = anchor_utc.astimezone(timezone(timedelta(hours=3)))

    assert get_sunset_time(anchor_msk, 51.5, 0.0) == get_sunset_time(anchor_utc, 51.5, 0.0)


def test_naive_anchor_is_rejected():
    with pytest.raises(ValueError):
        get_sunset_time(datetime(2024, 3, 20, 12, 0), 51.5, 0.0)


def test_polar_day_at_85_north_in_june():
    with pytest.raises(NoSunsetError) as excinfo:
        get_sunset_time(utc(2024, 6, 21, 12, 0), 85.0, 10.0)

    error = excinfo.value
    assert error.reason == "polar"
    assert error.polar_day is True
    assert error.latitude == 85.0
    assert error.longitude == 10.0


def test_polar_night_at_85_north_in_december():
    with pytest.raises(NoSunsetError) as excinfo:
        get_sunset_time(utc(2024, 12, 21, 12, 0), 85.0, 10.0)

    assert excinfo.value.polar_day is False


def test_poles_do_not_divide_by_zero():
    with pytest.raises(NoSunsetError):
        get_sunset_time(utc(2024, 6, 21, 12, 0), 90.0, 0.0)
    with pytest.raises(NoSunsetError):
        get_sunset_time(utc(2024, 6, 21, 12, 0), -90.0, 0.0)


def test_equator_always_has_a_sunset():
    day = date(2024, 1, 1)
    while day.year == 2024:
        anchor = datetime(day.year, day.month, day.day, 12, tzinfo=timezone.utc)
        sunset = get_sunset_time(anchor, 0.0, 0.0)

        # Equation of time keeps equatorial sunset within ~17 minutes of 18:00
        assert sunset.date() == day
        assert utc(day.year, day.month, day.day, 17, 35) < sunset < utc(day.year, day.month, day.day, 18, 25)
        day += timedelta(days=1)


def test_eastern_longitude_moves_sunset_earlier_in_utc():
    anchor = utc(2024, 3, 20, 12, 0)

    greenwich = get_sunset_time(anchor, 0.0, 0.0)
    ninety_east = get_sunset_time(anchor, 0.0, 90.0)

    # 90 degrees is six hours of rotation
    assert abs((greenwich - ninety_east) - timedelta(hours=6)) < timedelta(minutes=2)


def test_julian_conversion_of_the_j2000_epoch():
    assert to_julian(utc(2000, 1, 1, 12, 0)) == pytest.approx(2451545.0)
    assert abs(from_julian(2451545.0) - utc(2000, 1, 1, 12, 0)) < timedelta(milliseconds=1)


@pytest.mark.parametrize(
    "lat, lon, day",
    [
        (51.5, -0.116, date(2024, 3, 20)),
        (51.5, -0.116, date(2024, 6, 21)),
        (51.5, -0.116, date(2024, 12, 21)),
        (45.0428, 41.9734, date(2024, 6, 22)),
        (45.0428, 41.9734, date(2024, 12, 28)),
        (-33.87, 151.21, date(2024, 9, 7)),
        (40.71, -74.01, date(2024, 10, 5)),
    ],
)
def test_sunset_agrees_with_astral(lat, lon, day):
    astral_sun = pytest.importorskip("astral.sun")
    from astral import Observer

    # Noon at the location's mean solar time keeps both calculations on the same day
    anchor = datetime(day.year, day.month, day.day, 12, tzinfo=timezone.utc) - timedelta(hours=lon / 15)
    reference = astral_sun.sunset(Observer(latitude=lat, longitude=lon), date=anchor.date(), tzinfo=timezone.utc)

    sunset = get_sunset_time(anchor, lat, lon)

    assert abs(sunset - reference) <= timedelta(minutes=3)


@pytest.mark.parametrize("latitude, longitude", [(51.5, 0.0), (45.0428, 41.9734), (-33.87, 151.21), (40.71, -74.0)])
def test_sunset_is_the_evening_crossing_after_local_noon(latitude, longitude):
    solar_noon = utc(2024, 3, 20, 12, 0) - timedelta(hours=longitude / 15)

    sunset = get_sunset_time(solar_noon, latitude, longitude)

    assert timedelta(hours=5) < sunset - solar_noon < timedelta(hours=7)
