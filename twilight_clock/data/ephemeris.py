"""Sunrise, sunset and twilight times from the almanac sun algorithm.

Based on the method published in the Almanac for Computers (1990,
Nautical Almanac Office, United States Naval Observatory). The same
routine yields true rise/set or any grade of twilight depending on the
zenith angle it is given.

All results are UTC hour-of-day floats, or NO_RISE_SET_TIME when the sun
never reaches the requested zenith on that date at that place (polar day
or polar night).
"""

from typing import Optional

from . import trig


# Hour-of-day with minutes as a fraction, or NO_RISE_SET_TIME
RiseSetTime = Optional[float]

NO_RISE_SET_TIME: RiseSetTime = None

# Zenith angles in degrees from directly overhead
ZENITH_OFFICIAL = 90.0 + 50.0 / 60.0  # 90 degrees 50'
ZENITH_CIVIL = 96.0
ZENITH_NAUTICAL = 102.0
ZENITH_ASTRONOMICAL = 108.0


def day_of_year(year: int, month: int, day: int) -> int:
    """
    Day of year (1-366) using the almanac's integer formula.

    Args:
        year: Gregorian year
        month: Month 1-12
        day: Day of month 1-31

    Returns:
        Ordinal day, 1 for January 1st
    """
    n1 = trig.floor(275 * month / 9)
    n2 = trig.floor((month + 9) / 12)  # 1 after February, else 0
    n3 = 1 + trig.floor((year - 4 * trig.floor(year / 4) + 2) / 3)
    return n1 - (n2 * n3) + day - 30


def solve(
    year: int,
    month: int,
    day: int,
    latitude: float,
    longitude: float,
    want_set: bool,
    zenith: float,
) -> RiseSetTime:
    """
    Calculate the UTC time the sun rises or sets through a zenith angle.

    Args:
        year: Gregorian year
        month: Month 1-12
        day: Day of month 1-31
        latitude: Degrees, positive north (-90 to 90)
        longitude: Degrees, positive east (-180 to 180)
        want_set: True for the setting time, False for the rising time
        zenith: Zenith angle in degrees, e.g. ZENITH_OFFICIAL

    Returns:
        UTC hour and fraction in [0, 24), or NO_RISE_SET_TIME if the sun
        does not cross this zenith on the given date at this location.
    """
    n = day_of_year(year, month, day)

    # Longitude as an hour offset, and approximate time of the event
    lng_hour = longitude / 15
    if want_set:
        t = n + ((18 - lng_hour) / 24)
    else:
        t = n + ((6 - lng_hour) / 24)

    # Sun's mean anomaly
    m = (0.9856 * t) - 3.289

    # Sun's true longitude
    true_long = m + (1.916 * trig.sin_deg(m)) + (0.020 * trig.sin_deg(2 * m)) + 282.634
    if true_long < 0:
        true_long += 360
    if true_long >= 360:
        true_long -= 360

    # Right ascension, moved into the same quadrant as the true longitude
    ra = trig.RAD_TO_DEG * trig.atan(0.91764 * trig.tan_deg(true_long))
    if ra < 0:
        ra += 360
    if ra >= 360:
        ra -= 360

    l_quadrant = trig.floor(true_long / 90) * 90
    ra_quadrant = trig.floor(ra / 90) * 90
    ra = (ra + (l_quadrant - ra_quadrant)) / 15

    # Declination
    sin_dec = 0.39782 * trig.sin_deg(true_long)
    cos_dec = trig.cos(trig.asin(sin_dec))

    # Local hour angle
    cos_h = (trig.cos_deg(zenith) - (sin_dec * trig.sin_deg(latitude))) / (
        cos_dec * trig.cos_deg(latitude)
    )
    if cos_h > 1 or cos_h < -1:
        return NO_RISE_SET_TIME

    if want_set:
        h = trig.RAD_TO_DEG * trig.acos(cos_h)
    else:
        h = 360 - trig.RAD_TO_DEG * trig.acos(cos_h)
    h = h / 15

    # Local mean time of the event, then back to UTC
    local_mean = h + ra - (0.06571 * t) - 6.622

    ut = local_mean - lng_hour
    if ut < 0:
        ut += 24
    if ut >= 24:
        ut -= 24

    return ut


def calc_sunrise(
    year: int, month: int, day: int, latitude: float, longitude: float, zenith: float
) -> RiseSetTime:
    """UTC rising time through the given zenith."""
    return solve(year, month, day, latitude, longitude, False, zenith)


def calc_sunset(
    year: int, month: int, day: int, latitude: float, longitude: float, zenith: float
) -> RiseSetTime:
    """UTC setting time through the given zenith."""
    return solve(year, month, day, latitude, longitude, True, zenith)


def adjust_timezone(time: RiseSetTime, offset_hours: float) -> RiseSetTime:
    """
    Convert a UTC hour-of-day to local time.

    Only a single wrap into [0, 24) is applied, which is enough for any
    real timezone offset.

    Args:
        time: UTC hour and fraction, or NO_RISE_SET_TIME
        offset_hours: Local offset from UTC in hours (local = UTC + offset)

    Returns:
        Local hour and fraction, or NO_RISE_SET_TIME unchanged
    """
    if time is NO_RISE_SET_TIME:
        return NO_RISE_SET_TIME

    local = time + offset_hours
    if local >= 24:
        local -= 24
    if local < 0:
        local += 24

    return local
