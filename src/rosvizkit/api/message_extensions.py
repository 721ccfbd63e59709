from __future__ import annotations

from datetime import datetime, timedelta, timezone

from rosvizkit.messages import ColorRGBA, NavSatFix, Time

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_long_time(t: Time) -> int:
    """Pack secs into the high 32 bits and nsecs into the low 32 bits."""
    return (int(t.secs) << 32) | int(t.nsecs)


def to_datetime(t: Time) -> datetime:
    return _EPOCH + timedelta(seconds=int(t.secs), microseconds=int(t.nsecs) // 1000)


def from_datetime(dt: datetime) -> Time:
    """
    Naive datetimes are taken as UTC. Sub-microsecond precision is not
    representable in `datetime`, so nsecs is always a multiple of 1000.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = dt - _EPOCH
    secs = delta.days * 86400 + delta.seconds
    return Time(secs=secs, nsecs=delta.microseconds * 1000)


def to_timestamp_string(t: Time) -> str:
    return f"{to_datetime(t):%Y-%m-%d %H:%M:%S}(+{int(t.nsecs)})"


def color_to_tuple(c: ColorRGBA) -> tuple[float, float, float, float]:
    return (float(c.r), float(c.g), float(c.b), float(c.a))


def color_from_tuple(rgba: tuple[float, ...]) -> ColorRGBA:
    if len(rgba) == 3:
        return ColorRGBA(float(rgba[0]), float(rgba[1]), float(rgba[2]))
    if len(rgba) == 4:
        return ColorRGBA(float(rgba[0]), float(rgba[1]), float(rgba[2]), float(rgba[3]))
    raise ValueError("color must have 3 or 4 components")


def color_to_rgba8(c: ColorRGBA) -> tuple[int, int, int, int]:
    vals = color_to_tuple(c)
    return tuple(int(round(min(1.0, max(0.0, v)) * 255.0)) for v in vals)  # type: ignore[return-value]


def lat_long_string(fix: NavSatFix) -> str:
    lat = "ºN" if fix.latitude > 0 else "ºS"
    lon = "ºE" if fix.longitude > 0 else "ºW"
    return f"{fix.latitude}{lat} {fix.longitude}{lon}"
