"""
Duration strings used in configuration, in the format of the `ms` package that
jsonwebtoken's `expiresIn` reads: "15m", "7d", "2 days", "1.5h", "1 hour".
Parts may be chained ("1h30m").

A bare number string is milliseconds ("3600" is 3.6 seconds), an int is seconds.
"""
from __future__ import annotations

import re
from datetime import timedelta

_UNIT_ALIASES = (
    (timedelta(milliseconds=1), ("ms", "msec", "msecs", "millisecond", "milliseconds")),
    (timedelta(seconds=1), ("s", "sec", "secs", "second", "seconds")),
    (timedelta(minutes=1), ("m", "min", "mins", "minute", "minutes")),
    (timedelta(hours=1), ("h", "hr", "hrs", "hour", "hours")),
    (timedelta(days=1), ("d", "day", "days")),
    (timedelta(weeks=1), ("w", "week", "weeks")),
    (timedelta(days=365.25), ("y", "yr", "yrs", "year", "years")),
)
_UNITS = {alias: unit for unit, aliases in _UNIT_ALIASES for alias in aliases}

_NUMBER = r"(?:\d+(?:\.\d+)?|\.\d+)"
_BARE = re.compile(_NUMBER)
_PART = re.compile(rf"\s*({_NUMBER})\s*([a-z]+)\s*")


def parse_duration(value: str | int | timedelta) -> timedelta:
    """Parse a duration into a timedelta. Raises ValueError if malformed."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, int):
        return timedelta(seconds=value)

    text = (value or "").strip().lower()
    if not text:
        raise ValueError("empty duration")
    if _BARE.fullmatch(text):
        return timedelta(milliseconds=float(text))

    pos = 0
    total = timedelta()
    while pos < len(text):
        match = _PART.match(text, pos)
        if match is None or match.group(2) not in _UNITS:
            raise ValueError(f"invalid duration: {value!r}")
        total += _UNITS[match.group(2)] * float(match.group(1))
        pos = match.end()
    return total
