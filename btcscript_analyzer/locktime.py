"""Absolute and relative locktime classification and descriptions."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

SEQUENCE_LOCKTIME_TYPE_FLAG = 1 << 22
SEQUENCE_LOCKTIME_MASK = 0x0000FFFF
LOCKTIME_THRESHOLD = 500000000


class LocktimeType(Enum):
    """Whether a locktime counts blocks or time."""

    HEIGHT = "height"
    TIME = "time"

    @classmethod
    def of(cls, value: int, relative: bool) -> LocktimeType:
        """Classify a locktime (absolute) or sequence (relative) value."""
        threshold = SEQUENCE_LOCKTIME_TYPE_FLAG if relative else LOCKTIME_THRESHOLD
        return cls.HEIGHT if value < threshold else cls.TIME


def locktime_type_equals(a: int, b: int, relative: bool) -> bool:
    """Whether two values are locktimes of the same kind."""
    return LocktimeType.of(a, relative) is LocktimeType.of(b, relative)


# The descriptions complete the sentence "This TXO becomes spendable ...".


def absolute_timelock_height_to_string(n: int) -> str:
    return f"at block {n}"


def absolute_timelock_time_to_string(unix_timestamp: int) -> str:
    moment = datetime.fromtimestamp(unix_timestamp, tz=timezone.utc)
    return (
        f"on {moment:%Y-%m-%d %H:%M:%S} "
        f"({unix_timestamp} seconds since unix epoch)"
    )


def relative_timelock_height_to_string(n: int) -> str:
    return f"in {n} blocks"


def relative_timelock_time_to_string(n: int) -> str:
    t = (n & SEQUENCE_LOCKTIME_MASK) * 512
    output = f"in {t % 60}s"
    prev = 60
    for unit, size in (("m", 60), ("h", 24), ("d", 999)):
        t //= prev
        if t == 0:
            break
        output = f"{output[:3]}{t % size}{unit} {output[3:]}"
        prev = size
    return output


def locktime_to_string(n: int, relative: bool) -> str:
    """Describe a locktime or sequence value."""
    kind = LocktimeType.of(n, relative)
    if relative:
        if kind is LocktimeType.HEIGHT:
            return relative_timelock_height_to_string(n)
        return relative_timelock_time_to_string(n)
    if kind is LocktimeType.HEIGHT:
        return absolute_timelock_height_to_string(n)
    return absolute_timelock_time_to_string(n)