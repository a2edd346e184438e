"""Application layer - Lifetime parsing."""

import math
import re
from datetime import timedelta
from typing import Any, Dict

from parcel_di.domain import UNBOUNDED, Expiry, InvalidLifetime, InvalidLifetimeFormat, LifetimeMs

_LIFETIME_PATTERN = re.compile(r"(\d+)([smhd])", re.ASCII)

UNIT_MILLISECONDS: Dict[str, int] = {
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
}


def parse_lifetime(value: Any) -> LifetimeMs:
    """Convert a lifetime declaration into milliseconds.

    Args:
        value: A non-negative number of milliseconds, a ``timedelta``,
            ``UNBOUNDED`` (or the string ``"unbounded"``), or a string such as
            ``"30s"``, ``"5m"``, ``"2h"`` or ``"1d"``.

    Returns:
        The lifetime in milliseconds, or ``UNBOUNDED``.

    Raises:
        InvalidLifetime: If the numeric value is negative or NaN.
        InvalidLifetimeFormat: If the value has an unsupported type or format.

    Example:
        >>> parse_lifetime("5m")
        300000
        >>> parse_lifetime(250)
        250
    """
    if isinstance(value, Expiry):
        return value

    # bool is an int subclass but never a duration
    if isinstance(value, bool):
        raise InvalidLifetimeFormat(value)

    if isinstance(value, (int, float)):
        if math.isnan(value) or value < 0:
            raise InvalidLifetime(value)
        if math.isinf(value):
            return UNBOUNDED
        return value

    if isinstance(value, timedelta):
        milliseconds = value / timedelta(milliseconds=1)
        if milliseconds < 0:
            raise InvalidLifetime(value)
        return int(milliseconds) if milliseconds.is_integer() else milliseconds

    if isinstance(value, str):
        if value == UNBOUNDED.value:
            return UNBOUNDED
        match = _LIFETIME_PATTERN.fullmatch(value)
        if match is None:
            raise InvalidLifetimeFormat(value)
        amount, unit = match.groups()
        return int(amount) * UNIT_MILLISECONDS[unit]

    raise InvalidLifetimeFormat(value)


def is_bounded(lifetime: LifetimeMs) -> bool:
    """Tell whether a parsed lifetime ever expires."""
    return lifetime is not UNBOUNDED
