"""Hour arithmetic shared by clock-out, status and reports.

Hours are kept as Decimal and rounded half away from zero to 2 places.
"""
from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

TWO_PLACES = Decimal("0.01")
SECONDS_PER_HOUR = Decimal(3600)

Number = Union[Decimal, int, float, str, None]


def round_hours(value: Number) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def hours_between(start: datetime, end: datetime) -> Decimal:
    """Elapsed hours from `start` to `end`, never negative."""
    delta = end - start
    micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    if micros <= 0:
        return Decimal("0.00")
    return round_hours(Decimal(micros) / Decimal(1_000_000) / SECONDS_PER_HOUR)


def format_hours(value: Number) -> str:
    return f"{round_hours(value):.2f}"
