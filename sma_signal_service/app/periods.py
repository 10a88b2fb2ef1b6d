"""Candle period tokens supported by the upstream ticker API."""

from __future__ import annotations

from datetime import timedelta


SUPPORTED_PERIODS: dict[str, timedelta] = {
    "1m": timedelta(minutes=1),
    "5m": timedelta(minutes=5),
    "15m": timedelta(minutes=15),
    "30m": timedelta(minutes=30),
    "1h": timedelta(hours=1),
    "2h": timedelta(hours=2),
    "4h": timedelta(hours=4),
    "1d": timedelta(days=1),
}


class InvalidPeriodError(ValueError):
    """Raised for a period token outside SUPPORTED_PERIODS."""


def parse_period(period: str) -> timedelta:
    try:
        return SUPPORTED_PERIODS[period]
    except KeyError:
        raise InvalidPeriodError(f"Invalid period {period}") from None
