"""Immutable closing-price series with windowed simple moving averages."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sma_signal_service.app.candle_client import Candle


# Longest window sampled by the default signal engine.
MIN_PRICE_DATA_LENGTH = 55


@dataclass(frozen=True, slots=True)
class PriceSeries:
    """Closing prices in chronological order, most recent last.

    ``is_valid`` is the only guard: ``sma`` trusts its caller to have checked
    it and to ask for windows that fit inside ``min_length``.
    """

    closes: tuple[float, ...]
    min_length: int = MIN_PRICE_DATA_LENGTH

    @classmethod
    def from_closes(cls, values: Iterable[float], min_length: int = MIN_PRICE_DATA_LENGTH) -> PriceSeries:
        return cls(tuple(float(value) for value in values), min_length)

    @classmethod
    def from_candles(cls, candles: Iterable[Candle], min_length: int = MIN_PRICE_DATA_LENGTH) -> PriceSeries:
        return cls(tuple(candle.close for candle in candles), min_length)

    def __len__(self) -> int:
        return len(self.closes)

    def is_valid(self) -> bool:
        return len(self.closes) >= self.min_length

    def sma(self, n: int, offset: int) -> float:
        """Mean of the ``n`` closes ending ``offset`` elements before the latest one."""
        start = len(self.closes) - n - offset
        end = len(self.closes) - offset

        total = 0.0
        for close in self.closes[start:end]:
            total += close
        return total / n
