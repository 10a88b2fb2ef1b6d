"""SMA crossover classifier."""

from __future__ import annotations

from enum import Enum
from typing import Protocol


class Signal(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    NEUTRAL = "NEUTRAL"

    def __str__(self) -> str:
        return self.value


class SmaSource(Protocol):
    """Anything that can average its last ``n`` values, ending ``offset`` steps back."""

    def sma(self, n: int, offset: int) -> float: ...

    def is_valid(self) -> bool: ...


class SignalEngine:
    """Compares the short SMA now and one period ago against the long SMA now."""

    def __init__(self, short_window: int = 8, long_window: int = 55) -> None:
        if short_window < 1 or long_window <= short_window:
            raise ValueError("expected 1 <= short_window < long_window")
        self.short_window = short_window
        self.long_window = long_window

    @property
    def min_length(self) -> int:
        # short_window < long_window, so the previous short sample always fits in the long window.
        return self.long_window

    def generate(self, source: SmaSource) -> Signal:
        current_short = source.sma(self.short_window, 0)
        prev_short = source.sma(self.short_window, 1)
        current_long = source.sma(self.long_window, 0)

        prev_higher_or_same = prev_short >= current_long
        prev_lower_or_same = prev_short <= current_long

        current_lower = current_short < current_long
        current_higher = current_short > current_long

        if current_lower and prev_higher_or_same:
            return Signal.SELL

        if current_higher and prev_lower_or_same:
            return Signal.BUY

        return Signal.NEUTRAL


_DEFAULT_ENGINE = SignalEngine()


def generate_signal(source: SmaSource) -> Signal:
    return _DEFAULT_ENGINE.generate(source)
