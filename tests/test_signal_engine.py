from __future__ import annotations

import pytest

from sma_signal_service.app.price_series import PriceSeries
from sma_signal_service.app.signal_engine import Signal, SignalEngine, generate_signal


class _FakeSmaSource:
    """Returns canned averages keyed by (n, offset) and records each call."""

    def __init__(self, values: dict[tuple[int, int], float]) -> None:
        self.values = values
        self.calls: list[tuple[int, int]] = []

    def sma(self, n: int, offset: int) -> float:
        self.calls.append((n, offset))
        return self.values[(n, offset)]

    def is_valid(self) -> bool:
        return True


def _source(curr8: float, prev8: float, curr55: float) -> _FakeSmaSource:
    return _FakeSmaSource({(8, 0): curr8, (8, 1): prev8, (55, 0): curr55})


@pytest.mark.parametrize(
    ("curr8", "prev8", "curr55", "expected"),
    [
        (500, 400, 450, Signal.BUY),
        (400, 450, 450, Signal.SELL),
        (400, 400, 400, Signal.NEUTRAL),
        (450, 450, 450, Signal.NEUTRAL),
        (500, 450, 450, Signal.BUY),
        (400, 500, 450, Signal.SELL),
        (500, 480, 450, Signal.NEUTRAL),
        (400, 420, 450, Signal.NEUTRAL),
        (450, 400, 450, Signal.NEUTRAL),
        (450, 500, 450, Signal.NEUTRAL),
    ],
)
def test_crossover_classification(curr8, prev8, curr55, expected):
    assert SignalEngine().generate(_source(curr8, prev8, curr55)) is expected


def test_samples_three_windows_in_order():
    source = _source(500, 400, 450)
    SignalEngine().generate(source)
    assert source.calls == [(8, 0), (8, 1), (55, 0)]


def test_generate_is_idempotent():
    source = _source(400, 450, 450)
    engine = SignalEngine()
    assert engine.generate(source) == engine.generate(source) == Signal.SELL


def test_signal_tokens_are_closed_set():
    assert {s.value for s in Signal} == {"BUY", "SELL", "NEUTRAL"}
    assert str(Signal.BUY) == "BUY"
    assert Signal.NEUTRAL == "NEUTRAL"


def test_module_level_generate_signal_uses_default_windows():
    assert generate_signal(_source(500, 400, 450)) is Signal.BUY


def test_custom_windows_are_sampled():
    source = _FakeSmaSource({(5, 0): 10.0, (5, 1): 8.0, (20, 0): 9.0})
    engine = SignalEngine(short_window=5, long_window=20)
    assert engine.generate(source) is Signal.BUY
    assert source.calls == [(5, 0), (5, 1), (20, 0)]


def test_min_length_is_longest_window():
    assert SignalEngine().min_length == 55
    assert SignalEngine(short_window=5, long_window=20).min_length == 20
    # The previous short sample needs short_window + 1 closes, which never exceeds long_window.
    engine = SignalEngine(short_window=20, long_window=21)
    assert engine.min_length == 21 >= engine.short_window + 1


@pytest.mark.parametrize(("short", "long"), [(0, 55), (8, 8), (55, 8)])
def test_rejects_inverted_windows(short, long):
    with pytest.raises(ValueError):
        SignalEngine(short_window=short, long_window=long)


def test_real_series_upward_crossover():
    # Flat history, then a sharp rally on the last candle only.
    closes = [100.0] * 54 + [200.0]
    assert SignalEngine().generate(PriceSeries.from_closes(closes)) is Signal.BUY


def test_real_series_downward_crossover():
    closes = [100.0] * 54 + [10.0]
    assert SignalEngine().generate(PriceSeries.from_closes(closes)) is Signal.SELL


def test_real_series_flat_is_neutral():
    assert SignalEngine().generate(PriceSeries.from_closes([42.0] * 55)) is Signal.NEUTRAL
