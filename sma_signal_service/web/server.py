"""HTTP surface: one SMA crossover signal per request."""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI, Query
from fastapi.responses import PlainTextResponse
from loguru import logger as LOGGER

from sma_signal_service.app.candle_client import CandleClient, CandleFetchError
from sma_signal_service.app.config import AppConfig, load_config
from sma_signal_service.app.periods import InvalidPeriodError
from sma_signal_service.app.signal_engine import SignalEngine


ROOT_DIR = Path(__file__).resolve().parents[1]
INSUFFICIENT_DATA_MESSAGE = "Insufficient data available for the requested time range"


def _base_config() -> AppConfig:
    config_path = ROOT_DIR / "config.yml"
    if config_path.exists():
        return load_config(config_path)
    return load_config(ROOT_DIR / "config.yml.example")


APP_CONFIG = _base_config()

app = FastAPI(title="sma_signal_service")
signal_engine = SignalEngine(
    short_window=APP_CONFIG.signal.short_window,
    long_window=APP_CONFIG.signal.long_window,
)
candle_client = CandleClient(
    base_url=APP_CONFIG.upstream.base_url,
    timeout_sec=APP_CONFIG.upstream.timeout_sec,
    retries=APP_CONFIG.upstream.retries,
    retry_delay_sec=APP_CONFIG.upstream.retry_delay_sec,
    logger=LOGGER,
)


@app.on_event("startup")
async def startup_event() -> None:
    LOGGER.info(
        "Signal service ready: SMA({}) vs SMA({}), min_length={}, upstream={}",
        signal_engine.short_window,
        signal_engine.long_window,
        signal_engine.min_length,
        candle_client.base_url,
    )


@app.get("/health")
async def health():
    return {"status": "OK"}


@app.get("/", response_class=PlainTextResponse)
async def signal(
    exchange: str = Query(default=""),
    pair: str = Query(default=""),
    period: str = Query(default=""),
):
    try:
        series = await candle_client.fetch_price_series(
            exchange, pair, period, min_length=signal_engine.min_length
        )
    except (InvalidPeriodError, CandleFetchError) as exc:
        LOGGER.warning("Signal request rejected exchange={} pair={} period={}: {}", exchange, pair, period, exc)
        return PlainTextResponse(f"Error: {exc}", status_code=400)

    if not series.is_valid():
        LOGGER.warning(
            "Insufficient data exchange={} pair={} period={} candles={} required={}",
            exchange,
            pair,
            period,
            len(series),
            series.min_length,
        )
        return PlainTextResponse(INSUFFICIENT_DATA_MESSAGE, status_code=500)

    result = signal_engine.generate(series)
    LOGGER.info("Signal exchange={} pair={} period={} -> {}", exchange, pair, period, result.value)
    return PlainTextResponse(result.value)
