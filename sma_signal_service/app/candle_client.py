"""Async client for the Cryptohopper ticker candles endpoint."""

from __future__ import annotations

import asyncio
import json
import math
from dataclasses import dataclass
from datetime import UTC, datetime
from http.client import HTTPException
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from loguru import logger as default_logger

from sma_signal_service.app.config import DEFAULT_CANDLES_BASE_URL
from sma_signal_service.app.periods import parse_period
from sma_signal_service.app.price_series import MIN_PRICE_DATA_LENGTH, PriceSeries


class CandleFetchError(RuntimeError):
    """Upstream candle request failed or returned an unusable payload."""

    def __init__(self, message: str, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


@dataclass(slots=True)
class Candle:
    close: float
    open: float | None = None
    high: float | None = None
    low: float | None = None
    base_volume: float | None = None
    quote_volume: float | None = None
    open_time: datetime | None = None

    @classmethod
    def from_row(cls, row: Any) -> Candle:
        if not isinstance(row, dict):
            raise CandleFetchError(f"unexpected candle row: {row!r}")
        try:
            close = float(row["Close"])
        except (KeyError, TypeError, ValueError) as exc:
            raise CandleFetchError(f"candle without numeric Close: {row!r}") from exc
        if not math.isfinite(close):
            raise CandleFetchError(f"candle with non-finite Close: {row!r}")

        return cls(
            close=close,
            open=_optional_float(row.get("Open")),
            high=_optional_float(row.get("High")),
            low=_optional_float(row.get("Low")),
            base_volume=_optional_float(row.get("BaseVolume")),
            quote_volume=_optional_float(row.get("QuoteVolume")),
            open_time=_optional_time(row.get("OpenTime")),
        )


def _optional_float(value: Any) -> float | None:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_time(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def build_query(params: list[tuple[str, object]]) -> str:
    """Build query string in the given order, skipping None values."""
    return urlencode([(k, v) for k, v in params if v is not None])


class CandleClient:
    """Fetches closing prices for one exchange/pair/period per call."""

    def __init__(
        self,
        base_url: str = DEFAULT_CANDLES_BASE_URL,
        timeout_sec: float = 10.0,
        retries: int = 3,
        retry_delay_sec: float = 0.5,
        logger: Any | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_sec = timeout_sec
        self.retries = max(1, int(retries))
        self.retry_delay_sec = max(0.0, retry_delay_sec)
        self.logger = logger or default_logger

    def candles_url(
        self,
        exchange: str,
        pair: str,
        period: str,
        count: int = MIN_PRICE_DATA_LENGTH,
        now: datetime | None = None,
    ) -> str:
        duration = parse_period(period)
        end = now or datetime.now(UTC)
        start = end - duration * count
        query = build_query(
            [
                ("pair", pair),
                ("start", int(start.timestamp())),
                ("end", int(end.timestamp())),
                ("period", period),
            ]
        )
        return f"{self.base_url}/v1/{quote(exchange, safe='')}/candles?{query}"

    async def fetch_candles(
        self,
        exchange: str,
        pair: str,
        period: str,
        count: int = MIN_PRICE_DATA_LENGTH,
    ) -> list[Candle]:
        url = self.candles_url(exchange, pair, period, count)
        if not exchange:
            raise CandleFetchError("exchange is required")
        if not pair:
            raise CandleFetchError("pair is required")

        payload = await self.safe_request(url)
        if not isinstance(payload, list):
            raise CandleFetchError(f"expected a list of candles, got {type(payload).__name__}")
        return [Candle.from_row(row) for row in payload]

    async def fetch_price_series(
        self,
        exchange: str,
        pair: str,
        period: str,
        min_length: int = MIN_PRICE_DATA_LENGTH,
    ) -> PriceSeries:
        candles = await self.fetch_candles(exchange, pair, period, count=min_length)
        self.logger.debug("Fetched {} candles exchange={} pair={} period={}", len(candles), exchange, pair, period)
        return PriceSeries.from_candles(candles, min_length=min_length)

    async def safe_request(self, url: str) -> Any:
        delay = self.retry_delay_sec
        for attempt in range(1, self.retries + 1):
            try:
                return await asyncio.to_thread(self._request_sync, url)
            except CandleFetchError as exc:
                if not exc.retryable or attempt >= self.retries:
                    raise
                self.logger.warning("Candles request retry {}/{} url={} err={}", attempt, self.retries, url, exc)
                await asyncio.sleep(delay)
                delay *= 2
        raise CandleFetchError("safe_request failed")

    def _request_sync(self, url: str) -> Any:
        req = Request(url=url, method="GET", headers={"Accept": "application/json"})

        try:
            with urlopen(req, timeout=self.timeout_sec) as resp:
                raw = resp.read()
        except HTTPError as exc:
            body = exc.read().decode("utf-8", errors="ignore")
            raise CandleFetchError(f"HTTPError {exc.code}: {body}", retryable=exc.code >= 500) from exc
        except URLError as exc:
            raise CandleFetchError(f"URLError: {exc}", retryable=True) from exc
        except TimeoutError as exc:
            raise CandleFetchError(f"timeout: {exc}", retryable=True) from exc
        except (HTTPException, OSError) as exc:
            # Dropped connections and truncated bodies bypass urllib's URLError wrapping.
            raise CandleFetchError(f"connection error: {exc!r}", retryable=True) from exc

        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CandleFetchError(f"invalid JSON from upstream: {exc}") from exc
