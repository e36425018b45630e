"""httpx client for the external prediction service."""

from __future__ import annotations

import asyncio
import logging

import httpx
from pydantic import BaseModel, Field, ValidationError

from stockdash.config import AppConfig
from stockdash.errors import PredictionUnavailable
from stockdash.models.prediction import Direction, PredictorError, PredictorResult, Signal
from stockdash.models.symbol import normalize_symbol, normalize_symbols
from stockdash.predictor.base import BatchItem, PredictorClient

logger = logging.getLogger(__name__)

NO_RESULT = "No prediction returned"


class _PredictionPayload(BaseModel):
    symbol: str
    direction: Direction
    confidence: float = Field(ge=0.0, le=1.0)
    signal: Signal
    timestamp: str

    def to_result(self) -> PredictorResult:
        return PredictorResult(
            symbol=self.symbol.strip().upper(),
            direction=self.direction,
            confidence=self.confidence,
            signal=self.signal,
            timestamp=self.timestamp,
        )


def _error_text(body: dict) -> str:
    err = body.get("error")
    return str(err) if err else "Unknown error"


class HttpPredictorClient(PredictorClient):
    """Calls ``POST {base}/predict/`` and ``POST {base}/predict/batch``.

    Every request is bounded by ``timeout_seconds``. If the batch endpoint
    itself fails, symbols are fanned out to the single-symbol endpoint
    concurrently, at most ``max_concurrency`` at a time.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        max_concurrency: int = 8,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._max_concurrency = max(1, max_concurrency)
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_config(cls, config: AppConfig) -> HttpPredictorClient:
        return cls(
            base_url=config.predictor_base_url,
            timeout_seconds=config.predictor_timeout_seconds,
            max_concurrency=config.predictor_max_concurrency,
        )

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Single symbol
    # ------------------------------------------------------------------

    async def predict_one(self, symbol: str) -> PredictorResult:
        symbol = normalize_symbol(symbol)
        url = f"{self._base_url}/predict/"
        try:
            response = await self._http().post(url, json={"symbol": symbol}, timeout=self._timeout)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as e:
            raise PredictionUnavailable(symbol, "predictor timed out") from e
        except httpx.HTTPStatusError as e:
            raise PredictionUnavailable(symbol, f"predictor returned HTTP {e.response.status_code}") from e
        except (httpx.RequestError, ValueError) as e:
            raise PredictionUnavailable(symbol, str(e) or type(e).__name__) from e

        if isinstance(body, dict) and body.get("error"):
            raise PredictionUnavailable(symbol, _error_text(body))
        try:
            result = _PredictionPayload.model_validate(body).to_result()
        except ValidationError as e:
            raise PredictionUnavailable(symbol, "malformed predictor response") from e
        if result.symbol != symbol:
            raise PredictionUnavailable(symbol, f"predictor answered for {result.symbol}")
        return result

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    async def predict_batch(self, symbols: list[str]) -> list[BatchItem]:
        symbols = normalize_symbols(symbols)
        url = f"{self._base_url}/predict/batch"
        try:
            response = await self._http().post(url, json={"symbols": symbols}, timeout=self._timeout)
            response.raise_for_status()
            body = response.json()
            if not isinstance(body, list):
                raise ValueError("batch response is not a list")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                "Batch endpoint failed for %d symbols (%s); falling back to per-symbol calls",
                len(symbols), e,
            )
            return await self._fan_out(symbols)

        return self._align(symbols, body)

    def _align(self, symbols: list[str], body: list) -> list[BatchItem]:
        """Match batch entries to input symbols; unanswered symbols become errors."""
        by_symbol: dict[str, BatchItem] = {}
        for raw in body:
            if not isinstance(raw, dict) or not raw.get("symbol"):
                logger.debug("Dropping batch entry without symbol: %r", raw)
                continue
            symbol = str(raw["symbol"]).strip().upper()
            if raw.get("error"):
                by_symbol[symbol] = PredictorError(symbol=symbol, error=_error_text(raw))
                continue
            try:
                by_symbol[symbol] = _PredictionPayload.model_validate(raw).to_result()
            except ValidationError:
                logger.warning("Malformed batch entry for %s", symbol)
                by_symbol[symbol] = PredictorError(symbol=symbol, error="Malformed predictor response")

        return [by_symbol.get(s) or PredictorError(symbol=s, error=NO_RESULT) for s in symbols]

    async def _fan_out(self, symbols: list[str]) -> list[BatchItem]:
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def one(symbol: str) -> BatchItem:
            async with semaphore:
                try:
                    return await self.predict_one(symbol)
                except PredictionUnavailable as e:
                    return PredictorError(symbol=symbol, error=e.reason)

        return list(await asyncio.gather(*(one(s) for s in symbols)))
