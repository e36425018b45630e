"""Prediction ingestion: predictor fan-out, translation, best-effort persistence."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from stockdash.models.prediction import Direction, PredictorError, PredictorResult, Signal
from stockdash.models.symbol import normalize_symbol, normalize_symbols
from stockdash.predictor.base import BatchItem, PredictorClient
from stockdash.registry.store import PredictionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PredictionRecord:
    """A predictor result expressed in the store's vocabulary."""

    symbol: str
    prediction: Direction
    confidence: float
    signal: Signal


def to_prediction_record(result: PredictorResult) -> PredictionRecord:
    """Translate the predictor's ``direction`` onto the store's ``prediction``.

    This is the only place that knows both vocabularies.
    """
    return PredictionRecord(
        symbol=result.symbol,
        prediction=result.direction,
        confidence=result.confidence,
        signal=result.signal,
    )


class PredictionPipeline:
    """Runs predictions for an authenticated user and stores the successes.

    Storage is a side effect: the returned payload always reflects what the
    predictor said, whether or not the row was written.
    """

    def __init__(self, store: PredictionStore, predictor: PredictorClient) -> None:
        self._store = store
        self._predictor = predictor

    async def predict_symbol(self, user_id: int, symbol: str) -> PredictorResult:
        """Predict one symbol. PredictionUnavailable propagates to the caller."""
        symbol = normalize_symbol(symbol)
        result = await self._predictor.predict_one(symbol)
        await self._persist(user_id, result)
        return result

    async def predict_batch(self, user_id: int, symbols: list[str]) -> list[BatchItem]:
        """Predict many symbols; failed symbols are reported inline, not stored.

        The response is aligned to the de-duplicated input order.
        """
        symbols = normalize_symbols(symbols)
        items = await self._predictor.predict_batch(symbols)

        by_symbol = {item.symbol: item for item in items}
        aligned = [
            by_symbol.get(s) or PredictorError(symbol=s, error="No prediction returned")
            for s in symbols
        ]

        successes = [item for item in aligned if isinstance(item, PredictorResult)]
        await asyncio.gather(*(self._persist(user_id, r) for r in successes))

        failed = len(aligned) - len(successes)
        if failed:
            logger.info(
                "Batch for user %s: %d ok, %d failed", user_id, len(successes), failed,
            )
        return aligned

    async def _persist(self, user_id: int, result: PredictorResult) -> bool:
        if not result.is_consistent:
            logger.warning(
                "Predictor signal %s for %s disagrees with confidence %.4f; storing as supplied",
                result.signal, result.symbol, result.confidence,
            )
        record = to_prediction_record(result)
        try:
            await asyncio.to_thread(
                self._store.create_prediction,
                user_id,
                record.symbol,
                record.prediction,
                record.confidence,
                record.signal,
            )
        except Exception:
            logger.exception("Failed to persist prediction for user %s symbol %s", user_id, record.symbol)
            return False
        return True
