from __future__ import annotations

import abc

from stockdash.models.prediction import PredictorError, PredictorResult

BatchItem = PredictorResult | PredictorError


class PredictorClient(abc.ABC):
    """Boundary to the external prediction service.

    Implementations upper-case symbols and reject blank ones with
    InvalidSymbol before any network call.
    """

    @abc.abstractmethod
    async def predict_one(self, symbol: str) -> PredictorResult:
        """Predict a single symbol. Raises PredictionUnavailable on failure."""

    @abc.abstractmethod
    async def predict_batch(self, symbols: list[str]) -> list[BatchItem]:
        """Predict many symbols; one entry per input symbol.

        A failure for one symbol is reported as a PredictorError entry and
        never aborts the rest of the batch.
        """

    async def close(self) -> None:
        """Release any transport resources."""
