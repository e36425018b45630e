from __future__ import annotations

from stockdash.predictor.base import BatchItem, PredictorClient
from stockdash.predictor.http import HttpPredictorClient

__all__ = ["BatchItem", "PredictorClient", "HttpPredictorClient"]
