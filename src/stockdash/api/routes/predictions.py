"""Prediction endpoints: history, manual save, live predict, batch predict, stats."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from stockdash import analytics
from stockdash.api.deps import get_config, get_pipeline, get_store, get_user_id
from stockdash.api.routes.shared import prediction_to_dict
from stockdash.config import AppConfig
from stockdash.models.prediction import Direction, Signal
from stockdash.models.symbol import normalize_symbol
from stockdash.pipeline import PredictionPipeline
from stockdash.registry.store import PredictionStore

router = APIRouter()


class PredictionIn(BaseModel):
    symbol: str
    prediction: Direction
    confidence: float = Field(ge=0.0, le=1.0)
    signal: Signal


class PredictRequest(BaseModel):
    symbol: str


class BatchPredictRequest(BaseModel):
    symbols: list[str]


def _history_limit(limit: int | None, config: AppConfig) -> int:
    return limit if limit is not None else config.default_history_limit


@router.get("/predictions")
def list_predictions(
    symbol: str | None = None,
    limit: int | None = Query(None, ge=1),
    user_id: int = Depends(get_user_id),
    store: PredictionStore = Depends(get_store),
    config: AppConfig = Depends(get_config),
) -> list[dict]:
    """The caller's predictions, most recent first."""
    wanted = normalize_symbol(symbol) if symbol and symbol.strip() else None
    rows = store.list_predictions(user_id, symbol=wanted, limit=_history_limit(limit, config))
    return [prediction_to_dict(p) for p in rows]


@router.post("/predictions")
def save_prediction(
    body: PredictionIn,
    user_id: int = Depends(get_user_id),
    store: PredictionStore = Depends(get_store),
) -> dict:
    created = store.create_prediction(
        user_id,
        normalize_symbol(body.symbol),
        body.prediction,
        body.confidence,
        body.signal,
    )
    return prediction_to_dict(created)


@router.get("/predictions/stats")
def prediction_stats(
    query: str = "",
    signal: str = analytics.ALL,
    symbol: str = analytics.ALL,
    limit: int | None = Query(None, ge=1),
    trend_points: int = Query(20, ge=1, le=500),
    user_id: int = Depends(get_user_id),
    store: PredictionStore = Depends(get_store),
    config: AppConfig = Depends(get_config),
) -> dict:
    """Summary statistics over the caller's (filtered) prediction history."""
    rows = store.list_predictions(user_id, limit=_history_limit(limit, config))
    selected = analytics.select_symbol(rows, symbol)
    filtered = analytics.filter_predictions(selected, query=query, signal=signal)

    stats = analytics.summarize(filtered).to_dict()
    stats["symbols"] = analytics.distinct_symbols(rows)
    stats["trend"] = [
        {"date": d.isoformat() if d else None, "confidence": c}
        for d, c in analytics.confidence_trend(filtered, points=trend_points)
    ]
    return stats


@router.post("/predict")
async def predict(
    body: PredictRequest,
    user_id: int = Depends(get_user_id),
    pipeline: PredictionPipeline = Depends(get_pipeline),
) -> dict:
    """Run a live prediction for one symbol and record it."""
    result = await pipeline.predict_symbol(user_id, body.symbol)
    return result.to_dict()


@router.post("/predict/batch")
async def predict_batch(
    body: BatchPredictRequest,
    sort_by: Literal["symbol", "confidence", "signal"] | None = None,
    order: Literal["asc", "desc"] = "desc",
    user_id: int = Depends(get_user_id),
    pipeline: PredictionPipeline = Depends(get_pipeline),
) -> list[dict]:
    """Predict many symbols; failed symbols come back as ``{symbol, error}``."""
    results = await pipeline.predict_batch(user_id, body.symbols)
    if sort_by is not None:
        results = analytics.sort_results(results, key=sort_by, descending=order == "desc")
    return [r.to_dict() for r in results]
