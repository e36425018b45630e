"""Response shapes shared by the route modules."""

from __future__ import annotations

from datetime import datetime

from stockdash.models.prediction import Prediction
from stockdash.models.watchlist import WatchlistEntry


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def prediction_to_dict(p: Prediction) -> dict:
    return {
        "id": p.id,
        "symbol": p.symbol,
        "prediction": p.prediction.value,
        "confidence": p.confidence,
        "signal": p.signal.value,
        "date": _iso(p.date),
        "createdAt": _iso(p.created_at),
    }


def watchlist_to_dict(entry: WatchlistEntry) -> dict:
    return {
        "id": entry.id,
        "symbol": entry.symbol,
        "createdAt": _iso(entry.created_at),
    }
