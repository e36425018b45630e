from __future__ import annotations

from stockdash.models.prediction import (
    BUY_THRESHOLD,
    SELL_THRESHOLD,
    Direction,
    Prediction,
    PredictorError,
    PredictorResult,
    Signal,
    signal_for_confidence,
)
from stockdash.models.symbol import normalize_symbol, normalize_symbols
from stockdash.models.user import User
from stockdash.models.watchlist import WatchlistEntry

__all__ = [
    # prediction
    "Direction",
    "Signal",
    "Prediction",
    "PredictorResult",
    "PredictorError",
    "signal_for_confidence",
    "BUY_THRESHOLD",
    "SELL_THRESHOLD",
    # symbol
    "normalize_symbol",
    "normalize_symbols",
    # user
    "User",
    # watchlist
    "WatchlistEntry",
]
