"""Filtering and summary statistics over fetched predictions.

Pure functions with no I/O; the API layer fetches rows from the store and
hands them here for the history and analytics views.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from stockdash.models.prediction import Direction, Prediction, PredictorError, PredictorResult, Signal

ALL = "ALL"
SORT_KEYS = ("symbol", "confidence", "signal")

# bullish ranks highest
_SIGNAL_RANK = {Signal.SELL: 1, Signal.NO_TRADE: 2, Signal.BUY: 3}


@dataclass
class PredictionStats:
    total: int = 0
    signals: dict[str, int] = field(default_factory=lambda: {s.value: 0 for s in Signal})
    directions: dict[str, int] = field(default_factory=lambda: {d.value: 0 for d in Direction})
    avg_confidence: float = 0.0
    avg_confidence_by_signal: dict[str, float] = field(
        default_factory=lambda: {s.value: 0.0 for s in Signal}
    )

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "signals": dict(self.signals),
            "directions": dict(self.directions),
            "avgConfidence": self.avg_confidence,
            "avgConfidenceBySignal": dict(self.avg_confidence_by_signal),
        }


def filter_predictions(
    predictions: list[Prediction], query: str = "", signal: str = ALL,
) -> list[Prediction]:
    """Case-insensitive symbol substring match plus an exact signal match.

    An empty ``query`` matches everything; ``signal="ALL"`` disables the
    signal filter.
    """
    needle = (query or "").strip().lower()
    wanted = (signal or ALL).strip().upper()
    out = []
    for p in predictions:
        if needle and needle not in p.symbol.lower():
            continue
        if wanted != ALL and p.signal != wanted:
            continue
        out.append(p)
    return out


def select_symbol(predictions: list[Prediction], symbol: str = ALL) -> list[Prediction]:
    """Exact symbol selection; ``"ALL"`` keeps everything."""
    wanted = (symbol or ALL).strip().upper()
    if wanted == ALL:
        return list(predictions)
    return [p for p in predictions if p.symbol == wanted]


def distinct_symbols(predictions: list[Prediction]) -> list[str]:
    return sorted({p.symbol for p in predictions})


def summarize(predictions: list[Prediction]) -> PredictionStats:
    """Counts per signal and direction plus mean confidence.

    Empty input (and empty signal buckets) yield 0.0, never NaN.
    """
    stats = PredictionStats(total=len(predictions))
    if not predictions:
        return stats

    sums = {s.value: 0.0 for s in Signal}
    for p in predictions:
        stats.signals[p.signal.value] += 1
        stats.directions[p.prediction.value] += 1
        sums[p.signal.value] += p.confidence

    stats.avg_confidence = sum(p.confidence for p in predictions) / len(predictions)
    for sig, total in sums.items():
        count = stats.signals[sig]
        stats.avg_confidence_by_signal[sig] = total / count if count else 0.0
    return stats


def confidence_trend(
    predictions: list[Prediction], points: int = 20,
) -> list[tuple[datetime | None, float]]:
    """The most recent ``points`` predictions, oldest first.

    Input is expected newest first, as ``list_predictions`` returns it.
    """
    if points <= 0:
        return []
    recent = predictions[:points]
    return [(p.date, p.confidence) for p in reversed(recent)]


def sort_results(
    results: list[PredictorResult | PredictorError],
    key: str = "confidence",
    descending: bool = True,
) -> list[PredictorResult | PredictorError]:
    """Sort batch results by symbol, confidence or signal. Errors go last.

    Signals order by strength: SELL < NO_TRADE < BUY.
    """
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {key}")

    ok = [r for r in results if isinstance(r, PredictorResult)]
    failed = [r for r in results if not isinstance(r, PredictorResult)]

    if key == "symbol":
        ok.sort(key=lambda r: r.symbol, reverse=descending)
    elif key == "confidence":
        ok.sort(key=lambda r: r.confidence, reverse=descending)
    else:
        ok.sort(key=lambda r: _SIGNAL_RANK[r.signal], reverse=descending)
    return [*ok, *failed]
