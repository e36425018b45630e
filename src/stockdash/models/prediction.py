from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

BUY_THRESHOLD = 0.55
SELL_THRESHOLD = 0.45


class Direction(StrEnum):
    UP = "UP"
    DOWN = "DOWN"


class Signal(StrEnum):
    BUY = "BUY"
    SELL = "SELL"
    NO_TRADE = "NO_TRADE"


def signal_for_confidence(confidence: float) -> Signal:
    """Trading signal implied by a confidence value.

    BUY above 0.55, SELL below 0.45, NO_TRADE for the band in between
    (both bounds inclusive).
    """
    if confidence > BUY_THRESHOLD:
        return Signal.BUY
    if confidence < SELL_THRESHOLD:
        return Signal.SELL
    return Signal.NO_TRADE


@dataclass
class Prediction:
    """A stored prediction row. Immutable once written."""

    user_id: int
    symbol: str
    prediction: Direction
    confidence: float
    signal: Signal
    date: datetime | None = None
    id: int | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class PredictorResult:
    """A successful answer from the external predictor (its vocabulary)."""

    symbol: str
    direction: Direction
    confidence: float
    signal: Signal
    timestamp: str

    @property
    def is_consistent(self) -> bool:
        return signal_for_confidence(self.confidence) == self.signal

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "direction": self.direction.value,
            "confidence": self.confidence,
            "signal": self.signal.value,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class PredictorError:
    """Per-symbol failure marker inside a batch response."""

    symbol: str
    error: str

    def to_dict(self) -> dict:
        return {"symbol": self.symbol, "error": self.error}
