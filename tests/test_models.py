from __future__ import annotations

from datetime import datetime

import pytest

from stockdash.errors import InvalidSymbol
from stockdash.models import (
    Direction,
    PredictorError,
    PredictorResult,
    Signal,
    User,
    normalize_symbol,
    normalize_symbols,
    signal_for_confidence,
)


# ---------------------------------------------------------------------------
# Signal policy
# ---------------------------------------------------------------------------


class TestSignalPolicy:
    @pytest.mark.parametrize("confidence", [0.56, 0.5501, 0.7, 0.99, 1.0])
    def test_buy_above_upper_threshold(self, confidence: float) -> None:
        assert signal_for_confidence(confidence) == Signal.BUY

    @pytest.mark.parametrize("confidence", [0.0, 0.1, 0.3, 0.4499, 0.44])
    def test_sell_below_lower_threshold(self, confidence: float) -> None:
        assert signal_for_confidence(confidence) == Signal.SELL

    @pytest.mark.parametrize("confidence", [0.45, 0.5, 0.55])
    def test_no_trade_band_is_inclusive(self, confidence: float) -> None:
        assert signal_for_confidence(confidence) == Signal.NO_TRADE

    def test_every_point_on_a_grid_maps_to_exactly_one_signal(self) -> None:
        for i in range(0, 1001):
            c = i / 1000
            expected = Signal.BUY if c > 0.55 else Signal.SELL if c < 0.45 else Signal.NO_TRADE
            assert signal_for_confidence(c) == expected


class TestPredictorResult:
    def test_consistent_result(self) -> None:
        r = PredictorResult("AAPL", Direction.UP, 0.8, Signal.BUY, "2026-01-02T00:00:00")
        assert r.is_consistent

    def test_inconsistent_result(self) -> None:
        r = PredictorResult("AAPL", Direction.UP, 0.2, Signal.BUY, "2026-01-02T00:00:00")
        assert not r.is_consistent

    def test_to_dict_uses_predictor_vocabulary(self) -> None:
        r = PredictorResult("AAPL", Direction.DOWN, 0.3, Signal.SELL, "t")
        assert r.to_dict() == {
            "symbol": "AAPL",
            "direction": "DOWN",
            "confidence": 0.3,
            "signal": "SELL",
            "timestamp": "t",
        }

    def test_error_marker_to_dict(self) -> None:
        assert PredictorError("BAD", "boom").to_dict() == {"symbol": "BAD", "error": "boom"}


# ---------------------------------------------------------------------------
# Symbols
# ---------------------------------------------------------------------------


class TestNormalizeSymbol:
    def test_uppercases_and_strips(self) -> None:
        assert normalize_symbol("  aapl ") == "AAPL"

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_blank_rejected(self, raw) -> None:
        with pytest.raises(InvalidSymbol):
            normalize_symbol(raw)

    def test_batch_dedupes_preserving_order(self) -> None:
        assert normalize_symbols(["msft", "AAPL", "Msft", "tsla"]) == ["MSFT", "AAPL", "TSLA"]

    def test_empty_batch_rejected(self) -> None:
        with pytest.raises(InvalidSymbol):
            normalize_symbols([])

    def test_batch_with_blank_rejected(self) -> None:
        with pytest.raises(InvalidSymbol):
            normalize_symbols(["AAPL", " "])


class TestUser:
    def test_public_omits_password_hash(self) -> None:
        user = User(
            id=1, email="a@b.co", password_hash="$2b$secret", name="Ann",
            created_at=datetime(2026, 1, 1, 9, 30),
        )
        data = user.public()
        assert "password_hash" not in data
        assert data == {
            "id": 1, "email": "a@b.co", "name": "Ann", "createdAt": "2026-01-01T09:30:00",
        }
