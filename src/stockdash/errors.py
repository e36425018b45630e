"""Domain errors for the dashboard backend.

Raised by the store, the predictor client and the pipeline; mapped to HTTP
responses in ``stockdash.api.errors``. No framework imports here.
"""

from __future__ import annotations


class StockDashError(Exception):
    """Base error. ``status_code`` is the HTTP status the API layer uses."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class Unauthenticated(StockDashError):
    """No bearer token on the request."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class InvalidToken(StockDashError):
    """Token present but its signature or expiry check failed."""

    status_code = 401

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class InvalidSymbol(StockDashError):
    status_code = 400

    def __init__(self, symbol: str | None = None) -> None:
        super().__init__("Symbol is required" if not symbol else f"Invalid symbol: {symbol!r}")
        self.symbol = symbol


class MissingParameter(StockDashError):
    status_code = 400

    def __init__(self, name: str) -> None:
        super().__init__(f"{name.capitalize()} is required")
        self.name = name


class DuplicateEntry(StockDashError):
    status_code = 400


class NotFound(StockDashError):
    status_code = 404


class PredictionUnavailable(StockDashError):
    """The external predictor could not produce a result for a symbol."""

    status_code = 502

    def __init__(self, symbol: str, reason: str) -> None:
        super().__init__(f"Prediction unavailable for {symbol}: {reason}")
        self.symbol = symbol
        self.reason = reason
