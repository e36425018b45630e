from __future__ import annotations

import logging
from datetime import datetime

from stockdash.errors import DuplicateEntry, NotFound
from stockdash.models.prediction import Direction, Prediction, Signal
from stockdash.models.user import User
from stockdash.models.watchlist import WatchlistEntry
from stockdash.registry.db import Database

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50

_PREDICTION_COLUMNS = "id, user_id, symbol, prediction, confidence, signal, date, created_at"


class PredictionStore:
    """Query layer for users, predictions and watchlist entries.

    Every prediction and watchlist operation is scoped to a single user id.
    Symbols are expected upper-cased by the caller.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(self, email: str, password_hash: str, name: str | None = None) -> User:
        rows = self._db.execute(
            "INSERT INTO dashboard.users (email, password_hash, name) "
            "VALUES (%s, %s, %s) "
            "ON CONFLICT (email) DO NOTHING "
            "RETURNING id, email, password_hash, name, created_at",
            (email, password_hash, name),
        )
        if not rows:
            raise DuplicateEntry("Email already registered")
        return self._row_to_user(rows[0])

    def get_user_by_email(self, email: str) -> User | None:
        rows = self._db.execute(
            "SELECT id, email, password_hash, name, created_at "
            "FROM dashboard.users WHERE email = %s",
            (email,),
        )
        return self._row_to_user(rows[0]) if rows else None

    def get_user(self, user_id: int) -> User | None:
        rows = self._db.execute(
            "SELECT id, email, password_hash, name, created_at "
            "FROM dashboard.users WHERE id = %s",
            (user_id,),
        )
        return self._row_to_user(rows[0]) if rows else None

    # ------------------------------------------------------------------
    # Predictions
    # ------------------------------------------------------------------

    def create_prediction(
        self,
        user_id: int,
        symbol: str,
        direction: Direction | str,
        confidence: float,
        signal: Signal | str,
        date: datetime | None = None,
    ) -> Prediction:
        """Insert an immutable prediction row. Repeats accumulate as history."""
        rows = self._db.execute(
            "INSERT INTO dashboard.predictions "
            "(user_id, symbol, prediction, confidence, signal, date) "
            "VALUES (%s, %s, %s, %s, %s, COALESCE(%s::timestamptz, NOW())) "
            f"RETURNING {_PREDICTION_COLUMNS}",
            (
                user_id,
                symbol,
                Direction(direction).value,
                float(confidence),
                Signal(signal).value,
                date,
            ),
        )
        return self._row_to_prediction(rows[0])

    def list_predictions(
        self, user_id: int, symbol: str | None = None, limit: int = DEFAULT_LIMIT,
    ) -> list[Prediction]:
        """Most recent predictions first, optionally for one symbol."""
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")

        if symbol:
            rows = self._db.execute(
                f"SELECT {_PREDICTION_COLUMNS} FROM dashboard.predictions "
                "WHERE user_id = %s AND symbol = %s "
                "ORDER BY date DESC, id DESC LIMIT %s",
                (user_id, symbol, limit),
            )
        else:
            rows = self._db.execute(
                f"SELECT {_PREDICTION_COLUMNS} FROM dashboard.predictions "
                "WHERE user_id = %s "
                "ORDER BY date DESC, id DESC LIMIT %s",
                (user_id, limit),
            )
        return [self._row_to_prediction(r) for r in rows]

    # ------------------------------------------------------------------
    # Watchlist
    # ------------------------------------------------------------------

    def add_watchlist_entry(self, user_id: int, symbol: str) -> WatchlistEntry:
        """Add a symbol to the user's watchlist.

        The (user_id, symbol) unique constraint decides races: a conflicting
        insert returns no row and surfaces as DuplicateEntry.
        """
        rows = self._db.execute(
            "INSERT INTO dashboard.watchlist (user_id, symbol) VALUES (%s, %s) "
            "ON CONFLICT (user_id, symbol) DO NOTHING "
            "RETURNING id, user_id, symbol, created_at",
            (user_id, symbol),
        )
        if not rows:
            raise DuplicateEntry("Symbol already in watchlist")
        return self._row_to_watchlist(rows[0])

    def remove_watchlist_entry(self, user_id: int, symbol: str) -> None:
        rows = self._db.execute(
            "DELETE FROM dashboard.watchlist WHERE user_id = %s AND symbol = %s RETURNING id",
            (user_id, symbol),
        )
        if not rows:
            raise NotFound("Symbol not in watchlist")
        logger.debug("Removed %s from watchlist of user %s", symbol, user_id)

    def list_watchlist(self, user_id: int) -> list[WatchlistEntry]:
        rows = self._db.execute(
            "SELECT id, user_id, symbol, created_at FROM dashboard.watchlist "
            "WHERE user_id = %s ORDER BY created_at DESC, id DESC",
            (user_id,),
        )
        return [self._row_to_watchlist(r) for r in rows]

    # ------------------------------------------------------------------
    # Row mappers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_prediction(r: dict) -> Prediction:
        return Prediction(
            id=r["id"],
            user_id=r["user_id"],
            symbol=r["symbol"],
            prediction=Direction(r["prediction"]),
            confidence=float(r["confidence"]),
            signal=Signal(r["signal"]),
            date=r.get("date"),
            created_at=r.get("created_at"),
        )

    @staticmethod
    def _row_to_watchlist(r: dict) -> WatchlistEntry:
        return WatchlistEntry(
            id=r["id"],
            user_id=r["user_id"],
            symbol=r["symbol"],
            created_at=r.get("created_at"),
        )

    @staticmethod
    def _row_to_user(r: dict) -> User:
        return User(
            id=r["id"],
            email=r["email"],
            password_hash=r["password_hash"],
            name=r.get("name"),
            created_at=r.get("created_at"),
        )
