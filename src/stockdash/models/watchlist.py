from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class WatchlistEntry:
    user_id: int
    symbol: str
    id: int | None = None
    created_at: datetime | None = None
