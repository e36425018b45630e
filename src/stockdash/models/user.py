from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    email: str
    password_hash: str
    name: str | None = None
    id: int | None = None
    created_at: datetime | None = None

    def public(self) -> dict:
        """Fields safe to return to the caller (never the password hash)."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
