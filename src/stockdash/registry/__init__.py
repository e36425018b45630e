from __future__ import annotations

from stockdash.registry.db import Database
from stockdash.registry.store import PredictionStore

__all__ = ["Database", "PredictionStore"]
