"""Dependency injection for the FastAPI application."""

from __future__ import annotations

from fastapi import Request

from stockdash.config import AppConfig
from stockdash.errors import Unauthenticated
from stockdash.pipeline import PredictionPipeline
from stockdash.predictor.base import PredictorClient
from stockdash.registry.db import Database
from stockdash.registry.store import PredictionStore


class AppState:
    """Holds shared application state initialised during lifespan."""

    def __init__(self) -> None:
        self.config: AppConfig | None = None
        self.db: Database | None = None
        self.store: PredictionStore | None = None
        self.predictor: PredictorClient | None = None
        self.pipeline: PredictionPipeline | None = None


# Singleton shared across the app
app_state = AppState()


def get_config() -> AppConfig:
    if app_state.config is None:
        raise RuntimeError("Config not initialised")
    return app_state.config


def get_store() -> PredictionStore:
    if app_state.store is None:
        raise RuntimeError("PredictionStore not initialised")
    return app_state.store


def get_pipeline() -> PredictionPipeline:
    if app_state.pipeline is None:
        raise RuntimeError("PredictionPipeline not initialised")
    return app_state.pipeline


def get_user_id(request: Request) -> int:
    """Identity placed on the request by AuthMiddleware."""
    user_id = getattr(request.state, "user_id", None)
    if user_id is None:
        raise Unauthenticated()
    return user_id
