"""FastAPI application factory with CORS, auth middleware, and lifespan management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from stockdash.api.auth import authenticate
from stockdash.api.deps import app_state
from stockdash.api.errors import error_response, register_error_handlers
from stockdash.config import load_config
from stockdash.errors import StockDashError
from stockdash.pipeline import PredictionPipeline
from stockdash.predictor.http import HttpPredictorClient
from stockdash.registry.db import Database
from stockdash.registry.store import PredictionStore

logger = logging.getLogger(__name__)

API_PREFIX = "/api"

# Paths that don't require authentication
PUBLIC_PATHS = {
    f"{API_PREFIX}/auth/login",
    f"{API_PREFIX}/auth/register",
    f"{API_PREFIX}/auth/logout",
    f"{API_PREFIX}/system/health",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage startup/shutdown of the DB pool and the predictor client."""
    config = load_config()
    if not config.auth_secret_key:
        raise RuntimeError("AUTH_SECRET_KEY must be set to verify bearer tokens")

    db = Database(config.db_dsn)
    db.connect()
    store = PredictionStore(db)
    predictor = HttpPredictorClient.from_config(config)

    app_state.config = config
    app_state.db = db
    app_state.store = store
    app_state.predictor = predictor
    app_state.pipeline = PredictionPipeline(store, predictor)
    logger.info("API started, predictor at %s", config.predictor_base_url)
    yield

    await predictor.close()
    db.close()
    app_state.pipeline = None
    app_state.predictor = None
    app_state.store = None
    app_state.db = None
    app_state.config = None
    logger.info("API shutdown complete")


class AuthMiddleware(BaseHTTPMiddleware):
    """Require a valid bearer token for all API routes except public ones.

    On success the caller's id is stored on ``request.state.user_id``.
    """

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if not path.startswith(API_PREFIX) or path in PUBLIC_PATHS:
            return await call_next(request)

        # CORS preflight carries no credentials
        if request.method == "OPTIONS":
            return await call_next(request)

        config = app_state.config
        if not config or not config.auth_secret_key:
            logger.error("Auth secret not configured; rejecting %s", path)
            return error_response(500, "Internal server error")

        try:
            payload = authenticate(request, config.auth_secret_key)
        except StockDashError as e:
            return error_response(e.status_code, e.message)

        request.state.user_id = payload.user_id
        return await call_next(request)


def create_app(*, use_lifespan: bool = True, cors_origins: tuple[str, ...] | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        use_lifespan: If False, skip the production lifespan (useful for testing
            where deps are injected via app_state directly).
        cors_origins: Allowed browser origins; read from config when omitted.
    """
    app = FastAPI(
        title="Stock Prediction Dashboard API",
        version="0.1.0",
        lifespan=lifespan if use_lifespan else None,
    )

    if cors_origins is None:
        cors_origins = load_config().cors_origins

    # CORS goes on last so it is outermost and 401s still carry CORS headers
    app.add_middleware(AuthMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    from stockdash.api.routes import auth, predictions, system, watchlist

    app.include_router(auth.router, prefix=API_PREFIX, tags=["auth"])
    app.include_router(predictions.router, prefix=API_PREFIX, tags=["predictions"])
    app.include_router(watchlist.router, prefix=API_PREFIX, tags=["watchlist"])
    app.include_router(system.router, prefix=API_PREFIX, tags=["system"])

    return app
