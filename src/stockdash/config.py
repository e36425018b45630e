from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


@dataclass(frozen=True)
class DatabaseConfig:
    host: str
    port: int
    database: str
    user: str
    password: str

    @property
    def dsn(self) -> str:
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass(frozen=True)
class AppConfig:
    db_dsn: str
    auth_secret_key: str = ""
    auth_token_expiry_hours: int = 168
    predictor_base_url: str = "http://localhost:8000/api"
    predictor_timeout_seconds: float = 30.0
    predictor_max_concurrency: int = 8
    default_history_limit: int = 50
    cors_origins: tuple[str, ...] = field(default=("http://localhost:3000",))


def _split_origins(raw: str) -> tuple[str, ...]:
    return tuple(o.strip() for o in raw.split(",") if o.strip())


def _dsn_from_parts() -> str:
    host = os.environ.get("DB_HOST", "")
    if not host:
        return ""
    return DatabaseConfig(
        host=host,
        port=int(os.environ.get("DB_PORT", "5432")),
        database=os.environ.get("DB_NAME", "stockdash"),
        user=os.environ.get("DB_USER", "postgres"),
        password=os.environ.get("DB_PASSWORD", ""),
    ).dsn


def load_config() -> AppConfig:
    """Load application config from environment variables.

    Loads .env file if present in the current directory.
    """
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    return AppConfig(
        db_dsn=os.environ.get("DATABASE_URL") or _dsn_from_parts(),
        auth_secret_key=os.environ.get("AUTH_SECRET_KEY", ""),
        auth_token_expiry_hours=int(os.environ.get("AUTH_TOKEN_EXPIRY_HOURS", "168")),
        predictor_base_url=os.environ.get(
            "PREDICTOR_BASE_URL", "http://localhost:8000/api"
        ).rstrip("/"),
        predictor_timeout_seconds=float(os.environ.get("PREDICTOR_TIMEOUT_SECONDS", "30")),
        predictor_max_concurrency=int(os.environ.get("PREDICTOR_MAX_CONCURRENCY", "8")),
        default_history_limit=int(os.environ.get("DEFAULT_HISTORY_LIMIT", "50")),
        cors_origins=_split_origins(os.environ.get("CORS_ORIGINS", "http://localhost:3000")),
    )
