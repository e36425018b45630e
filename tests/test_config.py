from __future__ import annotations

import os
from unittest.mock import patch

from stockdash.config import AppConfig, DatabaseConfig, load_config

_KEYS = (
    "DATABASE_URL", "AUTH_SECRET_KEY", "AUTH_TOKEN_EXPIRY_HOURS", "PREDICTOR_BASE_URL",
    "PREDICTOR_TIMEOUT_SECONDS", "PREDICTOR_MAX_CONCURRENCY", "DEFAULT_HISTORY_LIMIT",
    "CORS_ORIGINS", "DB_HOST", "DB_PORT", "DB_NAME", "DB_USER", "DB_PASSWORD",
)


class TestDatabaseConfig:
    def test_dsn_property(self) -> None:
        cfg = DatabaseConfig(
            host="localhost", port=5432, database="testdb", user="u", password="p"
        )
        assert cfg.dsn == "postgresql://u:p@localhost:5432/testdb"

    def test_frozen(self) -> None:
        cfg = DatabaseConfig(
            host="localhost", port=5432, database="testdb", user="u", password="p"
        )
        try:
            cfg.host = "other"  # type: ignore[misc]
            assert False, "Should be frozen"
        except AttributeError:
            pass


class TestLoadConfig:
    def test_loads_from_env(self) -> None:
        env = {
            "DATABASE_URL": "postgresql://u:p@host:5432/db",
            "AUTH_SECRET_KEY": "s3cret",
            "AUTH_TOKEN_EXPIRY_HOURS": "12",
            "PREDICTOR_BASE_URL": "http://predictor:8000/api/",
            "PREDICTOR_TIMEOUT_SECONDS": "5.5",
            "PREDICTOR_MAX_CONCURRENCY": "3",
            "DEFAULT_HISTORY_LIMIT": "25",
            "CORS_ORIGINS": "http://a.test, http://b.test,",
        }
        with patch.dict(os.environ, env, clear=False):
            cfg = load_config()

        assert cfg.db_dsn == "postgresql://u:p@host:5432/db"
        assert cfg.auth_secret_key == "s3cret"
        assert cfg.auth_token_expiry_hours == 12
        assert cfg.predictor_base_url == "http://predictor:8000/api"
        assert cfg.predictor_timeout_seconds == 5.5
        assert cfg.predictor_max_concurrency == 3
        assert cfg.default_history_limit == 25
        assert cfg.cors_origins == ("http://a.test", "http://b.test")

    def test_defaults(self) -> None:
        clean_env = {k: v for k, v in os.environ.items() if k not in _KEYS}
        with patch.dict(os.environ, clean_env, clear=True):
            cfg = load_config()

        assert cfg.db_dsn == ""
        assert cfg.auth_secret_key == ""
        assert cfg.auth_token_expiry_hours == 168
        assert cfg.predictor_base_url == "http://localhost:8000/api"
        assert cfg.predictor_timeout_seconds == 30.0
        assert cfg.default_history_limit == 50
        assert cfg.cors_origins == ("http://localhost:3000",)

    def test_dsn_from_parts_when_url_unset(self) -> None:
        clean_env = {k: v for k, v in os.environ.items() if k not in _KEYS}
        clean_env.update({"DB_HOST": "db", "DB_NAME": "dash", "DB_USER": "u", "DB_PASSWORD": "p"})
        with patch.dict(os.environ, clean_env, clear=True):
            cfg = load_config()

        assert cfg.db_dsn == "postgresql://u:p@db:5432/dash"

    def test_url_wins_over_parts(self) -> None:
        env = {"DATABASE_URL": "postgresql://x@y/z", "DB_HOST": "db"}
        with patch.dict(os.environ, env, clear=False):
            assert load_config().db_dsn == "postgresql://x@y/z"

    def test_app_config_frozen(self) -> None:
        cfg = AppConfig(db_dsn="")
        try:
            cfg.db_dsn = "x"  # type: ignore[misc]
            assert False, "Should be frozen"
        except AttributeError:
            pass
