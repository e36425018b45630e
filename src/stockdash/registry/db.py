from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


class Database:
    """PostgreSQL database wrapper using psycopg3.

    Each ``execute`` runs in its own transaction on a pooled connection;
    a failed statement is rolled back before the connection is released.
    """

    def __init__(self, dsn: str, *, pooled: bool = True, max_size: int = 10) -> None:
        self._dsn = dsn
        self._pooled = pooled
        self._max_size = max_size
        self._pool: ConnectionPool | None = None
        self._conn: psycopg.Connection | None = None

    def connect(self) -> None:
        """Open the connection pool (or a single connection when unpooled)."""
        if self._pooled:
            self._pool = ConnectionPool(
                self._dsn,
                max_size=self._max_size,
                kwargs={"row_factory": dict_row},
                open=True,
            )
            self._pool.wait()
            logger.info("Connection pool established (max_size=%d)", self._max_size)
        else:
            self._conn = psycopg.connect(self._dsn, row_factory=dict_row)
            logger.info("Single connection established")

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @contextmanager
    def _transaction(self) -> Iterator[psycopg.Connection]:
        """Borrow a connection for one transaction and hand it back.

        Commits on a clean exit, rolls back when the block raises.
        """
        if self._pool is not None:
            conn = self._pool.getconn()
        elif self._conn is not None:
            conn = self._conn
        else:
            raise RuntimeError("Database not connected. Call connect() first.")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            if self._pool is not None:
                self._pool.putconn(conn)

    def execute(self, query: str, params: tuple | None = None) -> list[dict]:
        """Execute a query and return rows as dicts (empty for no result set)."""
        with self._transaction() as conn, conn.cursor() as cur:
            cur.execute(query, params)
            if cur.description is None:
                return []
            return [dict(row) for row in cur.fetchall()]

    def run_migrations(self, migrations_dir: str | Path = MIGRATIONS_DIR) -> list[str]:
        """Apply pending SQL migration files in filename order.

        Each file commits with its ``_migrations`` row, so a failing file
        leaves the earlier ones applied. Returns the filenames applied by
        this call.
        """
        applied_now: list[str] = []
        with self._transaction() as conn, conn.cursor() as cur:
            cur.execute("""
                CREATE TABLE IF NOT EXISTS _migrations (
                    filename TEXT PRIMARY KEY,
                    applied_at TIMESTAMPTZ DEFAULT NOW()
                )
            """)
            conn.commit()

            cur.execute("SELECT filename FROM _migrations ORDER BY filename")
            done = {row["filename"] for row in cur.fetchall()}

            pending = [f for f in sorted(Path(migrations_dir).glob("*.sql")) if f.name not in done]
            if not pending:
                logger.debug("No pending migrations in %s", migrations_dir)
            for sql_file in pending:
                logger.info("Applying migration: %s", sql_file.name)
                cur.execute(sql_file.read_text())
                cur.execute("INSERT INTO _migrations (filename) VALUES (%s)", (sql_file.name,))
                conn.commit()
                applied_now.append(sql_file.name)
        return applied_now

    def health_check(self) -> bool:
        """Round trip ``SELECT 1``; any failure counts as unhealthy."""
        try:
            rows = self.execute("SELECT 1 AS ok")
        except Exception as e:
            logger.warning("Database health check failed: %s", e)
            return False
        return bool(rows) and rows[0].get("ok") == 1

    def __enter__(self) -> Database:
        self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
