"""SQLite persistence for OAuth codes and proxy state.

One connection guarded by a lock; every unit of work runs through
:meth:`Database.call`, which commits on success and rolls back on error.
WAL is enabled for file databases so reads do not block the occasional write.
"""

from __future__ import annotations

import sqlite3
import threading
import time
from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")

_MIGRATIONS: tuple[str, ...] = (
    """
    CREATE TABLE oauth_codes (
        code             TEXT PRIMARY KEY,
        mcp_client_id    TEXT NOT NULL,
        mcp_redirect_uri TEXT NOT NULL,
        code_challenge   TEXT NOT NULL,
        google_sub       TEXT NOT NULL,
        resource         TEXT,
        expires_at       INTEGER NOT NULL
    );
    CREATE INDEX idx_oauth_codes_expires_at ON oauth_codes (expires_at);

    CREATE TABLE oauth_states (
        state_id              TEXT PRIMARY KEY,
        mcp_client_id         TEXT NOT NULL,
        mcp_redirect_uri      TEXT NOT NULL,
        mcp_state             TEXT,
        code_challenge        TEXT NOT NULL,
        code_challenge_method TEXT NOT NULL,
        resource              TEXT,
        expires_at            INTEGER NOT NULL
    );
    CREATE INDEX idx_oauth_states_expires_at ON oauth_states (expires_at);
    """,
)


class DbError(Exception):
    """A storage operation failed."""


def now_secs() -> int:
    """Current Unix time in whole seconds."""
    return max(int(time.time()), 0)


class Database:
    """A single SQLite connection shared behind a lock."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._lock = threading.Lock()

    @classmethod
    def open(cls, path: str) -> Database:
        """Open or create the database at ``path`` and apply pending migrations."""
        try:
            conn = sqlite3.connect(str(path), check_same_thread=False)
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA foreign_keys = ON")
            conn.execute("PRAGMA synchronous = NORMAL")
        except sqlite3.Error as exc:
            raise DbError(f"sqlite: {exc}") from exc
        db = cls(conn)
        db.migrate()
        return db

    @classmethod
    def open_in_memory(cls) -> Database:
        """Open a private in-memory database with all migrations applied."""
        try:
            conn = sqlite3.connect(":memory:", check_same_thread=False)
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as exc:
            raise DbError(f"sqlite: {exc}") from exc
        db = cls(conn)
        db.migrate()
        return db

    def migrate(self) -> None:
        """Apply any migrations newer than the schema version; safe to repeat."""
        with self._lock:
            try:
                (version,) = self._conn.execute("PRAGMA user_version").fetchone()
                for number, script in enumerate(_MIGRATIONS[version:], start=version + 1):
                    self._conn.executescript(
                        f"BEGIN;\n{script}\nPRAGMA user_version = {number};\nCOMMIT;"
                    )
            except sqlite3.Error as exc:
                if self._conn.in_transaction:
                    self._conn.rollback()
                raise DbError(f"migration: {exc}") from exc

    def call(self, func: Callable[[sqlite3.Connection], T]) -> T:
        """Run ``func`` with the connection inside one transaction."""
        with self._lock:
            try:
                with self._conn:
                    return func(self._conn)
            except sqlite3.Error as exc:
                raise DbError(f"sqlite: {exc}") from exc

    def close(self) -> None:
        """Close the connection."""
        with self._lock:
            self._conn.close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()