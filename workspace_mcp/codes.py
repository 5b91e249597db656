"""Single-use, expiring records that carry state through the OAuth flow.

``oauth_codes`` holds authorization codes that MCP clients redeem at the
token endpoint. ``oauth_states`` holds the opaque ``state`` values sent to
Google and consumed when Google redirects back to the callback.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from .db import Database, now_secs

CODE_TTL_SECS = 300
STATE_TTL_SECS = 300

_CODE_COLUMNS = (
    "code, mcp_client_id, mcp_redirect_uri, code_challenge, "
    "google_sub, resource, expires_at"
)
_STATE_COLUMNS = (
    "state_id, mcp_client_id, mcp_redirect_uri, mcp_state, "
    "code_challenge, code_challenge_method, resource, expires_at"
)


@dataclass(frozen=True)
class OAuthCode:
    code: str
    mcp_client_id: str
    mcp_redirect_uri: str
    code_challenge: str
    google_sub: str
    resource: str | None
    expires_at: int


@dataclass(frozen=True)
class OAuthState:
    state_id: str
    mcp_client_id: str
    mcp_redirect_uri: str
    mcp_state: str | None
    code_challenge: str
    code_challenge_method: str
    resource: str | None
    expires_at: int


@dataclass(frozen=True)
class InsertCode:
    code: str
    mcp_client_id: str
    mcp_redirect_uri: str
    code_challenge: str
    google_sub: str
    resource: str | None = None


@dataclass(frozen=True)
class InsertState:
    state_id: str
    mcp_client_id: str
    mcp_redirect_uri: str
    mcp_state: str | None
    code_challenge: str
    code_challenge_method: str
    resource: str | None = None


def insert_code(db: Database, req: InsertCode) -> None:
    """Store an authorization code that expires after five minutes."""
    expires_at = now_secs() + CODE_TTL_SECS

    def run(conn: sqlite3.Connection) -> None:
        conn.execute(
            f"INSERT INTO oauth_codes ({_CODE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                req.code,
                req.mcp_client_id,
                req.mcp_redirect_uri,
                req.code_challenge,
                req.google_sub,
                req.resource,
                expires_at,
            ),
        )

    db.call(run)


def consume_code(db: Database, code: str) -> OAuthCode | None:
    """Fetch and delete a code in one transaction.

    Returns ``None`` when the code is unknown or expired; the row is removed
    either way, so a code can be redeemed at most once.
    """

    def run(conn: sqlite3.Connection) -> OAuthCode | None:
        row = conn.execute(
            f"SELECT {_CODE_COLUMNS} FROM oauth_codes WHERE code = ?", (code,)
        ).fetchone()
        conn.execute("DELETE FROM oauth_codes WHERE code = ?", (code,))
        return OAuthCode(*row) if row is not None else None

    found = db.call(run)
    if found is None or found.expires_at < now_secs():
        return None
    return found


def insert_state(db: Database, req: InsertState) -> None:
    """Store a proxy state record that expires after five minutes."""
    expires_at = now_secs() + STATE_TTL_SECS

    def run(conn: sqlite3.Connection) -> None:
        conn.execute(
            f"INSERT INTO oauth_states ({_STATE_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                req.state_id,
                req.mcp_client_id,
                req.mcp_redirect_uri,
                req.mcp_state,
                req.code_challenge,
                req.code_challenge_method,
                req.resource,
                expires_at,
            ),
        )

    db.call(run)


def consume_state(db: Database, state_id: str) -> OAuthState | None:
    """Fetch and delete a state record; ``None`` if unknown or expired."""

    def run(conn: sqlite3.Connection) -> OAuthState | None:
        row = conn.execute(
            f"SELECT {_STATE_COLUMNS} FROM oauth_states WHERE state_id = ?",
            (state_id,),
        ).fetchone()
        conn.execute("DELETE FROM oauth_states WHERE state_id = ?", (state_id,))
        return OAuthState(*row) if row is not None else None

    found = db.call(run)
    if found is None or found.expires_at < now_secs():
        return None
    return found


def sweep_expired(db: Database) -> int:
    """Delete expired codes and states; return how many rows were removed."""
    now = now_secs()

    def run(conn: sqlite3.Connection) -> int:
        codes = conn.execute(
            "DELETE FROM oauth_codes WHERE expires_at < ?", (now,)
        ).rowcount
        states = conn.execute(
            "DELETE FROM oauth_states WHERE expires_at < ?", (now,)
        ).rowcount
        return codes + states

    return db.call(run)