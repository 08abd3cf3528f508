"""Session repository — SQLite load/save of ``SessionState`` blobs."""

import json
import logging
from datetime import datetime, timezone

from tradeplan.repos.db import get_connection
from tradeplan.state.session import SessionState

logger = logging.getLogger("tradeplan")


class SessionRepo:
    """Data access layer for persisted planning sessions.

    Args:
        db_path: Path to the SQLite database file.
        default_capital: Capital given to a session that has never been saved.
    """

    def __init__(self, db_path: str, default_capital: float = 0.0) -> None:
        self._db_path = db_path
        self._default_capital = default_capital

    def load(self, session_key: str = "default") -> SessionState:
        """Return the stored session, or a fresh one if absent or unreadable."""
        conn = get_connection(self._db_path)
        try:
            row = conn.execute(
                "SELECT state_json FROM sessions WHERE session_key = ?",
                (session_key,),
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            return SessionState(capital=self._default_capital)
        try:
            return SessionState.from_dict(json.loads(row["state_json"]))
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("Stored session '%s' is unreadable, starting fresh: %s", session_key, exc)
            return SessionState(capital=self._default_capital)

    def save(self, state: SessionState, session_key: str = "default") -> None:
        """Insert or replace the stored session."""
        conn = get_connection(self._db_path)
        try:
            conn.execute(
                """
                INSERT INTO sessions (session_key, state_json, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(session_key) DO UPDATE SET
                    state_json = excluded.state_json,
                    updated_at = excluded.updated_at
                """,
                (
                    session_key,
                    json.dumps(state.to_dict()),
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
            conn.commit()
        finally:
            conn.close()
