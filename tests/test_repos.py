"""Tests for SQLite initialisation and the session repository."""

from tradeplan.repos.db import get_connection, init_db
from tradeplan.repos.session_repo import SessionRepo
from tradeplan.risk.models import BudgetItem
from tradeplan.signals.models import Currency
from tradeplan.state.session import SessionState, set_capital, update_correlation


def _repo(tmp_path, default_capital: float = 0.0) -> SessionRepo:
    db_path = str(tmp_path / "nested" / "tradeplan.db")
    init_db(db_path)
    return SessionRepo(db_path, default_capital=default_capital)


class TestInitDb:
    def test_creates_sessions_table(self, tmp_path):
        db_path = str(tmp_path / "t.db")
        init_db(db_path)
        conn = get_connection(db_path)
        try:
            row = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name='sessions'"
            ).fetchone()
        finally:
            conn.close()
        assert row["name"] == "sessions"

    def test_idempotent(self, tmp_path):
        db_path = str(tmp_path / "t.db")
        init_db(db_path)
        init_db(db_path)


class TestSessionRepo:
    def test_load_missing_returns_fresh_state(self, tmp_path):
        state = _repo(tmp_path, default_capital=1000.0).load()
        assert state == SessionState(capital=1000.0)

    def test_save_and_load(self, tmp_path):
        repo = _repo(tmp_path)
        state = update_correlation(SessionState(), Currency.EUR, "d1", 3)
        state = set_capital(state, 5000)
        state = SessionState(
            correlations=state.correlations,
            budget={"EURUSD": BudgetItem("EURUSD", "BUY", lot_size=1, sl_pips=20, tp_pips=40)},
            capital=state.capital,
        )
        repo.save(state)
        assert repo.load() == state

    def test_save_overwrites(self, tmp_path):
        repo = _repo(tmp_path)
        repo.save(set_capital(SessionState(), 100))
        repo.save(set_capital(SessionState(), 200))
        assert repo.load().capital == 200

    def test_keys_are_independent(self, tmp_path):
        repo = _repo(tmp_path)
        repo.save(set_capital(SessionState(), 100), session_key="a")
        assert repo.load("b").capital == 0.0
        assert repo.load("a").capital == 100

    def test_corrupt_blob_starts_fresh(self, tmp_path):
        repo = _repo(tmp_path, default_capital=750.0)
        conn = get_connection(repo._db_path)
        try:
            conn.execute(
                "INSERT INTO sessions (session_key, state_json, updated_at) VALUES (?, ?, ?)",
                ("default", "{not json", "2026-01-01T00:00:00+00:00"),
            )
            conn.commit()
        finally:
            conn.close()
        assert repo.load() == SessionState(capital=750.0)
