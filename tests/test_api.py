"""Tests for the HTTP API — correlations, trade plan, insights, budget."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from tradeplan.api.routers import configure_routers, current_state
from tradeplan.errors import InsightServiceError
from tradeplan.insights.coordinator import InsightCoordinator
from tradeplan.main import app
from tradeplan.signals.models import Currency
from tradeplan.state.session import SessionState

client = TestClient(app)

_PASTE = "EUR\t3\t2\t2\nUSD\t-2\t-1\t-1\n"


# ── Helpers ──────────────────────────────────────────────────────────────


class _FakeProvider:
    def __init__(self, reply=None, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error

    async def generate(self, items, top_n):
        if self.error is not None:
            raise self.error
        return self.reply


def _rec(pair: str = "EURUSD", action: str = "BUY") -> dict:
    return {"pair": pair, "action": action, "reasoning": "Divergence.", "confidence": 11}


@pytest.fixture(autouse=True)
def _fresh_state():
    configure_routers(state=SessionState(capital=1000.0))


def _paste():
    resp = client.post("/correlations/paste", json={"text": _PASTE})
    assert resp.status_code == 200
    return resp.json()


# ── Health ───────────────────────────────────────────────────────────────


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


# ── Correlations ─────────────────────────────────────────────────────────


class TestCorrelationsEndpoint:
    def test_initial(self):
        data = client.get("/correlations").json()
        assert len(data["correlations"]) == 8
        assert data["has_values"] is False
        assert data["band_profile"] == "narrow"
        assert data["correlations"][0] == {
            "id": "EUR", "d1": 0.0, "4h": 0.0, "1h": 0.0, "t": 0.0, "s": "Neutral",
        }

    def test_put_value(self):
        resp = client.put("/correlations/eur", json={"field": "d1", "value": "3"})
        assert resp.status_code == 200
        row = client.get("/correlations", params={"q": "eu"}).json()["correlations"]
        assert row == [{"id": "EUR", "d1": 3.0, "4h": 0.0, "1h": 0.0, "t": 3.0, "s": "Extreme Strong"}]

    def test_put_invalid_value_keeps_state(self):
        client.put("/correlations/EUR", json={"field": "d1", "value": 2})
        resp = client.put("/correlations/EUR", json={"field": "d1", "value": "abc"})
        assert resp.status_code == 422
        assert resp.json()["status"] == "error"
        assert current_state().correlations[Currency.EUR].d1 == 2.0
        rows = client.get("/correlations", params={"q": "EUR"}).json()["correlations"]
        assert rows[0]["d1"] == 2.0

    def test_put_unknown_currency(self):
        resp = client.put("/correlations/CHF", json={"field": "d1", "value": 1})
        assert resp.status_code == 404

    def test_paste_reports_count(self):
        assert _paste() == {"status": "ok", "updated": 2}
        assert client.get("/correlations").json()["has_values"] is True

    def test_reset(self):
        _paste()
        client.post("/correlations/reset")
        assert client.get("/correlations").json()["has_values"] is False

    def test_export_import_round_trip(self):
        _paste()
        exported = client.get("/correlations/export").json()
        client.post("/correlations/reset")
        resp = client.post("/correlations/import", json={"payload": exported["encoded"]})
        assert resp.status_code == 200
        assert client.get("/correlations/export").json() == exported

    def test_bad_import_keeps_state(self):
        _paste()
        before = client.get("/correlations/export").json()
        resp = client.post("/correlations/import", json={"payload": [{"id": "EUR"}]})
        assert resp.status_code == 422
        assert client.get("/correlations/export").json() == before


# ── Trade plan ───────────────────────────────────────────────────────────


class TestPairsEndpoint:
    def test_gated_until_values(self):
        resp = client.get("/pairs")
        assert resp.status_code == 409

    def test_resolved_groups(self):
        _paste()
        groups = client.get("/pairs").json()["groups"]
        assert [g["index"] for g in groups] == ["EUR", "GBP", "USD", "AUD", "NZD", "XAU"]
        eurusd = groups[0]["pairs"][0]
        assert eurusd["pair"] == "EURUSD"
        assert eurusd["bias"] == "BUY"
        assert eurusd["confidence"] == 11

    def test_filters(self):
        _paste()
        groups = client.get("/pairs", params={"bias": "actionable", "q": "usd"}).json()["groups"]
        pairs = [p["pair"] for g in groups for p in g["pairs"]]
        assert pairs == ["EURUSD"]

    def test_invalid_bias_filter(self):
        _paste()
        assert client.get("/pairs", params={"bias": "buy"}).status_code == 422


# ── Insights ─────────────────────────────────────────────────────────────


class TestInsightsEndpoint:
    def test_not_configured(self):
        _paste()
        assert client.post("/insights").status_code == 503

    def test_gated_until_values(self):
        coord = InsightCoordinator(_FakeProvider(reply=[_rec()]), default_top_n=1)
        configure_routers(coordinator=coord, state=SessionState())
        assert client.post("/insights").status_code == 409

    def test_success_stores_recommendations(self):
        coord = InsightCoordinator(_FakeProvider(reply=[_rec()]), default_top_n=1)
        configure_routers(coordinator=coord, state=SessionState())
        _paste()
        resp = client.post("/insights")
        assert resp.status_code == 200
        data = resp.json()
        assert data["ok"] is True
        assert data["recommendations"][0]["pair"] == "EURUSD"
        stored = client.get("/insights").json()["recommendations"]
        assert stored == data["recommendations"]

    def test_failure_keeps_previous(self):
        provider = _FakeProvider(reply=[_rec()])
        configure_routers(
            coordinator=InsightCoordinator(provider, default_top_n=1), state=SessionState(),
        )
        _paste()
        client.post("/insights")
        provider.error = InsightServiceError("Insight service unreachable")
        resp = client.post("/insights")
        assert resp.status_code == 502
        assert resp.json()["error"] == "Insight service unreachable"
        assert client.get("/insights").json()["recommendations"][0]["pair"] == "EURUSD"

    def test_top_n_query(self):
        provider = _FakeProvider(reply=[_rec(), _rec("GBPUSD", "HOLD")])
        configure_routers(
            coordinator=InsightCoordinator(provider, default_top_n=5), state=SessionState(),
        )
        _paste()
        resp = client.post("/insights", params={"top_n": 2})
        assert resp.status_code == 200
        assert len(resp.json()["recommendations"]) == 2


# ── Budget ───────────────────────────────────────────────────────────────


class TestBudgetEndpoint:
    def test_budget_scenario(self):
        _paste()
        data = client.post("/budget/eurusd/toggle").json()
        assert data["items"][0]["pair"] == "EURUSD"
        assert data["items"][0]["action"] == "BUY"

        client.patch("/budget/EURUSD", json={"lot_size": 1, "sl_pips": 20, "tp_pips": 40})
        data = client.put("/budget/capital", json={"capital": 1000}).json()
        assert data["summary"]["total_risk"] == pytest.approx(200.0)
        assert data["summary"]["total_reward"] == pytest.approx(400.0)
        assert data["summary"]["risk_pct"] == pytest.approx(20.0)
        assert data["summary"]["reward_pct"] == pytest.approx(40.0)
        assert data["items"][0]["rr_ratio"] == 2.0

    def test_toggle_removes(self):
        client.post("/budget/GBPJPY/toggle", json={"action": "sell"})
        data = client.post("/budget/GBPJPY/toggle").json()
        assert data["items"] == []

    def test_action_from_recommendation(self):
        coord = InsightCoordinator(_FakeProvider(reply=[_rec("AUDCAD", "HOLD")]), default_top_n=1)
        configure_routers(coordinator=coord, state=SessionState())
        _paste()
        client.post("/insights")
        data = client.post("/budget/AUDCAD/toggle").json()
        assert data["items"][0]["action"] == "HOLD"

    def test_unknown_pair(self):
        assert client.post("/budget/USDCHF/toggle").status_code == 404

    def test_patch_invalid(self):
        client.post("/budget/EURUSD/toggle")
        resp = client.patch("/budget/EURUSD", json={"sl_pips": -5})
        assert resp.status_code == 422

    def test_patch_field_named_like_a_parameter(self):
        client.post("/budget/EURUSD/toggle")
        resp = client.patch("/budget/EURUSD", json={"pair": "GBPUSD"})
        assert resp.status_code == 422
        assert "Unknown budget field" in resp.json()["errors"][0]
        assert list(current_state().budget) == ["EURUSD"]

    def test_patch_unknown_action(self):
        client.post("/budget/EURUSD/toggle", json={"action": "buy"})
        resp = client.patch("/budget/EURUSD", json={"action": "yolo"})
        assert resp.status_code == 422
        assert current_state().budget["EURUSD"].action == "BUY"

    def test_toggle_unknown_action(self):
        resp = client.post("/budget/EURUSD/toggle", json={"action": "yolo"})
        assert resp.status_code == 422
        assert current_state().budget == {}

    def test_patch_news_risk_string(self):
        client.post("/budget/EURUSD/toggle")
        client.patch("/budget/EURUSD", json={"news_risk": True})
        data = client.patch("/budget/EURUSD", json={"news_risk": "false"}).json()
        assert data["items"][0]["news_risk"] is False
        assert client.patch("/budget/EURUSD", json={"news_risk": "0"}).status_code == 422

    def test_zero_capital(self):
        client.post("/budget/EURUSD/toggle")
        client.patch("/budget/EURUSD", json={"lot_size": 1, "sl_pips": 20})
        data = client.put("/budget/capital", json={"capital": 0}).json()
        assert data["summary"]["total_risk"] > 0
        assert data["summary"]["risk_pct"] == 0

    def test_negative_capital_rejected(self):
        assert client.put("/budget/capital", json={"capital": -10}).status_code == 422

    def test_persists_through_repo(self):
        repo = MagicMock()
        repo.load.return_value = SessionState()
        configure_routers(repo=repo)
        client.post("/budget/EURUSD/toggle")
        saved = repo.save.call_args[0][0]
        assert "EURUSD" in saved.budget


# ── Market sessions ──────────────────────────────────────────────────────


class TestSessionsEndpoint:
    def test_explicit_hour(self):
        data = client.get("/sessions", params={"hour": 14}).json()
        assert data["active"] == ["London", "New York"]
        assert data["overlaps"] == [["London", "New York"]]

    def test_now(self):
        data = client.get("/sessions").json()
        assert 0 <= data["utc_hour"] < 24
