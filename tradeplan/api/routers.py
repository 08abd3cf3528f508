"""Internal API routers — /correlations, /pairs, /insights, /budget, /sessions.

No business logic. Delegates to the pure core, applies the returned state,
and saves it through the session repository.
"""

import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from tradeplan.config import Config
from tradeplan.errors import InputValidationError
from tradeplan.insights.coordinator import InsightCoordinator
from tradeplan.repos.session_repo import SessionRepo
from tradeplan.risk.budget import (
    pip_value,
    risk_reward_ratio,
    summarize,
    toggle_item,
    update_item,
)
from tradeplan.risk.models import PipValueProfile, STANDARD_PIPS
from tradeplan.signals.aggregator import (
    filter_pairs,
    flatten,
    has_correlation_values,
    resolve_pairs,
)
from tradeplan.signals.models import PAIR_SYMBOLS, ResolvedGroup, ResolvedPair, parse_currency
from tradeplan.signals.sessions import active_sessions, overlaps
from tradeplan.signals.strength import BandProfile, NARROW_BAND, calculate_strength_score, classify
from tradeplan.state.session import (
    SessionState,
    replace_correlations,
    reset_correlations,
    set_budget,
    set_capital,
    set_recommendations,
    update_correlation,
)
from tradeplan.state.transfer import dumps_portable, export_portable, import_portable, parse_paste

logger = logging.getLogger("tradeplan")
router = APIRouter()

# ── Shared state (set during app startup) ────────────────────────────────

_state = SessionState()
_config: Optional[Config] = None  # Set via configure_routers()
_repo: Optional[SessionRepo] = None  # Set via configure_routers()
_coordinator: Optional[InsightCoordinator] = None  # Set via configure_routers()


def configure_routers(
    config: Optional[Config] = None,
    repo: Optional[SessionRepo] = None,
    coordinator: Optional[InsightCoordinator] = None,
    state: Optional[SessionState] = None,
) -> None:
    """Inject dependencies from the application startup.

    Args:
        config: Loaded ``Config``; selects the band and pip-value profiles.
        repo: A ``SessionRepo`` (or duck-type for tests) used to persist state.
        coordinator: An ``InsightCoordinator``; insights are disabled if None.
        state: Initial session state; loaded from *repo* when omitted.
    """
    global _state, _config, _repo, _coordinator  # noqa: PLW0603
    _config = config
    _repo = repo
    _coordinator = coordinator
    if state is not None:
        _state = state
    elif repo is not None:
        _state = repo.load()
    else:
        _state = SessionState(capital=config.default_capital if config else 0.0)


def current_state() -> SessionState:
    return _state


def _band() -> BandProfile:
    return _config.band_profile if _config else NARROW_BAND


def _pips() -> PipValueProfile:
    return _config.pip_profile if _config else STANDARD_PIPS


def _commit(state: SessionState) -> None:
    """Adopt *state* and persist it."""
    global _state  # noqa: PLW0603
    _state = state
    if _repo is None:
        return
    try:
        _repo.save(state)
    except Exception as exc:
        logger.error("Failed to persist session: %s", exc)


def _error(status_code: int, *errors: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "errors": list(errors)},
    )


def _pair_dict(p: ResolvedPair) -> dict:
    return {
        "pair": p.pair,
        "base": p.base.value,
        "quote": p.quote.value,
        "base_label": p.base_label.value,
        "quote_label": p.quote_label.value,
        "bias": p.bias.value,
        "base_score": p.base_score,
        "quote_score": p.quote_score,
        "confidence": p.confidence,
    }


def _groups_payload(groups: list[ResolvedGroup]) -> list[dict]:
    return [
        {"index": g.index, "pairs": [_pair_dict(p) for p in g.pairs]}
        for g in groups
    ]


# ── Correlations ─────────────────────────────────────────────────────────


@router.get("/correlations")
async def get_correlations(q: str = Query(default="")):
    """Return correlation inputs with derived T and S, filtered by currency id."""
    needle = q.strip().lower()
    rows = []
    for corr in _state.correlation_list():
        if needle and needle not in corr.currency.value.lower():
            continue
        t = calculate_strength_score(corr.d1, corr.h4, corr.h1)
        rows.append({
            "id": corr.currency.value,
            "d1": corr.d1,
            "4h": corr.h4,
            "1h": corr.h1,
            "t": t,
            "s": classify(t, _band()).value,
        })
    return {
        "correlations": rows,
        "has_values": has_correlation_values(_state.correlation_list()),
        "band_profile": _band().name,
    }


@router.put("/correlations/{currency}")
async def put_correlation(currency: str, body: dict):
    """Set one timeframe value: ``{"field": "d1"|"4h"|"1h", "value": ...}``."""
    cur = parse_currency(currency)
    if cur is None:
        return _error(404, f"Unknown currency: {currency}")
    try:
        state = update_correlation(_state, cur, str(body.get("field", "")), body.get("value", ""))
    except InputValidationError as exc:
        return _error(422, str(exc))
    _commit(state)
    return {"status": "ok"}


@router.post("/correlations/reset")
async def post_reset_correlations():
    _commit(reset_correlations(_state))
    return {"status": "ok"}


@router.post("/correlations/paste")
async def post_paste(body: dict):
    """Bulk import tab-separated rows; reports how many currencies changed."""
    correlations, updated = parse_paste(str(body.get("text", "")), _state.correlations)
    if updated:
        _commit(replace_correlations(_state, correlations))
    return {"status": "ok", "updated": updated}


@router.get("/correlations/export")
async def get_export():
    """Return the portable payload and its compact JSON string."""
    return {
        "payload": export_portable(_state.correlations),
        "encoded": dumps_portable(_state.correlations),
    }


@router.post("/correlations/import")
async def post_import(body: dict):
    """Replace all correlation inputs from a portable payload."""
    try:
        correlations = import_portable(body.get("payload"))
    except InputValidationError as exc:
        logger.info("Rejected portable import: %s", exc)
        return _error(422, str(exc))
    _commit(replace_correlations(_state, correlations))
    return {"status": "ok"}


# ── Trade plan ───────────────────────────────────────────────────────────


@router.get("/pairs")
async def get_pairs(
    bias: str = Query(default="all", pattern="^(all|actionable|neutral)$"),
    q: str = Query(default=""),
):
    """Return resolved pair groups, filtered by bias category and pair name."""
    inputs = _state.correlation_list()
    if not has_correlation_values(inputs):
        return _error(409, "Enter correlation values before generating a trade plan.")
    groups = filter_pairs(resolve_pairs(inputs, _band()), bias_filter=bias, query=q)
    return {"groups": _groups_payload(groups)}


# ── Insights ─────────────────────────────────────────────────────────────


@router.post("/insights")
async def post_insights(top_n: Optional[int] = Query(default=None, ge=1, le=21)):
    """Request recommendations for the current trade plan.

    On failure the previous recommendations are kept.
    """
    if _coordinator is None:
        return _error(503, "Insight service is not configured.")
    inputs = _state.correlation_list()
    if not has_correlation_values(inputs):
        return _error(409, "Enter correlation values before requesting insights.")

    pairs = flatten(resolve_pairs(inputs, _band()))
    outcome = await _coordinator.request(pairs, top_n=top_n)
    if outcome.ok and not outcome.stale:
        _commit(set_recommendations(_state, outcome.recommendations))

    payload = outcome.model_dump()
    if not outcome.ok:
        return JSONResponse(status_code=502, content={"status": "error", **payload})
    return {"status": "ok", **payload}


@router.get("/insights")
async def get_insights():
    recs = _state.recommendations
    return {
        "recommendations": [r.model_dump() for r in recs] if recs is not None else None,
    }


# ── Budget ───────────────────────────────────────────────────────────────


def _budget_payload() -> dict:
    profile = _pips()
    items = []
    for item in _state.budget.values():
        items.append({
            **asdict(item),
            "risk": pip_value(item.pair, item.lot_size, item.sl_pips, profile),
            "reward": pip_value(item.pair, item.lot_size, item.tp_pips, profile),
            "rr_ratio": risk_reward_ratio(item),
        })
    summary = summarize(_state.budget, _state.capital, profile)
    return {
        "capital": _state.capital,
        "items": items,
        "summary": asdict(summary),
        "pip_profile": profile.name,
    }


@router.get("/budget")
async def get_budget():
    return _budget_payload()


@router.put("/budget/capital")
async def put_capital(body: dict):
    try:
        state = set_capital(_state, body.get("capital", ""))
    except InputValidationError as exc:
        return _error(422, str(exc))
    _commit(state)
    return _budget_payload()


@router.post("/budget/{pair}/toggle")
async def post_toggle_budget(pair: str, body: Optional[dict] = None):
    """Mark or un-mark *pair* for budgeting.

    The action defaults to the matching recommendation's action, then to the
    pair's resolved bias.
    """
    symbol = pair.upper()
    if symbol not in PAIR_SYMBOLS:
        return _error(404, f"Unknown pair: {pair}")
    action = (body or {}).get("action")
    if action is None:
        action = _default_action(symbol)
    try:
        budget = toggle_item(_state.budget, symbol, action)
    except InputValidationError as exc:
        return _error(422, str(exc))
    _commit(set_budget(_state, budget))
    return _budget_payload()


def _default_action(symbol: str) -> str:
    for rec in _state.recommendations or []:
        if rec.pair == symbol:
            return rec.action
    for p in flatten(resolve_pairs(_state.correlation_list(), _band())):
        if p.pair == symbol:
            return p.bias.value
    return "NEUTRAL"


@router.patch("/budget/{pair}")
async def patch_budget(pair: str, body: dict):
    """Edit lot size, SL/TP pips, action, or news-risk flag of a budget item."""
    try:
        budget = update_item(_state.budget, pair.upper(), body)
    except InputValidationError as exc:
        return _error(422, str(exc))
    _commit(set_budget(_state, budget))
    return _budget_payload()


# ── Market sessions ──────────────────────────────────────────────────────


@router.get("/sessions")
async def get_sessions(hour: Optional[float] = Query(default=None, ge=0, lt=24)):
    """Return the FX sessions open at *hour* (UTC), defaulting to now."""
    if hour is None:
        now = datetime.now(timezone.utc)
        hour = now.hour + now.minute / 60
    return {
        "utc_hour": hour,
        "active": active_sessions(hour),
        "overlaps": [list(o) for o in overlaps(hour)],
    }
