"""Risk data models — budget items, summaries, and pip-value profiles."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class BudgetItem:
    """A pair selected for budgeting, with its position-sizing parameters."""

    pair: str
    action: str  # "BUY", "SELL", "HOLD", or "NEUTRAL"
    lot_size: float = 0.01
    sl_pips: float = 0.0
    tp_pips: float = 0.0
    news_risk: bool = False


@dataclass(frozen=True)
class BudgetSummary:
    """Aggregate monetary risk and reward over a set of budget items."""

    total_risk: float
    total_reward: float
    risk_pct: float
    reward_pct: float


# ── Pip-value profiles ───────────────────────────────────────────────────


@dataclass(frozen=True)
class PipValueProfile:
    """Static value-per-pip-per-standard-lot approximations by pair class.

    Pair class is decided by metal symbol first, then the quote currency
    (last three letters of the symbol), then ``default_value``.
    """

    name: str
    metal_value: float
    quote_values: Mapping[str, float] = field(default_factory=dict, hash=False)
    default_value: float = 10.0
    metal_symbols: frozenset[str] = frozenset({"XAUUSD"})


STANDARD_PIPS = PipValueProfile(
    name="standard",
    metal_value=10.0,  # $0.10 move × 100 oz
    quote_values=MappingProxyType({"JPY": 9.3, "CAD": 7.3, "GBP": 12.5}),
)

GOLD_POINT_PIPS = PipValueProfile(
    name="gold_point",
    metal_value=1.0,  # $1 per point per lot
    quote_values=MappingProxyType({"JPY": 9.3, "CAD": 7.3, "GBP": 12.5}),
)

FLAT_PIPS = PipValueProfile(
    name="flat",
    metal_value=10.0,
)

PIP_PROFILES: dict[str, PipValueProfile] = {
    p.name: p for p in (STANDARD_PIPS, GOLD_POINT_PIPS, FLAT_PIPS)
}
