"""Session state and its pure transitions.

``SessionState`` is the single explicit struct holding a user's inputs.
Every transition returns a new state; the argument is never mutated.
Serialisation (``to_dict`` / ``from_dict``) is for the persistence edge only.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from tradeplan.errors import InputValidationError
from tradeplan.insights.models import Recommendation
from tradeplan.risk.models import BudgetItem
from tradeplan.signals.models import CorrelationInput, Currency

# Portable field name → dataclass attribute
TIMEFRAME_FIELDS: dict[str, str] = {"d1": "d1", "4h": "h4", "1h": "h1"}


def initial_correlations() -> dict[Currency, CorrelationInput]:
    """One zeroed record for every currency, in ``Currency`` order."""
    return {c: CorrelationInput(currency=c) for c in Currency}


@dataclass(frozen=True)
class SessionState:
    """Everything a planning session owns."""

    correlations: dict[Currency, CorrelationInput] = field(
        default_factory=initial_correlations
    )
    budget: dict[str, BudgetItem] = field(default_factory=dict)
    capital: float = 0.0
    recommendations: Optional[list[Recommendation]] = None

    def correlation_list(self) -> list[CorrelationInput]:
        return list(self.correlations.values())

    # ── Serialisation ────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "correlations": [
                {"id": c.currency.value, "d1": c.d1, "4h": c.h4, "1h": c.h1}
                for c in self.correlations.values()
            ],
            "budget": [
                {
                    "pair": b.pair,
                    "action": b.action,
                    "lot_size": b.lot_size,
                    "sl_pips": b.sl_pips,
                    "tp_pips": b.tp_pips,
                    "news_risk": b.news_risk,
                }
                for b in self.budget.values()
            ],
            "capital": self.capital,
            "recommendations": (
                [r.model_dump() for r in self.recommendations]
                if self.recommendations is not None else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionState":
        correlations = initial_correlations()
        for row in data.get("correlations", []):
            currency = Currency(row["id"])
            correlations[currency] = CorrelationInput(
                currency=currency,
                d1=float(row.get("d1", 0)),
                h4=float(row.get("4h", 0)),
                h1=float(row.get("1h", 0)),
            )
        budget = {b["pair"]: BudgetItem(**b) for b in data.get("budget", [])}
        recs = data.get("recommendations")
        return cls(
            correlations=correlations,
            budget=budget,
            capital=float(data.get("capital", 0.0)),
            recommendations=(
                [Recommendation.model_validate(r) for r in recs]
                if recs is not None else None
            ),
        )


# ── Transitions ──────────────────────────────────────────────────────────


def parse_number(value) -> float:
    """Parse a user-entered number; an empty string means ``0``.

    Raises:
        InputValidationError: If *value* is not a finite number.
    """
    if isinstance(value, str):
        value = value.strip()
        if value == "":
            return 0.0
    if isinstance(value, bool):
        raise InputValidationError(f"not a number: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InputValidationError(f"not a number: {value!r}") from None
    if not math.isfinite(number):
        raise InputValidationError(f"not a finite number: {value!r}")
    return number


def update_correlation(
    state: SessionState,
    currency: Currency,
    field_name: str,
    value,
) -> SessionState:
    """Set one timeframe reading (``d1``, ``4h``, or ``1h``) for *currency*."""
    if field_name not in TIMEFRAME_FIELDS:
        raise InputValidationError(
            f"field must be one of {', '.join(TIMEFRAME_FIELDS)}, got '{field_name}'"
        )
    number = parse_number(value)
    current = state.correlations.get(currency, CorrelationInput(currency=currency))
    updated = replace(current, **{TIMEFRAME_FIELDS[field_name]: number})
    return replace(state, correlations={**state.correlations, currency: updated})


def reset_correlations(state: SessionState) -> SessionState:
    return replace(state, correlations=initial_correlations())


def replace_correlations(
    state: SessionState,
    records: dict[Currency, CorrelationInput] | Iterable[CorrelationInput],
) -> SessionState:
    """Replace the whole correlation set; missing currencies reset to zero."""
    values = records.values() if isinstance(records, dict) else records
    correlations = initial_correlations()
    for rec in values:
        correlations[rec.currency] = rec
    return replace(state, correlations=correlations)


def set_capital(state: SessionState, capital) -> SessionState:
    number = parse_number(capital)
    if number < 0:
        raise InputValidationError(f"capital must be non-negative, got {number}")
    return replace(state, capital=number)


def set_budget(state: SessionState, budget: dict[str, BudgetItem]) -> SessionState:
    return replace(state, budget=dict(budget))


def set_recommendations(
    state: SessionState,
    recommendations: Optional[list[Recommendation]],
) -> SessionState:
    return replace(
        state,
        recommendations=list(recommendations) if recommendations is not None else None,
    )
