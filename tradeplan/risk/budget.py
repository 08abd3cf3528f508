"""Budget and risk calculation — pure math, no I/O.

Computes the monetary value of a pip move for a pair / lot size / pip
count, and aggregates risk and reward over the selected budget items.
Budget sets are plain ``dict[str, BudgetItem]`` keyed by pair symbol;
every set operation returns a new mapping.
"""

import math
from dataclasses import replace
from typing import Mapping

from tradeplan.errors import InputValidationError
from tradeplan.risk.models import (
    BudgetItem,
    BudgetSummary,
    PipValueProfile,
    STANDARD_PIPS,
)

_NUMERIC_FIELDS = ("lot_size", "sl_pips", "tp_pips")
_ACTIONS = ("BUY", "SELL", "HOLD", "NEUTRAL")


def value_per_pip_per_lot(
    pair: str,
    profile: PipValueProfile = STANDARD_PIPS,
) -> float:
    """Return the approximate value of one pip for one standard lot."""
    symbol = pair.upper()
    if symbol in profile.metal_symbols:
        return profile.metal_value
    return profile.quote_values.get(symbol[-3:], profile.default_value)


def pip_value(
    pair: str,
    lot_size: float,
    pips: float,
    profile: PipValueProfile = STANDARD_PIPS,
) -> float:
    """Monetary value of *pips* for *lot_size* lots of *pair*.

    Formula::

        value = pips × value_per_pip_per_lot(pair) × lot_size

    Returns exactly ``0`` when either *pips* or *lot_size* is zero.
    The result is not rounded.
    """
    if pips == 0 or lot_size == 0:
        return 0
    return pips * value_per_pip_per_lot(pair, profile) * lot_size


def summarize(
    items: Mapping[str, BudgetItem] | list[BudgetItem],
    capital: float,
    profile: PipValueProfile = STANDARD_PIPS,
) -> BudgetSummary:
    """Aggregate total risk (SL) and reward (TP) across budget items.

    Percentages are ``total / capital × 100`` when *capital* is positive,
    otherwise ``0``.
    """
    values = items.values() if isinstance(items, Mapping) else items
    total_risk = 0.0
    total_reward = 0.0
    for item in values:
        total_risk += pip_value(item.pair, item.lot_size, item.sl_pips, profile)
        total_reward += pip_value(item.pair, item.lot_size, item.tp_pips, profile)

    if capital > 0:
        risk_pct = (total_risk / capital) * 100.0
        reward_pct = (total_reward / capital) * 100.0
    else:
        risk_pct = 0.0
        reward_pct = 0.0

    return BudgetSummary(
        total_risk=total_risk,
        total_reward=total_reward,
        risk_pct=risk_pct,
        reward_pct=reward_pct,
    )


def risk_reward_ratio(item: BudgetItem) -> float:
    """Return TP pips ÷ SL pips, or ``0`` when no stop-loss is set."""
    if item.sl_pips == 0:
        return 0.0
    return item.tp_pips / item.sl_pips


# ── Budget set operations ────────────────────────────────────────────────


def _check_numeric(name: str, value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InputValidationError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number) or number < 0:
        raise InputValidationError(f"{name} must be a finite non-negative number, got {value!r}")
    return number


def _check_action(value) -> str:
    action = value.upper() if isinstance(value, str) else None
    if action not in _ACTIONS:
        raise InputValidationError(
            f"action must be one of {', '.join(_ACTIONS)}, got {value!r}"
        )
    return action


def _check_flag(name: str, value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise InputValidationError(f"{name} must be true or false, got {value!r}")


def add_item(items: Mapping[str, BudgetItem], item: BudgetItem) -> dict[str, BudgetItem]:
    """Return *items* with *item* stored under its pair (replacing any prior)."""
    for name in _NUMERIC_FIELDS:
        _check_numeric(name, getattr(item, name))
    action = _check_action(item.action)
    if action != item.action:
        item = replace(item, action=action)
    return {**items, item.pair: item}


def remove_item(items: Mapping[str, BudgetItem], pair: str) -> dict[str, BudgetItem]:
    """Return *items* without *pair*; unknown pairs are a no-op."""
    return {k: v for k, v in items.items() if k != pair}


def toggle_item(
    items: Mapping[str, BudgetItem],
    pair: str,
    action: str,
) -> dict[str, BudgetItem]:
    """Add a default item for *pair* if absent, remove it if present."""
    if pair in items:
        return remove_item(items, pair)
    return add_item(items, BudgetItem(pair=pair, action=action))


def update_item(
    items: Mapping[str, BudgetItem],
    pair: str,
    fields: Mapping[str, object],
) -> dict[str, BudgetItem]:
    """Return *items* with the named fields of *pair*'s item replaced.

    Raises:
        InputValidationError: If *pair* is not budgeted, a field is unknown,
            a numeric field is negative, non-finite or not a number, the
            action is not BUY/SELL/HOLD/NEUTRAL, or ``news_risk`` is not a
            boolean.
    """
    if pair not in items:
        raise InputValidationError(f"{pair} is not in the budget")

    changes = {}
    for name, value in fields.items():
        if name in _NUMERIC_FIELDS:
            changes[name] = _check_numeric(name, value)
        elif name == "news_risk":
            changes[name] = _check_flag(name, value)
        elif name == "action":
            changes[name] = _check_action(value)
        else:
            raise InputValidationError(f"Unknown budget field: {name}")

    return {**items, pair: replace(items[pair], **changes)}
