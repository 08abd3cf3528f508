"""CLI dashboard — prints the trade plan and budget to the console."""

from typing import Iterable

from tradeplan.risk.models import BudgetItem, BudgetSummary
from tradeplan.signals.models import CorrelationInput, ResolvedGroup
from tradeplan.signals.strength import BandProfile, NARROW_BAND, calculate_strength_score, classify

_RULE = "──────────────────────────────────────────────────"


def format_correlations(
    correlations: Iterable[CorrelationInput],
    profile: BandProfile = NARROW_BAND,
) -> str:
    """Format the correlation index table (D1, 4H, 1H, T, S)."""
    lines = [
        "─────────────── Correlation Index ────────────────",
        f"  {'Index':<6}{'D1':>8}{'4H':>8}{'1H':>8}{'T':>8}  S",
    ]
    for c in correlations:
        t = calculate_strength_score(c.d1, c.h4, c.h1)
        lines.append(
            f"  {c.currency.value:<6}{c.d1:>8g}{c.h4:>8g}{c.h1:>8g}{t:>8g}  "
            f"{classify(t, profile).value}"
        )
    lines.append(_RULE)
    return "\n".join(lines)


def format_trade_plan(groups: Iterable[ResolvedGroup]) -> str:
    """Format resolved pairs grouped by index currency."""
    lines = ["────────────────── Trade Plan ────────────────────"]
    for group in groups:
        lines.append(f"  [{group.index}]")
        for p in group.pairs:
            lines.append(
                f"    {p.pair:<8}{p.bias.value:<9}conf {p.confidence:>6g}  "
                f"({p.base_label.value} / {p.quote_label.value})"
            )
    lines.append(_RULE)
    return "\n".join(lines)


def format_budget(
    items: Iterable[BudgetItem],
    summary: BudgetSummary,
    capital: float,
) -> str:
    """Format budget items and the aggregate risk/reward summary."""
    lines = [
        "──────────────────── Budget ──────────────────────",
        f"  Capital:         ${capital:,.2f}",
    ]
    for item in items:
        news = "  NEWS" if item.news_risk else ""
        lines.append(
            f"  {item.pair:<8}{item.action:<6}lot {item.lot_size:g}  "
            f"SL {item.sl_pips:g}  TP {item.tp_pips:g}{news}"
        )
    lines += [
        f"  Total Risk:      ${summary.total_risk:,.2f} ({summary.risk_pct:.2f}%)",
        f"  Total Reward:    ${summary.total_reward:,.2f} ({summary.reward_pct:.2f}%)",
        _RULE,
    ]
    return "\n".join(lines)


def print_report(*sections: str) -> str:
    """Print *sections* separated by blank lines and return the output."""
    output = "\n\n".join(sections)
    print(output)
    return output
