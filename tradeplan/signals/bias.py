"""Bias resolution and confidence scoring — pure functions."""

from tradeplan.signals.models import Bias, StrengthLabel, STRONG_LABELS, WEAK_LABELS


def resolve_bias(s_base: StrengthLabel, s_quote: StrengthLabel) -> Bias:
    """Combine the base and quote strength labels into a trade bias.

    - **BUY**:  base Strong/Extreme Strong and quote Weak/Extreme Weak.
    - **SELL**: base Weak/Extreme Weak and quote Strong/Extreme Strong.
    - **NEUTRAL**: every other combination.
    """
    if s_base in STRONG_LABELS and s_quote in WEAK_LABELS:
        return Bias.BUY
    if s_base in WEAK_LABELS and s_quote in STRONG_LABELS:
        return Bias.SELL
    return Bias.NEUTRAL


def confidence_score(t_base: float, t_quote: float) -> float:
    """Return ``|t_base| + |t_quote|``, a sortable signal-strength proxy."""
    return abs(t_base) + abs(t_quote)
