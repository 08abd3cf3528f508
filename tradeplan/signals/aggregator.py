"""Pair/group aggregation — resolves the static pair taxonomy against inputs.

Pure functions.  Every pair in the taxonomy is always resolved; a currency
with no input record defaults to Neutral with a zero score.
"""

import logging
from typing import Iterable

from tradeplan.signals.bias import confidence_score, resolve_bias
from tradeplan.signals.models import (
    Bias,
    CorrelationInput,
    Currency,
    FOREX_PAIRS,
    PairGroup,
    ResolvedGroup,
    ResolvedPair,
    StrengthLabel,
)
from tradeplan.signals.strength import (
    BandProfile,
    NARROW_BAND,
    calculate_strength_score,
    classify,
)

logger = logging.getLogger("tradeplan")

BIAS_FILTERS = ("all", "actionable", "neutral")


def strength_maps(
    inputs: Iterable[CorrelationInput],
    profile: BandProfile = NARROW_BAND,
) -> tuple[dict[Currency, StrengthLabel], dict[Currency, float]]:
    """Build the Currency→label and Currency→score lookups for an input set."""
    labels: dict[Currency, StrengthLabel] = {}
    scores: dict[Currency, float] = {}
    for corr in inputs:
        t = calculate_strength_score(corr.d1, corr.h4, corr.h1)
        scores[corr.currency] = t
        labels[corr.currency] = classify(t, profile)
    return labels, scores


def resolve_pairs(
    inputs: Iterable[CorrelationInput],
    profile: BandProfile = NARROW_BAND,
    groups: Iterable[PairGroup] = FOREX_PAIRS,
) -> list[ResolvedGroup]:
    """Resolve every pair of every group into a ``ResolvedPair``.

    Args:
        inputs: Correlation records, at most one per currency.
        profile: Banding table used for classification.
        groups: Pair taxonomy (defaults to ``FOREX_PAIRS``).

    Returns:
        One ``ResolvedGroup`` per group, in taxonomy order.
    """
    labels, scores = strength_maps(inputs, profile)
    resolved = []
    for group in groups:
        pairs = []
        for tp in group.pairs:
            s_base = labels.get(tp.base, StrengthLabel.NEUTRAL)
            s_quote = labels.get(tp.quote, StrengthLabel.NEUTRAL)
            t_base = scores.get(tp.base, 0.0)
            t_quote = scores.get(tp.quote, 0.0)
            pairs.append(ResolvedPair(
                pair=tp.pair,
                base=tp.base,
                quote=tp.quote,
                base_label=s_base,
                quote_label=s_quote,
                bias=resolve_bias(s_base, s_quote),
                base_score=t_base,
                quote_score=t_quote,
                confidence=confidence_score(t_base, t_quote),
            ))
        resolved.append(ResolvedGroup(index=group.index, pairs=tuple(pairs)))
    logger.debug("Resolved %d pair groups with %s band", len(resolved), profile.name)
    return resolved


def flatten(groups: Iterable[ResolvedGroup]) -> list[ResolvedPair]:
    """Return every resolved pair in taxonomy order."""
    return [p for g in groups for p in g.pairs]


def _matches_bias(pair: ResolvedPair, bias_filter: str) -> bool:
    if bias_filter == "actionable":
        return pair.bias in (Bias.BUY, Bias.SELL)
    if bias_filter == "neutral":
        return pair.bias == Bias.NEUTRAL
    return True


def filter_pairs(
    groups: Iterable[ResolvedGroup],
    bias_filter: str = "all",
    query: str = "",
) -> list[ResolvedGroup]:
    """Filter resolved groups by bias category and pair-name substring.

    A *query* matching the group index keeps every pair of that group.
    Groups left with no pairs are dropped.

    Raises:
        ValueError: If *bias_filter* is not one of ``BIAS_FILTERS``.
    """
    if bias_filter not in BIAS_FILTERS:
        raise ValueError(
            f"bias_filter must be one of {', '.join(BIAS_FILTERS)}, got '{bias_filter}'"
        )
    needle = query.strip().lower()
    result = []
    for group in groups:
        index_match = bool(needle) and needle in group.index.lower()
        pairs = tuple(
            p for p in group.pairs
            if _matches_bias(p, bias_filter)
            and (not needle or index_match or needle in p.pair.lower())
        )
        if pairs:
            result.append(ResolvedGroup(index=group.index, pairs=pairs))
    return result


def rank_pairs(pairs: Iterable[ResolvedPair]) -> list[ResolvedPair]:
    """Sort pairs by confidence, highest first (stable for ties)."""
    return sorted(pairs, key=lambda p: -p.confidence)


def has_correlation_values(inputs: Iterable[CorrelationInput]) -> bool:
    """``True`` when at least one currency has a non-zero strength score."""
    return any(
        calculate_strength_score(c.d1, c.h4, c.h1) != 0 for c in inputs
    )
