"""Tests for the signal core — strength classification, bias, and confidence."""

import itertools
import math
import random

import pytest

from tradeplan.errors import InputValidationError
from tradeplan.signals.bias import confidence_score, resolve_bias
from tradeplan.signals.models import Bias, StrengthLabel
from tradeplan.signals.strength import (
    BAND_PROFILES,
    NARROW_BAND,
    WIDE_BAND,
    calculate_strength_score,
    classify,
)

ES = StrengthLabel.EXTREME_STRONG
S = StrengthLabel.STRONG
N = StrengthLabel.NEUTRAL
W = StrengthLabel.WEAK
EW = StrengthLabel.EXTREME_WEAK


# ── Strength score ───────────────────────────────────────────────────────


class TestStrengthScore:
    def test_sum_of_timeframes(self):
        assert calculate_strength_score(3, 2, 2) == 7

    def test_signed_values(self):
        assert calculate_strength_score(-2, -1, -1) == -4
        assert calculate_strength_score(1.5, -0.5, 0) == pytest.approx(1.0)


# ── Classifier ───────────────────────────────────────────────────────────


class TestNarrowBand:
    """Narrow band: T≥3 ES, T≥1 S, T>-1 N, T≥-3 W, else EW."""

    @pytest.mark.parametrize("t, expected", [
        (10, ES),
        (3, ES),
        (2.999, S),
        (1, S),
        (0.999, N),
        (0, N),
        (-0.999, N),
        (-1, W),
        (-3, W),
        (-3.001, EW),
        (-50, EW),
    ])
    def test_boundaries(self, t, expected):
        assert classify(t, NARROW_BAND) is expected

    def test_minus_one_is_weak_not_neutral(self):
        """The Neutral floor is exclusive in the narrow table."""
        assert classify(-1) is W
        assert classify(-0.999) is N

    def test_default_profile_is_narrow(self):
        assert classify(1) is S
        assert classify(0.999) is N


class TestWideBand:
    """Wide band: T≥8 ES, T≥6 S, T≥-5 N, T≥-8 W, else EW."""

    @pytest.mark.parametrize("t, expected", [
        (8, ES),
        (7.99, S),
        (6, S),
        (5.99, N),
        (0, N),
        (-5, N),
        (-5.01, W),
        (-8, W),
        (-8.01, EW),
    ])
    def test_boundaries(self, t, expected):
        assert classify(t, WIDE_BAND) is expected

    def test_profiles_disagree_on_same_score(self):
        assert classify(4, NARROW_BAND) is ES
        assert classify(4, WIDE_BAND) is N


class TestClassifierValidation:
    @pytest.mark.parametrize("t", [math.nan, math.inf, -math.inf])
    def test_non_finite_raises(self, t):
        with pytest.raises(InputValidationError, match="finite"):
            classify(t)

    def test_registry_has_both_profiles(self):
        assert set(BAND_PROFILES) == {"narrow", "wide"}


# ── Bias resolver ────────────────────────────────────────────────────────

_BUY = {(ES, W), (ES, EW), (S, W), (S, EW)}
_SELL = {(W, S), (W, ES), (EW, S), (EW, ES)}


class TestResolveBias:
    @pytest.mark.parametrize(
        "s_base, s_quote", list(itertools.product(StrengthLabel, repeat=2)),
    )
    def test_truth_table(self, s_base, s_quote):
        if (s_base, s_quote) in _BUY:
            expected = Bias.BUY
        elif (s_base, s_quote) in _SELL:
            expected = Bias.SELL
        else:
            expected = Bias.NEUTRAL
        assert resolve_bias(s_base, s_quote) is expected

    def test_table_has_25_combinations(self):
        assert len(list(itertools.product(StrengthLabel, repeat=2))) == 25

    def test_documented_examples(self):
        assert resolve_bias(S, W) is Bias.BUY
        assert resolve_bias(ES, EW) is Bias.BUY
        assert resolve_bias(S, S) is Bias.NEUTRAL
        assert resolve_bias(N, W) is Bias.NEUTRAL
        assert resolve_bias(W, ES) is Bias.SELL


# ── Confidence ───────────────────────────────────────────────────────────


class TestConfidence:
    def test_sum_of_absolutes(self):
        assert confidence_score(7, -4) == 11

    def test_zero(self):
        assert confidence_score(0, 0) == 0

    def test_non_negative_and_sign_symmetric(self):
        rng = random.Random(1234)
        for _ in range(500):
            a = rng.uniform(-100, 100)
            b = rng.uniform(-100, 100)
            score = confidence_score(a, b)
            assert score >= 0
            assert score == confidence_score(-a, -b)
