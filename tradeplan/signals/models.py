"""Signal data models — currencies, strength labels, and the pair taxonomy."""

from dataclasses import dataclass
from enum import Enum


class Currency(str, Enum):
    """Closed set of currency indexes (GOLD is the metal pseudo-currency)."""

    EUR = "EUR"
    USD = "USD"
    JPY = "JPY"
    GBP = "GBP"
    NZD = "NZD"
    AUD = "AUD"
    CAD = "CAD"
    GOLD = "GOLD"


class StrengthLabel(str, Enum):
    """Five ordered strength bands, strongest first."""

    EXTREME_STRONG = "Extreme Strong"
    STRONG = "Strong"
    NEUTRAL = "Neutral"
    WEAK = "Weak"
    EXTREME_WEAK = "Extreme Weak"


class Bias(str, Enum):
    """Directional trade bias for a pair."""

    BUY = "BUY"
    SELL = "SELL"
    NEUTRAL = "NEUTRAL"


STRONG_LABELS = frozenset({StrengthLabel.STRONG, StrengthLabel.EXTREME_STRONG})
WEAK_LABELS = frozenset({StrengthLabel.WEAK, StrengthLabel.EXTREME_WEAK})


@dataclass(frozen=True)
class CorrelationInput:
    """Three timeframe readings for one currency."""

    currency: Currency
    d1: float = 0.0
    h4: float = 0.0
    h1: float = 0.0


@dataclass(frozen=True)
class TradePair:
    """A static pair definition, e.g. EURUSD = EUR / USD."""

    pair: str
    base: Currency
    quote: Currency


@dataclass(frozen=True)
class PairGroup:
    """Pairs organised under an index currency ("XAU" for the metal)."""

    index: str
    pairs: tuple[TradePair, ...]


@dataclass(frozen=True)
class ResolvedPair:
    """A ``TradePair`` annotated with labels, bias, scores, and confidence."""

    pair: str
    base: Currency
    quote: Currency
    base_label: StrengthLabel
    quote_label: StrengthLabel
    bias: Bias
    base_score: float
    quote_score: float
    confidence: float


@dataclass(frozen=True)
class ResolvedGroup:
    """A ``PairGroup`` whose pairs have been resolved."""

    index: str
    pairs: tuple[ResolvedPair, ...]


# ── Pair taxonomy ────────────────────────────────────────────────────────


def _group(index: str, *pairs: tuple[str, Currency, Currency]) -> PairGroup:
    return PairGroup(
        index=index,
        pairs=tuple(TradePair(pair=p, base=b, quote=q) for p, b, q in pairs),
    )


_C = Currency

FOREX_PAIRS: tuple[PairGroup, ...] = (
    _group(
        "EUR",
        ("EURUSD", _C.EUR, _C.USD),
        ("EURJPY", _C.EUR, _C.JPY),
        ("EURGBP", _C.EUR, _C.GBP),
        ("EURNZD", _C.EUR, _C.NZD),
        ("EURCAD", _C.EUR, _C.CAD),
        ("EURAUD", _C.EUR, _C.AUD),
    ),
    _group(
        "GBP",
        ("GBPUSD", _C.GBP, _C.USD),
        ("GBPJPY", _C.GBP, _C.JPY),
        ("GBPNZD", _C.GBP, _C.NZD),
        ("GBPCAD", _C.GBP, _C.CAD),
        ("GBPAUD", _C.GBP, _C.AUD),
    ),
    _group(
        "USD",
        ("USDJPY", _C.USD, _C.JPY),
        ("USDCAD", _C.USD, _C.CAD),
    ),
    _group(
        "AUD",
        ("AUDJPY", _C.AUD, _C.JPY),
        ("AUDNZD", _C.AUD, _C.NZD),
        ("AUDCAD", _C.AUD, _C.CAD),
        ("AUDUSD", _C.AUD, _C.USD),
    ),
    _group(
        "NZD",
        ("NZDCAD", _C.NZD, _C.CAD),
        ("NZDUSD", _C.NZD, _C.USD),
        ("NZDJPY", _C.NZD, _C.JPY),
    ),
    _group(
        "XAU",
        ("XAUUSD", _C.GOLD, _C.USD),
    ),
)

PAIR_SYMBOLS: frozenset[str] = frozenset(
    p.pair for g in FOREX_PAIRS for p in g.pairs
)


def parse_currency(value: str) -> Currency | None:
    """Return the ``Currency`` named by *value* (case-insensitive), or None."""
    try:
        return Currency(value.strip().upper())
    except ValueError:
        return None
