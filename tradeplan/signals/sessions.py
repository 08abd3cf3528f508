"""Market session clock — pure functions over a UTC hour."""

from dataclasses import dataclass
from itertools import combinations


@dataclass(frozen=True)
class MarketSession:
    """A trading session window in UTC hours (end may exceed 24 to wrap)."""

    name: str
    start: int
    end: int


SESSIONS: tuple[MarketSession, ...] = (
    MarketSession(name="Tokyo", start=0, end=9),
    MarketSession(name="London", start=8, end=17),
    MarketSession(name="New York", start=13, end=22),
)


def is_in_session(
    utc_hour: float,
    session_start: int = 7,
    session_end: int = 21,
) -> bool:
    """Return True if *utc_hour* falls within ``[session_start, session_end)``.

    Windows whose end is past midnight (``session_end > 24`` or
    ``session_end < session_start``) wrap around.

    Args:
        utc_hour: The hour in UTC (0–24, fractional allowed).
        session_start: Session start hour (inclusive).
        session_end: Session end hour (exclusive).
    """
    hour = utc_hour % 24
    end = session_end % 24 if session_end > 24 else session_end
    if session_start <= end:
        return session_start <= hour < end
    return hour >= session_start or hour < end


def active_sessions(utc_hour: float) -> list[str]:
    """Names of the sessions open at *utc_hour*."""
    return [s.name for s in SESSIONS if is_in_session(utc_hour, s.start, s.end)]


def overlaps(utc_hour: float) -> list[tuple[str, str]]:
    """Pairs of sessions open at the same time at *utc_hour*."""
    return list(combinations(active_sessions(utc_hour), 2))
