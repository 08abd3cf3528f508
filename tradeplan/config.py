"""TradePlan — application configuration.

Loads .env variables into a typed config object.
Validates profile names and numeric settings on startup.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from tradeplan.risk.models import PIP_PROFILES, PipValueProfile
from tradeplan.signals.strength import BAND_PROFILES, BandProfile


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    band_profile_name: str  # "narrow" or "wide"
    pip_profile_name: str  # "standard", "gold_point", or "flat"
    insight_top_n: int
    insight_api_key: str
    insight_base_url: str
    insight_model: str
    default_capital: float
    db_path: str
    log_level: str
    port: int

    @property
    def band_profile(self) -> BandProfile:
        """Return the strength banding table selected by name."""
        return BAND_PROFILES[self.band_profile_name]

    @property
    def pip_profile(self) -> PipValueProfile:
        """Return the pip-value table selected by name."""
        return PIP_PROFILES[self.pip_profile_name]

    @property
    def insights_enabled(self) -> bool:
        return bool(self.insight_api_key)


def _choice(var: str, default: str, choices) -> str:
    value = os.environ.get(var, default).strip().lower()
    if value not in choices:
        raise ValueError(
            f"{var} must be one of {', '.join(sorted(choices))}, got '{value}'"
        )
    return value


def _number(var: str, default: str, cast):
    raw = os.environ.get(var, default)
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{var} must be a number, got '{raw}'") from None


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` with a message naming the offending variable when
    a profile name is unknown or a numeric setting is out of range.
    """
    load_dotenv(dotenv_path=env_path)

    top_n = _number("TRADEPLAN_INSIGHT_TOP_N", "5", int)
    if not 1 <= top_n <= 21:
        raise ValueError(f"TRADEPLAN_INSIGHT_TOP_N must be 1–21, got {top_n}")

    default_capital = _number("DEFAULT_CAPITAL", "1000.0", float)
    if not 0 <= default_capital < float("inf"):
        raise ValueError(f"DEFAULT_CAPITAL must be non-negative, got {default_capital}")

    return Config(
        band_profile_name=_choice("TRADEPLAN_BAND_PROFILE", "narrow", BAND_PROFILES),
        pip_profile_name=_choice("TRADEPLAN_PIP_PROFILE", "standard", PIP_PROFILES),
        insight_top_n=top_n,
        insight_api_key=os.environ.get("INSIGHT_API_KEY", ""),
        insight_base_url=os.environ.get("INSIGHT_BASE_URL", "https://api.openai.com/v1"),
        insight_model=os.environ.get("INSIGHT_MODEL", "gpt-4o-mini"),
        default_capital=default_capital,
        db_path=os.environ.get("DB_PATH", "data/tradeplan.db"),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        port=_number("PORT", "8080", int),
    )
