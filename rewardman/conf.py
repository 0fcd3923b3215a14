"""
Rewardman configuration.

Usage in settings.py:
    REWARDMAN = {
        "SPIN_TIMEZONE": "America/New_York",
        "GRANT_EXPIRY_DAYS": 30,
        "MINT_RULES": {"vip_daily": True, "spend_threshold": True, "profile_complete": False},
        "SWEEP_SECRET": env("REWARDMAN_SWEEP_SECRET"),
    }
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from django.conf import settings


def _default_mint_rules() -> dict[str, bool]:
    return {
        "vip_daily": True,
        "spend_threshold": True,
        "profile_complete": True,
    }


def _default_tier_thresholds() -> dict[str, int]:
    return {
        "bronze": 0,
        "silver": 500,
        "gold": 1500,
        "platinum": 3000,
    }


@dataclass
class RewardmanSettings:
    """Rewardman configuration settings."""

    # Day boundary used for the one-spin-per-day cap
    SPIN_TIMEZONE: str = "UTC"

    # Wheel and bonus grants expire this many days after creation
    GRANT_EXPIRY_DAYS: int = 30

    # Token minting
    MINT_RULES: dict[str, bool] = field(default_factory=_default_mint_rules)
    SPEND_THRESHOLD: Decimal = Decimal("50.00")

    # Wheel (None = built-in tables, one per tier)
    PRIZE_TABLES: dict[str, list[dict]] | None = None
    PRIZE_TABLE: list[dict] | None = None
    DAILY_PRIZE_COST_CAP: Decimal | None = None

    # Points
    POINTS_PER_DOLLAR: Decimal = Decimal("0.1")
    MAX_POINTS_PER_OPERATION: int = 10000
    TIER_THRESHOLDS: dict[str, int] = field(default_factory=_default_tier_thresholds)

    # Activity signals backend (dotted path, see protocols.signals)
    SIGNALS_BACKEND: str = ""

    # Shared secret for the hosted sweep trigger
    SWEEP_SECRET: str = ""


def get_rewardman_settings() -> RewardmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "REWARDMAN", {})
    return RewardmanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_rewardman_settings(), name)


rewardman_settings = _LazySettings()
