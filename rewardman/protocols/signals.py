"""Activity signals protocol for token minting."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class ActivitySignals:
    """User activity evaluated by the mint rules."""

    is_vip: bool = False
    spent_last_24h: Decimal = Decimal("0")  # dollars
    profile_complete: bool = False


@runtime_checkable
class ActivitySignalsBackend(Protocol):
    """
    Protocol for gathering a user's activity signals.

    Implemented by the host project (order history, auth claims, profile
    store). Used by TokenMinter.mint_from_backend().

    Configuration in settings.py:
        REWARDMAN = {
            "SIGNALS_BACKEND": "shop.rewards.OrderActivityBackend",
        }
    """

    def get_signals(self, user_id: str) -> ActivitySignals:
        """
        Return current signals for a user.

        Args:
            user_id: Authenticated user ID

        Returns:
            ActivitySignals (VIP flag, spend over the last 24h, profile state)
        """
        ...
