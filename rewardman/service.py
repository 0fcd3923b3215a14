"""
Rewardman public API.

CORE (engine):
    RewardsService.mint(user_id, signals)        - Mint eligibility tokens
    RewardsService.spin(user_id)                 - Spend one token on the wheel
    RewardsService.balance(user_id)              - Current points (ledger fold)
    RewardsService.expiring_within(user_id, 30)  - Grants about to expire
    RewardsService.sweep(now)                    - Neutralize aged grants

CONVENIENCE (helpers):
    RewardsService.spin_status(user_id)  - Can the user spin right now?
    RewardsService.summary(user_id)      - Balance, lifetime, tier, expiring
    RewardsService.earn_purchase(...)    - Points for a paid order
    RewardsService.redeem(...)           - Spend points
"""

from datetime import datetime
from decimal import Decimal

from rewardman.models import EligibilityToken, LedgerTransaction, SpinRecord
from rewardman.protocols.signals import ActivitySignals
from rewardman.services import expiry, ledger, minter
from rewardman.services import spin as spin_engine
from rewardman.services.ledger import ExpiringGrant, PointsSummary
from rewardman.services.spin import SpinResult, SpinStatus


class RewardsService:
    """
    Rewardman public API.

    Uses @classmethod for extensibility: request handlers call these, never
    the models directly.

    CORE:
        mint(user_id, signals)       - Token minter
        spin(user_id)                - Spin engine
        append(user_id, delta, ...)  - Ledger append
        balance(user_id)             - Ledger fold
        expiring_within(user_id, d)  - Expiring grants
        sweep(now)                   - Expiry sweeper

    CONVENIENCE:
        mint_from_backend, tokens, spin_status, spin_history, settle_pending,
        history, summary, earn_purchase, grant_bonus, adjust, redeem
    """

    # ======================================================================
    # CORE API
    # ======================================================================

    @classmethod
    def mint(
        cls,
        user_id: str,
        signals: ActivitySignals | None = None,
        *,
        is_vip: bool = False,
        spent_last_24h: Decimal | float = 0,
        profile_complete: bool = False,
    ) -> int:
        """
        Mint one token per satisfied rule. Returns the count created.

        Signals may be passed as an ActivitySignals or as keyword flags.
        Call from privileged contexts only.
        """
        if signals is None:
            signals = ActivitySignals(
                is_vip=is_vip,
                spent_last_24h=Decimal(str(spent_last_24h)),
                profile_complete=profile_complete,
            )
        return minter.mint(user_id, signals)

    @classmethod
    def spin(cls, user_id: str, now: datetime | None = None, rng=None) -> SpinResult:
        """Spend the oldest token on one roll. Refusals come back as SpinResult."""
        return spin_engine.spin(user_id, now=now, rng=rng)

    @classmethod
    def append(cls, user_id: str, delta: int, reason: str, expires_at: datetime | None = None, **kwargs) -> int:
        """Append a ledger row. Returns its id."""
        return ledger.append(user_id, delta, reason, expires_at=expires_at, **kwargs).pk

    @classmethod
    def balance(cls, user_id: str) -> int:
        return ledger.balance(user_id)

    @classmethod
    def expiring_within(cls, user_id: str, days: int = 30, now: datetime | None = None) -> list[ExpiringGrant]:
        return ledger.expiring_within(user_id, days, now=now)

    @classmethod
    def sweep(cls, now: datetime | None = None) -> int:
        return expiry.sweep(now)

    # ======================================================================
    # CONVENIENCE
    # ======================================================================

    @classmethod
    def mint_from_backend(cls, user_id: str) -> int:
        return minter.mint_from_backend(user_id)

    @classmethod
    def tokens(cls, user_id: str) -> list[EligibilityToken]:
        """Unconsumed tokens, oldest first."""
        return minter.unconsumed(user_id)

    @classmethod
    def spin_status(cls, user_id: str, now: datetime | None = None) -> SpinStatus:
        return spin_engine.status(user_id, now=now)

    @classmethod
    def spin_history(cls, user_id: str, limit: int = 20) -> list[SpinRecord]:
        return spin_engine.history(user_id, limit=limit)

    @classmethod
    def settle_pending(cls) -> int:
        return spin_engine.settle_pending()

    @classmethod
    def history(cls, user_id: str, limit: int = 50) -> list[LedgerTransaction]:
        return ledger.history(user_id, limit=limit)

    @classmethod
    def summary(cls, user_id: str, now: datetime | None = None) -> PointsSummary:
        return ledger.summary(user_id, now=now)

    @classmethod
    def earn_purchase(cls, user_id: str, amount, order_ref: str) -> LedgerTransaction | None:
        return ledger.earn_purchase(user_id, amount, order_ref)

    @classmethod
    def grant_bonus(cls, user_id: str, points: int, tag: str, **kwargs) -> LedgerTransaction:
        return ledger.grant_bonus(user_id, points, tag, **kwargs)

    @classmethod
    def adjust(cls, user_id: str, delta: int, note: str, created_by: str) -> LedgerTransaction:
        return ledger.adjust(user_id, delta, note, created_by)

    @classmethod
    def redeem(cls, user_id: str, points: int, note: str = "", reference: str = "") -> LedgerTransaction:
        return ledger.redeem(user_id, points, note=note, reference=reference)
