"""Ledger service - append-only points ledger and balance fold.

Balance is always Sum("delta"). Nothing here special-cases expired grants:
the sweep keeps the ledger itself correct by appending compensations.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.utils import timezone

from rewardman.conf import rewardman_settings
from rewardman.exceptions import RewardmanError
from rewardman.gates import GateError, Gates
from rewardman.models import LedgerTransaction, Reason

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpiringGrant:
    """Points that will be (or are about to be) neutralized by the sweep."""

    transaction_id: int
    points: int
    expires_at: datetime


@dataclass(frozen=True)
class PointsSummary:
    """Balance view for client display."""

    user_id: str
    balance: int
    lifetime_points: int
    tier: str
    expiring: list[ExpiringGrant]

    @property
    def expiring_points(self) -> int:
        return sum(grant.points for grant in self.expiring)


def grant_expiry(now: datetime | None = None) -> datetime:
    """Expiry timestamp for a wheel or bonus grant created at `now`."""
    now = now or timezone.now()
    return now + timedelta(days=rewardman_settings.GRANT_EXPIRY_DAYS)


def append(
    user_id: str,
    delta: int,
    reason: str,
    expires_at: datetime | None = None,
    reference: str = "",
    description: str = "",
    created_by: str = "",
    now: datetime | None = None,
) -> LedgerTransaction:
    """
    Append a point delta.

    With a reference, the append is idempotent: a repeated call returns the
    row already written (at-least-once writers retry safely).

    Raises:
        RewardmanError: INVALID_POINTS if delta is not a non-zero int
    """
    if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
        raise RewardmanError("INVALID_POINTS", message="Delta must be a non-zero integer", delta=delta)

    fields = {
        "user_id": user_id,
        "delta": delta,
        "reason": reason,
        "description": description,
        "expires_at": expires_at,
        "created_by": created_by,
        "created_at": now or timezone.now(),
    }

    if not reference:
        return LedgerTransaction.objects.create(**fields)

    existing = LedgerTransaction.objects.filter(reference=reference).first()
    if existing:
        return existing
    try:
        with transaction.atomic():
            return LedgerTransaction.objects.create(reference=reference, **fields)
    except IntegrityError:
        existing = LedgerTransaction.objects.filter(reference=reference).first()
        if existing:
            return existing
        raise


def balance(user_id: str) -> int:
    """Current points: the plain sum of every delta."""
    total = LedgerTransaction.objects.filter(user_id=user_id).aggregate(total=Sum("delta"))["total"]
    return total or 0


def expiring_within(user_id: str, days: int, now: datetime | None = None) -> list[ExpiringGrant]:
    """
    Grants not yet compensated that expire within `days`.

    Grants already past expiry but not swept yet are included: they still
    count toward the balance until the sweep neutralizes them.
    """
    now = now or timezone.now()
    horizon = now + timedelta(days=days)
    rows = (
        LedgerTransaction.objects.filter(
            user_id=user_id,
            delta__gt=0,
            expires_at__lte=horizon,
            swept=False,
        )
        .order_by("expires_at", "id")
    )
    return [ExpiringGrant(row.pk, row.delta, row.expires_at) for row in rows]


def history(user_id: str, limit: int = 50) -> list[LedgerTransaction]:
    """Ledger rows, newest first."""
    return list(LedgerTransaction.objects.filter(user_id=user_id)[:limit])


def lifetime_points(user_id: str) -> int:
    """Points ever earned: positive deltas, compensations excluded."""
    total = (
        LedgerTransaction.objects.filter(user_id=user_id, delta__gt=0, compensates__isnull=True)
        .aggregate(total=Sum("delta"))["total"]
    )
    return total or 0


def tier_for(points: int) -> str:
    """Highest tier whose threshold `points` reaches."""
    thresholds = sorted(
        rewardman_settings.TIER_THRESHOLDS.items(),
        key=lambda item: item[1],
        reverse=True,
    )
    for tier, threshold in thresholds:
        if points >= threshold:
            return tier
    return thresholds[-1][0]


def tier(user_id: str) -> str:
    return tier_for(lifetime_points(user_id))


def summary(user_id: str, now: datetime | None = None) -> PointsSummary:
    lifetime = lifetime_points(user_id)
    return PointsSummary(
        user_id=user_id,
        balance=balance(user_id),
        lifetime_points=lifetime,
        tier=tier_for(lifetime),
        expiring=expiring_within(user_id, rewardman_settings.GRANT_EXPIRY_DAYS, now=now),
    )


# ======================================================================
# Earning and spending
# ======================================================================


def points_for_amount(amount) -> int:
    """Purchase points: floor(amount * POINTS_PER_DOLLAR), never negative."""
    amount = Decimal(str(amount))
    if not amount.is_finite() or amount <= 0:
        return 0
    return math.floor(amount * Decimal(str(rewardman_settings.POINTS_PER_DOLLAR)))


def earn_purchase(
    user_id: str,
    amount,
    order_ref: str,
    now: datetime | None = None,
) -> LedgerTransaction | None:
    """
    Credit points for a paid order. Idempotent per order.

    Purchase points never expire. Returns None when the amount earns nothing.
    """
    points = points_for_amount(amount)
    if points <= 0:
        return None

    tx = append(
        user_id,
        points,
        Reason.PURCHASE,
        reference=f"order:{order_ref}",
        now=now,
    )
    logger.info("Purchase points: user=%s order=%s points=%s", user_id, order_ref, points)
    return tx


def grant_bonus(
    user_id: str,
    points: int,
    tag: str,
    reference: str = "",
    created_by: str = "",
    now: datetime | None = None,
) -> LedgerTransaction:
    """Bonus grant (birthday, referral, ...). Expires like wheel points."""
    _validate_points(points)
    now = now or timezone.now()
    return append(
        user_id,
        points,
        Reason.bonus(tag),
        expires_at=grant_expiry(now),
        reference=reference,
        created_by=created_by,
        now=now,
    )


def adjust(
    user_id: str,
    delta: int,
    note: str,
    created_by: str,
    now: datetime | None = None,
) -> LedgerTransaction:
    """Staff correction. May be negative; never expires."""
    _validate_points(delta, allow_negative=True)
    tx = append(
        user_id,
        delta,
        Reason.ADMIN_ADJUSTMENT,
        description=note,
        created_by=created_by,
        now=now,
    )
    logger.info("Admin adjustment: user=%s delta=%s by=%s note=%s", user_id, delta, created_by, note)
    return tx


def redeem(
    user_id: str,
    points: int,
    note: str = "",
    reference: str = "",
    now: datetime | None = None,
) -> LedgerTransaction:
    """
    Spend points.

    The user's ledger rows are locked while the balance is checked, so two
    concurrent redemptions cannot both pass the check.

    Raises:
        RewardmanError: INVALID_POINTS, INSUFFICIENT_POINTS
    """
    _validate_points(points)

    with transaction.atomic():
        list(
            LedgerTransaction.objects.select_for_update()
            .filter(user_id=user_id)
            .values_list("pk", flat=True)
        )
        available = balance(user_id)
        try:
            Gates.sufficient_balance(available, points)
        except GateError:
            raise RewardmanError(
                "INSUFFICIENT_POINTS",
                available=available,
                requested=points,
            )

        tx = append(
            user_id,
            -points,
            Reason.REDEMPTION,
            reference=reference,
            description=note,
            now=now,
        )

    logger.info("Redemption: user=%s points=%s note=%s", user_id, points, note)
    return tx


def _validate_points(points, allow_negative: bool = False) -> None:
    try:
        Gates.points_amount(points, allow_negative=allow_negative)
    except GateError as exc:
        raise RewardmanError("INVALID_POINTS", message=exc.message, **exc.details)
