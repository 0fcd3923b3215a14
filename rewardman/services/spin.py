"""Spin engine - daily wheel spin gated by eligibility tokens.

Token consumption is the linearization point. Inside one transaction the
oldest unconsumed token is locked and consumed with a conditional update,
and the per-day unique constraint on (user_id, consumed_on) rejects a second
spin on the same day. Everything after that (roll, SpinRecord, ledger
grant) is append-only, runs after commit, and can be retried with
settle() without touching another token.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo

from django.db import DatabaseError, IntegrityError, OperationalError, transaction
from django.db.models import CharField, Exists, OuterRef, Sum, Value
from django.db.models.functions import Cast, Concat
from django.utils import timezone

from rewardman.conf import rewardman_settings
from rewardman.exceptions import RewardmanError
from rewardman.models import EligibilityToken, LedgerTransaction, Reason, SpinRecord
from rewardman.prizes import PrizeKind, PrizeTable, PrizeTableEntry, get_prize_table
from rewardman.services import ledger
from rewardman.signals import spin_completed

logger = logging.getLogger(__name__)


class SpinReason:
    """Machine-readable refusal reasons."""

    NOT_ELIGIBLE = "NOT_ELIGIBLE"
    COOLDOWN = "COOLDOWN"


REASON_MESSAGES = {
    SpinReason.NOT_ELIGIBLE: "No spins available. Order or complete your profile to earn one.",
    SpinReason.COOLDOWN: "You already spun today. Come back tomorrow!",
}


@dataclass
class SpinResult:
    """Outcome of spin(). Refusals are results, never exceptions."""

    ok: bool
    prize: PrizeTableEntry | None = None
    reason: str | None = None
    retryable: bool = False
    spin: SpinRecord | None = None
    transaction: LedgerTransaction | None = None

    @property
    def message(self) -> str:
        if self.ok:
            return self.prize.label
        return REASON_MESSAGES.get(self.reason, "")

    def as_dict(self) -> dict:
        if self.ok:
            return {"ok": True, "prize": self.prize.as_dict()}
        return {
            "ok": False,
            "reason": self.reason,
            "message": self.message,
            "retryable": self.retryable,
        }


@dataclass(frozen=True)
class SpinStatus:
    """Read-only eligibility view for the wheel screen."""

    can_spin: bool
    reason: str | None
    tokens_available: int
    next_spin_at: datetime | None


# ======================================================================
# Day boundary
# ======================================================================


def spin_timezone() -> ZoneInfo:
    return ZoneInfo(rewardman_settings.SPIN_TIMEZONE)


def spin_day(now: datetime) -> date:
    """Calendar day of `now` in the spin timezone."""
    return timezone.localtime(now, spin_timezone()).date()


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """[start, end) of `day` in the spin timezone, as aware datetimes."""
    tz = spin_timezone()
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start, end


def spun_on(user_id: str, day: date) -> bool:
    """A spin was credited (or a token consumed) for `user_id` on `day`."""
    start, end = day_bounds(day)
    if SpinRecord.objects.filter(user_id=user_id, created_at__gte=start, created_at__lt=end).exists():
        return True
    return EligibilityToken.objects.filter(user_id=user_id, consumed_on=day).exists()


# ======================================================================
# Spin
# ======================================================================


def spin(
    user_id: str,
    now: datetime | None = None,
    rng=None,
    table: PrizeTable | None = None,
) -> SpinResult:
    """
    Spend one eligibility token on one wheel roll.

    Guarantees at most one token consumed per call and at most one credited
    spin per day per user, under concurrent calls. Conflicts are reported
    (retryable=True) and never retried here.

    Args:
        user_id: Authenticated user ID
        now: Current time (injected for tests)
        rng: Random source with random() (injected for tests)
        table: Prize table (defaults to the table of the user's tier)

    Returns:
        SpinResult with the prize, or ok=False with NOT_ELIGIBLE/COOLDOWN

    Raises:
        DatabaseError: Store unavailable. Nothing falls back to a
            non-transactional path.
    """
    now = now or timezone.now()
    day = spin_day(now)

    if spun_on(user_id, day):
        return _refused(SpinReason.COOLDOWN)
    if not EligibilityToken.objects.filter(user_id=user_id, consumed_at__isnull=True).exists():
        return _refused(SpinReason.NOT_ELIGIBLE)

    token, reason = consume_oldest(user_id, day, now)
    if token is None:
        return _refused(reason, retryable=reason == SpinReason.NOT_ELIGIBLE)

    try:
        return settle(token, rng=rng, table=table)
    except DatabaseError:
        logger.warning("Spin settlement failed: user=%s token=%s left pending", user_id, token.pk)
        raise


def consume_oldest(user_id: str, day: date, now: datetime) -> tuple[EligibilityToken | None, str | None]:
    """
    Atomically consume the user's oldest unconsumed token.

    Returns:
        (token, None) on success, (None, reason) on conflict:
        NOT_ELIGIBLE when a concurrent call took the token or the store
        reported a lock conflict, COOLDOWN when a concurrent call already
        spun today.

    Raises:
        OperationalError: Store failures other than lock conflicts
    """
    try:
        with transaction.atomic():
            token = (
                EligibilityToken.objects.select_for_update()
                .filter(user_id=user_id, consumed_at__isnull=True)
                .order_by("created_at", "id")
                .first()
            )
            if token is None:
                logger.info("Spin conflict: user=%s has no token left", user_id)
                return None, SpinReason.NOT_ELIGIBLE

            claimed = EligibilityToken.objects.filter(
                pk=token.pk,
                consumed_at__isnull=True,
            ).update(consumed_at=now, consumed_on=day)

            if claimed != 1:
                logger.warning("Spin conflict: token=%s consumed concurrently", token.pk)
                return None, SpinReason.NOT_ELIGIBLE
    except IntegrityError:
        logger.warning("Spin conflict: user=%s already spun on %s", user_id, day)
        return None, SpinReason.COOLDOWN
    except OperationalError as exc:
        if not is_lock_conflict(exc):
            raise
        logger.warning("Spin conflict: user=%s lock conflict (%s)", user_id, exc)
        return None, SpinReason.NOT_ELIGIBLE

    token.consumed_at = now
    token.consumed_on = day
    return token, None


# SQLSTATE codes: serialization_failure, deadlock_detected, lock_not_available
LOCK_CONFLICT_SQLSTATES = {"40001", "40P01", "55P03"}
# MySQL error numbers: lock wait timeout, deadlock
LOCK_CONFLICT_MYSQL_ERRNOS = {1205, 1213}


def is_lock_conflict(exc: OperationalError) -> bool:
    """The store refused a write because a concurrent transaction holds the row or table."""
    cause = exc.__cause__
    sqlstate = getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)
    if sqlstate in LOCK_CONFLICT_SQLSTATES:
        return True
    errno = cause.args[0] if cause is not None and cause.args else None
    if isinstance(errno, int) and errno in LOCK_CONFLICT_MYSQL_ERRNOS:
        return True
    return "database is locked" in str(exc) or "database table is locked" in str(exc)


def settle(
    token: EligibilityToken,
    rng=None,
    table: PrizeTable | None = None,
) -> SpinResult:
    """
    Roll and record the spin paid for by a consumed token. Idempotent.

    The SpinRecord is keyed by token and the ledger grant by "spin:<id>",
    so retrying after a partial failure never duplicates either write and
    never re-rolls a recorded prize.

    Raises:
        RewardmanError: TOKEN_NOT_CONSUMED
    """
    if not token.is_consumed:
        raise RewardmanError("TOKEN_NOT_CONSUMED", token_id=token.pk)

    table = table or get_prize_table(ledger.tier(token.user_id))
    record = SpinRecord.objects.filter(token=token).first()

    if record is None:
        prize = _apply_cost_cap(table.roll(rng), table, token.consumed_on)
        try:
            with transaction.atomic():
                record = SpinRecord.objects.create(
                    user_id=token.user_id,
                    token=token,
                    prize_key=prize.key,
                    prize_label=prize.label,
                    points_granted=prize.points_granted,
                    cost=prize.cost,
                    spin_day=token.consumed_on,
                    created_at=token.consumed_at,
                )
        except IntegrityError:
            record = SpinRecord.objects.get(token=token)

    prize = table.get(record.prize_key) or _prize_from_record(record)

    grant = None
    if record.points_granted:
        grant = ledger.append(
            record.user_id,
            record.points_granted,
            Reason.wheel(record.prize_key),
            expires_at=ledger.grant_expiry(record.created_at),
            reference=f"spin:{record.pk}",
            description=record.prize_label,
            now=record.created_at,
        )

    logger.info(
        "Spin: user=%s token=%s prize=%s points=%s",
        record.user_id,
        token.pk,
        record.prize_key,
        record.points_granted or 0,
    )
    spin_completed.send(sender=SpinRecord, spin=record, transaction=grant)
    return SpinResult(ok=True, prize=prize, spin=record, transaction=grant)


def settle_pending(limit: int = 500, rng=None) -> int:
    """
    Finish spins whose post-commit writes failed.

    Covers tokens consumed without a SpinRecord and point prizes without
    their ledger grant.

    Returns:
        Number of spins settled
    """
    settled = 0

    tokens = EligibilityToken.objects.filter(
        consumed_at__isnull=False,
        spin__isnull=True,
    ).order_by("consumed_at")[:limit]
    for token in tokens:
        settle(token, rng=rng)
        settled += 1

    grant_exists = LedgerTransaction.objects.filter(
        reference=Concat(Value("spin:"), Cast(OuterRef("pk"), output_field=CharField())),
    )
    spins = (
        SpinRecord.objects.filter(points_granted__gt=0)
        .exclude(Exists(grant_exists))
        .select_related("token")
        .order_by("created_at")[:limit]
    )
    for record in spins:
        settle(record.token, rng=rng)
        settled += 1

    if settled:
        logger.info("Settled %d pending spin(s)", settled)
    return settled


# ======================================================================
# Views
# ======================================================================


def status(user_id: str, now: datetime | None = None) -> SpinStatus:
    """Whether the user could spin now, without consuming anything."""
    now = now or timezone.now()
    day = spin_day(now)
    available = EligibilityToken.objects.filter(user_id=user_id, consumed_at__isnull=True).count()

    if spun_on(user_id, day):
        _, next_day = day_bounds(day)
        return SpinStatus(False, SpinReason.COOLDOWN, available, next_day)
    if not available:
        return SpinStatus(False, SpinReason.NOT_ELIGIBLE, 0, None)
    return SpinStatus(True, None, available, None)


def history(user_id: str, limit: int = 20) -> list[SpinRecord]:
    """Spins, newest first."""
    return list(SpinRecord.objects.filter(user_id=user_id)[:limit])


# ======================================================================
# Internal
# ======================================================================


def _refused(reason: str, retryable: bool = False) -> SpinResult:
    return SpinResult(ok=False, reason=reason, retryable=retryable)


def _apply_cost_cap(prize: PrizeTableEntry, table: PrizeTable, day: date) -> PrizeTableEntry:
    """Swap for the no-win outcome when the day's prize cost budget is spent."""
    cap = rewardman_settings.DAILY_PRIZE_COST_CAP
    if cap is None or not prize.cost:
        return prize

    spent = SpinRecord.objects.filter(spin_day=day).aggregate(total=Sum("cost"))["total"] or Decimal("0")
    if spent + prize.cost > Decimal(str(cap)):
        logger.info("Daily prize cost cap reached (%s + %s > %s): %s -> no win", spent, prize.cost, cap, prize.key)
        return table.no_win()
    return prize


def _prize_from_record(record: SpinRecord) -> PrizeTableEntry:
    """Prize of a spin recorded under a table that no longer has its key."""
    return PrizeTableEntry(
        key=record.prize_key,
        label=record.prize_label,
        weight=0,
        points_granted=record.points_granted,
        kind=PrizeKind.POINTS if record.points_granted else PrizeKind.NOTHING,
        cost=record.cost,
    )
