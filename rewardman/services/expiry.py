"""Expiry sweeper - neutralizes aged point grants.

Each aged grant gets one compensating "expiry" row and is marked swept, in
its own transaction. There is no all-or-nothing run: an interrupted sweep
leaves finished rows marked and the next run picks up the rest.
"""

import logging
from datetime import datetime

from django.db import IntegrityError, transaction
from django.utils import timezone

from rewardman.models import LedgerTransaction, Reason
from rewardman.signals import points_expired

logger = logging.getLogger(__name__)


def sweep(now: datetime | None = None) -> int:
    """
    Compensate every grant with expires_at <= now that is not swept yet.

    Safe to re-run: swept rows are skipped, and the unique `compensates`
    link rejects a second compensation even if two sweeps overlap.

    Returns:
        Number of grants neutralized by this run
    """
    now = now or timezone.now()
    neutralized = 0

    aged_ids = list(
        LedgerTransaction.objects.filter(delta__gt=0, expires_at__lte=now, swept=False)
        .order_by("expires_at", "id")
        .values_list("pk", flat=True)
    )
    for pk in aged_ids:
        if expire_grant(pk, now) is not None:
            neutralized += 1

    logger.info("Expiry sweep at %s: %d grant(s) neutralized", now.isoformat(), neutralized)
    return neutralized


def expire_grant(pk: int, now: datetime) -> LedgerTransaction | None:
    """
    Neutralize one grant exactly once.

    Returns:
        The compensating row, or None if the grant was already swept
    """
    try:
        with transaction.atomic():
            marked = LedgerTransaction.objects.filter(pk=pk, swept=False).update(
                swept=True,
                swept_at=now,
            )
            if marked != 1:
                return None

            original = LedgerTransaction.objects.get(pk=pk)
            compensation = LedgerTransaction.objects.create(
                user_id=original.user_id,
                delta=-original.delta,
                reason=Reason.EXPIRY,
                description=f"Expired: {original.reason}",
                reference=f"expiry:{original.pk}",
                compensates=original,
                created_at=now,
            )
    except IntegrityError:
        logger.warning("Expiry: grant=%s already compensated", pk)
        return None

    logger.debug("Expired grant=%s user=%s points=%s", pk, original.user_id, original.delta)
    points_expired.send(sender=LedgerTransaction, original=original, compensation=compensation)
    return compensation
