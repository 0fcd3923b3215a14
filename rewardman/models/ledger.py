"""
LedgerTransaction model - append-only points ledger.

Balance is never stored. It is always Sum("delta") over a user's rows.
Expiry is modeled as a compensating row, so the fold needs no conditions.
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Reason:
    """Reason tags for ledger transactions."""

    WHEEL_PREFIX = "wheel:"
    BONUS_PREFIX = "bonus:"
    PURCHASE = "purchase"
    ADMIN_ADJUSTMENT = "admin_adjustment"
    REDEMPTION = "redemption"
    EXPIRY = "expiry"

    @classmethod
    def wheel(cls, prize_key: str) -> str:
        return f"{cls.WHEEL_PREFIX}{prize_key}"

    @classmethod
    def bonus(cls, tag: str) -> str:
        return f"{cls.BONUS_PREFIX}{tag}"


class LedgerTransaction(models.Model):
    """
    Immutable signed point delta.

    The only mutation ever applied is the sweep marker (swept/swept_at),
    set exactly once when the compensating "expiry" row is inserted.
    """

    user_id = models.CharField(_("user"), max_length=128, db_index=True)
    delta = models.IntegerField(
        _("points"),
        help_text=_("Positive for grants, negative for redemption/expiry"),
    )
    reason = models.CharField(_("reason"), max_length=80)
    description = models.CharField(_("description"), max_length=200, blank=True)
    reference = models.CharField(
        _("reference"),
        max_length=100,
        blank=True,
        help_text=_("Idempotency key (ex: spin:42, order:A-1001)"),
    )

    created_at = models.DateTimeField(_("created at"), default=timezone.now, db_index=True)
    expires_at = models.DateTimeField(_("expires at"), null=True, blank=True)
    created_by = models.CharField(_("created by"), max_length=100, blank=True)

    # Sweep marker
    swept = models.BooleanField(_("swept"), default=False)
    swept_at = models.DateTimeField(_("swept at"), null=True, blank=True)
    compensates = models.OneToOneField(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="compensation",
        verbose_name=_("compensates"),
    )

    class Meta:
        db_table = "rewardman_ledger_transaction"
        verbose_name = _("ledger transaction")
        verbose_name_plural = _("ledger transactions")
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["reference"],
                condition=~models.Q(reference=""),
                name="rewardman_unique_ledger_reference",
            ),
        ]
        indexes = [
            models.Index(fields=["user_id", "-created_at"], name="rewardman_ledger_user_idx"),
            models.Index(fields=["swept", "expires_at"], name="rewardman_ledger_sweep_idx"),
        ]

    def __str__(self):
        sign = "+" if self.delta > 0 else ""
        return f"{sign}{self.delta}pts - {self.reason}"

    @property
    def is_grant(self) -> bool:
        return self.delta > 0 and self.expires_at is not None
