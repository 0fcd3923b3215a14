"""
EligibilityToken model - single-use right to one wheel spin.
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class MintRule(models.TextChoices):
    """Rules that can mint an eligibility token."""

    VIP_DAILY = "vip_daily", _("VIP daily")
    SPEND_THRESHOLD = "spend_threshold", _("Spend threshold")
    PROFILE_COMPLETE = "profile_complete", _("Profile complete")


class EligibilityToken(models.Model):
    """
    Single-use credential granting one spin.

    Created by services.minter, consumed by services.spin. Never deleted:
    consumed tokens stay for audit.

    Rules:
    - consumed_at goes from NULL to a timestamp exactly once
      (conditional UPDATE ... WHERE consumed_at IS NULL)
    - at most one consumed token per (user_id, consumed_on)
    """

    user_id = models.CharField(_("user"), max_length=128, db_index=True)
    rule = models.CharField(_("rule"), max_length=32, choices=MintRule.choices)

    created_at = models.DateTimeField(_("created at"), default=timezone.now, db_index=True)
    consumed_at = models.DateTimeField(_("consumed at"), null=True, blank=True)
    consumed_on = models.DateField(
        _("spin day"),
        null=True,
        blank=True,
        help_text=_("Calendar day (spin timezone) of the spin that consumed this token."),
    )

    class Meta:
        db_table = "rewardman_eligibility_token"
        verbose_name = _("eligibility token")
        verbose_name_plural = _("eligibility tokens")
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["user_id", "consumed_on"],
                condition=models.Q(consumed_on__isnull=False),
                name="rewardman_one_spin_per_day",
            ),
        ]
        indexes = [
            models.Index(fields=["user_id", "consumed_at", "created_at"], name="rewardman_token_user_idx"),
        ]

    def __str__(self):
        state = f"consumed {self.consumed_at:%Y-%m-%d}" if self.consumed_at else "available"
        return f"{self.user_id}: {self.rule} ({state})"

    @property
    def is_consumed(self) -> bool:
        return self.consumed_at is not None
