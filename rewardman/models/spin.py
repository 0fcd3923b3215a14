"""SpinRecord model - one row per credited spin."""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class SpinRecord(models.Model):
    """
    Outcome of a credited spin. Immutable once created.

    Linked one-to-one to the token it consumed, so settling a spin twice
    can never produce a second record.
    """

    user_id = models.CharField(_("user"), max_length=128, db_index=True)
    token = models.OneToOneField(
        "rewardman.EligibilityToken",
        on_delete=models.PROTECT,
        related_name="spin",
        verbose_name=_("token"),
    )

    prize_key = models.CharField(_("prize"), max_length=50)
    prize_label = models.CharField(_("label"), max_length=200, blank=True)
    points_granted = models.IntegerField(_("points granted"), null=True, blank=True)
    cost = models.DecimalField(_("cost of goods"), max_digits=8, decimal_places=2, default=0)

    spin_day = models.DateField(_("spin day"))
    created_at = models.DateTimeField(_("created at"), default=timezone.now, db_index=True)

    class Meta:
        db_table = "rewardman_spin_record"
        verbose_name = _("spin")
        verbose_name_plural = _("spins")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user_id", "spin_day"], name="rewardman_spin_user_day_idx"),
            models.Index(fields=["spin_day"], name="rewardman_spin_day_idx"),
        ]

    def __str__(self):
        return f"{self.user_id} @ {self.spin_day}: {self.prize_key}"
