# Generated migration for Rewardman core models

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="EligibilityToken",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("user_id", models.CharField(db_index=True, max_length=128, verbose_name="user")),
                (
                    "rule",
                    models.CharField(
                        choices=[
                            ("vip_daily", "VIP daily"),
                            ("spend_threshold", "Spend threshold"),
                            ("profile_complete", "Profile complete"),
                        ],
                        max_length=32,
                        verbose_name="rule",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        verbose_name="created at",
                    ),
                ),
                ("consumed_at", models.DateTimeField(blank=True, null=True, verbose_name="consumed at")),
                (
                    "consumed_on",
                    models.DateField(
                        blank=True,
                        help_text="Calendar day (spin timezone) of the spin that consumed this token.",
                        null=True,
                        verbose_name="spin day",
                    ),
                ),
            ],
            options={
                "verbose_name": "eligibility token",
                "verbose_name_plural": "eligibility tokens",
                "db_table": "rewardman_eligibility_token",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="LedgerTransaction",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("user_id", models.CharField(db_index=True, max_length=128, verbose_name="user")),
                (
                    "delta",
                    models.IntegerField(
                        help_text="Positive for grants, negative for redemption/expiry",
                        verbose_name="points",
                    ),
                ),
                ("reason", models.CharField(max_length=80, verbose_name="reason")),
                ("description", models.CharField(blank=True, max_length=200, verbose_name="description")),
                (
                    "reference",
                    models.CharField(
                        blank=True,
                        help_text="Idempotency key (ex: spin:42, order:A-1001)",
                        max_length=100,
                        verbose_name="reference",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        verbose_name="created at",
                    ),
                ),
                ("expires_at", models.DateTimeField(blank=True, null=True, verbose_name="expires at")),
                ("created_by", models.CharField(blank=True, max_length=100, verbose_name="created by")),
                ("swept", models.BooleanField(default=False, verbose_name="swept")),
                ("swept_at", models.DateTimeField(blank=True, null=True, verbose_name="swept at")),
                (
                    "compensates",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="compensation",
                        to="rewardman.ledgertransaction",
                        verbose_name="compensates",
                    ),
                ),
            ],
            options={
                "verbose_name": "ledger transaction",
                "verbose_name_plural": "ledger transactions",
                "db_table": "rewardman_ledger_transaction",
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="SpinRecord",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("user_id", models.CharField(db_index=True, max_length=128, verbose_name="user")),
                ("prize_key", models.CharField(max_length=50, verbose_name="prize")),
                ("prize_label", models.CharField(blank=True, max_length=200, verbose_name="label")),
                ("points_granted", models.IntegerField(blank=True, null=True, verbose_name="points granted")),
                (
                    "cost",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=8,
                        verbose_name="cost of goods",
                    ),
                ),
                ("spin_day", models.DateField(verbose_name="spin day")),
                (
                    "created_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        verbose_name="created at",
                    ),
                ),
                (
                    "token",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="spin",
                        to="rewardman.eligibilitytoken",
                        verbose_name="token",
                    ),
                ),
            ],
            options={
                "verbose_name": "spin",
                "verbose_name_plural": "spins",
                "db_table": "rewardman_spin_record",
                "ordering": ["-created_at"],
            },
        ),
        migrations.AddConstraint(
            model_name="eligibilitytoken",
            constraint=models.UniqueConstraint(
                condition=models.Q(consumed_on__isnull=False),
                fields=("user_id", "consumed_on"),
                name="rewardman_one_spin_per_day",
            ),
        ),
        migrations.AddIndex(
            model_name="eligibilitytoken",
            index=models.Index(
                fields=["user_id", "consumed_at", "created_at"],
                name="rewardman_token_user_idx",
            ),
        ),
        migrations.AddConstraint(
            model_name="ledgertransaction",
            constraint=models.UniqueConstraint(
                condition=models.Q(("reference", ""), _negated=True),
                fields=("reference",),
                name="rewardman_unique_ledger_reference",
            ),
        ),
        migrations.AddIndex(
            model_name="ledgertransaction",
            index=models.Index(
                fields=["user_id", "-created_at"],
                name="rewardman_ledger_user_idx",
            ),
        ),
        migrations.AddIndex(
            model_name="ledgertransaction",
            index=models.Index(
                fields=["swept", "expires_at"],
                name="rewardman_ledger_sweep_idx",
            ),
        ),
        migrations.AddIndex(
            model_name="spinrecord",
            index=models.Index(
                fields=["user_id", "spin_day"],
                name="rewardman_spin_user_day_idx",
            ),
        ),
        migrations.AddIndex(
            model_name="spinrecord",
            index=models.Index(
                fields=["spin_day"],
                name="rewardman_spin_day_idx",
            ),
        ),
    ]
