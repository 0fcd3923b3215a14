"""Management command to neutralize aged point grants (run daily)."""

from datetime import timezone as dt_timezone

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from rewardman.services import expiry


class Command(BaseCommand):
    help = "Insert compensating expiry transactions for grants past their expiry"

    def add_arguments(self, parser):
        parser.add_argument(
            "--now",
            default=None,
            help="Sweep as of this ISO 8601 timestamp instead of the current time",
        )

    def handle(self, *args, **options):
        now = None
        if options["now"]:
            try:
                now = parse_datetime(options["now"])
            except ValueError as exc:
                raise CommandError(f"Invalid --now value: {options['now']!r} ({exc})")
            if now is None:
                raise CommandError(f"Invalid --now value: {options['now']!r}")
            if timezone.is_naive(now):
                now = timezone.make_aware(now, dt_timezone.utc)

        neutralized = expiry.sweep(now)
        self.stdout.write(
            self.style.SUCCESS(f"Neutralized {neutralized} expired grant(s).")
        )
