"""Management command to finish spins whose ledger writes failed."""

from django.core.management.base import BaseCommand

from rewardman.services import spin


class Command(BaseCommand):
    help = "Settle consumed tokens that have no spin record or no points grant"

    def add_arguments(self, parser):
        parser.add_argument(
            "--limit",
            type=int,
            default=500,
            help="Maximum spins to settle per pass",
        )

    def handle(self, *args, **options):
        settled = spin.settle_pending(limit=options["limit"])
        self.stdout.write(
            self.style.SUCCESS(f"Settled {settled} pending spin(s).")
        )
