"""
Management command to clear the usage ledger.

Every vessel becomes eligible again. Intended for an exhausted pool.

Usage:
    python manage.py reset_used_ships --yes
"""

from django.core.management.base import BaseCommand, CommandError

from keel.game.services import usage_ledger


class Command(BaseCommand):
    help = "Delete all usage ledger entries so featured vessels can be selected again"

    def add_arguments(self, parser):
        parser.add_argument(
            "--yes",
            action="store_true",
            help="Confirm the reset",
        )

    def handle(self, *args, **options):
        if not options["yes"]:
            raise CommandError(
                f"Refusing to delete {usage_ledger.count()} ledger entries without --yes"
            )

        deleted = usage_ledger.reset()
        self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} ledger entries"))
