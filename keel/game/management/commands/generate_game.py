"""
Management command to generate the daily puzzle.

Usage:
    python manage.py generate_game
    python manage.py generate_game --mode ww2
    python manage.py generate_game --all-modes --date 2025-06-01
    python manage.py generate_game --trigger cron
"""

from __future__ import annotations

import logging
from datetime import date

from django.core.management.base import BaseCommand, CommandError

from keel.core.enums import TriggerSource
from keel.core.modes import ALL_MODE_IDS, UnknownModeError
from keel.game.services.generation_service import generate_daily_game
from keel.game.services.selection_service import NoEligibleSubjectsError
from keel.imaging.lineart import LineArtError
from keel.integrations.wikidata.client import UpstreamQueryError

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Select a vessel, build clues and line art, and store the daily puzzle"

    def add_arguments(self, parser):
        parser.add_argument(
            "--mode",
            default="main",
            help=f"Game mode ({', '.join(ALL_MODE_IDS)}). Default: main",
        )
        parser.add_argument(
            "--all-modes",
            action="store_true",
            help="Generate every mode (overrides --mode)",
        )
        parser.add_argument(
            "--date",
            default=None,
            help="Game date as YYYY-MM-DD (default: today, UTC)",
        )
        parser.add_argument(
            "--trigger",
            default=TriggerSource.MANUAL,
            choices=[choice.value for choice in TriggerSource],
            help="Trigger source recorded on the run (default: manual)",
        )

    def handle(self, *args, **options):
        game_date = None
        if options["date"]:
            try:
                game_date = date.fromisoformat(options["date"])
            except ValueError:
                raise CommandError(f"Invalid --date {options['date']!r}, expected YYYY-MM-DD")

        modes = ALL_MODE_IDS if options["all_modes"] else [options["mode"]]
        failures = []

        for mode_id in modes:
            self.stdout.write(f"Generating {mode_id}...")
            try:
                result = generate_daily_game(
                    mode_id,
                    game_date=game_date,
                    trigger_source=options["trigger"],
                )
            except UnknownModeError as e:
                raise CommandError(str(e))
            except NoEligibleSubjectsError as e:
                failures.append(mode_id)
                self.stderr.write(self.style.ERROR(f"  {e}"))
                continue
            except (UpstreamQueryError, LineArtError) as e:
                failures.append(mode_id)
                self.stderr.write(self.style.ERROR(f"  {type(e).__name__}: {e}"))
                continue

            record = result.record
            self.stdout.write(f"  Ship: {record.ship.name} ({record.ship.id})")
            self.stdout.write(f"  Date: {record.date.isoformat()}")
            self.stdout.write(f"  Nation: {record.clues.context.nation}")
            self.stdout.write(f"  Class: {record.clues.specs.class_name or 'N/A'}")
            self.stdout.write(f"  Trivia: {'yes' if record.clues.trivia else 'N/A'}")
            self.stdout.write(f"  Silhouette: {len(record.silhouette) // 1024}KB")
            self.stdout.write(f"  Run: {result.run_id} ({result.duration_ms}ms)")

        if failures:
            raise CommandError(f"Generation failed for: {', '.join(failures)}")

        self.stdout.write(self.style.SUCCESS("Generation complete!"))
