"""
Management command to export the answer-autocomplete ship list.

Usage:
    python manage.py export_ship_list --output public/ship-list.json
    python manage.py export_ship_list --mode ww2
"""

from __future__ import annotations

import json
from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from keel.core import flags
from keel.core.modes import UnknownModeError, get_mode
from keel.game.services.ship_list_service import build_ship_list
from keel.integrations.wikidata.client import UpstreamQueryError, WikidataClient


class Command(BaseCommand):
    help = "Export every eligible vessel name for a mode as JSON"

    def add_arguments(self, parser):
        parser.add_argument("--mode", default="main", help="Game mode (default: main)")
        parser.add_argument(
            "--output",
            default=None,
            help="Output file path (default: print to stdout)",
        )

    def handle(self, *args, **options):
        try:
            mode = get_mode(options["mode"])
        except UnknownModeError as e:
            raise CommandError(str(e))

        client = WikidataClient(
            user_agent=flags.get_user_agent(),
            endpoint=settings.WIKIDATA_SPARQL_ENDPOINT,
            timeout_s=flags.get_http_timeout_s(),
        )

        try:
            payload = build_ship_list(client, mode)
        except UpstreamQueryError as e:
            raise CommandError(f"Ship list export failed: {e}")

        text = json.dumps(payload, indent=2, ensure_ascii=False)
        output = options["output"]
        if not output:
            self.stdout.write(text)
            return

        path = Path(output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

        self.stdout.write(f"  Written to: {path}")
        self.stdout.write(f"  Ships: {payload['count']}")
        for ship in payload["ships"][:10]:
            self.stdout.write(f"  - {ship['name']}")
        if payload["count"] > 10:
            self.stdout.write(f"  ... and {payload['count'] - 10} more")
        self.stdout.write(self.style.SUCCESS("Export complete!"))
