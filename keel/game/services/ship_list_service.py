"""
Ship List Service.

Pages through a mode's eligible set to build the answer-autocomplete list:
[{"id": "Q123", "name": "USS Example"}, ...] sorted by name.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from django.utils import timezone

from keel.core.modes import ModeConfig
from keel.game.services.result_parser import extract_entity_id
from keel.game.services.selection_service import GraphClient
from keel.integrations.wikidata.queries import build_name_list_query

logger = logging.getLogger(__name__)

BATCH_SIZE = 1000
SAFETY_LIMIT = 10000
PAGE_DELAY_S = 0.5


def fetch_ship_names(
    client: GraphClient,
    mode: ModeConfig,
    batch_size: int = BATCH_SIZE,
    safety_limit: int = SAFETY_LIMIT,
    page_delay_s: float = PAGE_DELAY_S,
    sleep: Callable[[float], None] = time.sleep,
) -> list[dict[str, str]]:
    """
    Fetch every (id, name) in the mode's eligible set, deduplicated by id.

    Stops on an empty or short page, or after safety_limit rows have been
    requested. Sleeps page_delay_s between pages to stay polite to the
    public endpoint.

    Raises:
        UpstreamQueryError: If any page fails
    """
    ships: dict[str, str] = {}
    offset = 0

    while offset < safety_limit:
        rows = client.execute(build_name_list_query(mode, batch_size, offset))
        logger.info("Ship list page fetched", extra={"mode": mode.id, "offset": offset, "rows": len(rows)})
        for row in rows:
            ship_uri = row.get("ship", {}).get("value")
            label = row.get("label", {}).get("value")
            if not ship_uri or not label:
                continue
            ships.setdefault(extract_entity_id(ship_uri), label)

        if len(rows) < batch_size:
            break
        offset += batch_size
        if offset >= safety_limit:
            logger.warning("Ship list safety limit reached", extra={"mode": mode.id, "limit": safety_limit})
            break
        sleep(page_delay_s)

    entries = [{"id": ship_id, "name": name} for ship_id, name in ships.items()]
    entries.sort(key=lambda entry: (entry["name"].casefold(), entry["id"]))
    return entries


def build_ship_list(client: GraphClient, mode: ModeConfig, **kwargs) -> dict:
    """Ship list payload as served to the client."""
    ships = fetch_ship_names(client, mode, **kwargs)
    return {
        "generatedAt": timezone.now().isoformat(),
        "mode": mode.id,
        "count": len(ships),
        "ships": ships,
    }
