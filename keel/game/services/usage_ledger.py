"""
Usage Ledger.

Durable record of vessels already featured. Reads never block generation:
a database error while listing degrades to an empty exclusion set, at the
cost of a possible repeat subject.
"""

from __future__ import annotations

import logging
from datetime import date

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from keel.game.models import UsedShip

logger = logging.getLogger(__name__)


def list_used_ids() -> set[str]:
    """All featured vessel ids, or an empty set if the ledger is unreadable."""
    try:
        return set(UsedShip.objects.values_list("wikidata_id", flat=True))
    except DatabaseError as e:
        logger.error(
            "Usage ledger read failed, continuing with empty exclusion set",
            extra={"error": str(e)},
        )
        return set()


def mark_used(wikidata_id: str, name: str, used_date: date | None = None) -> bool:
    """
    Record a vessel as featured.

    Idempotent: a second call for the same id leaves the ledger unchanged.

    Returns:
        True if a new entry was created, False if the id was already present
    """
    try:
        with transaction.atomic():
            _, created = UsedShip.objects.get_or_create(
                wikidata_id=wikidata_id,
                defaults={
                    "name": name,
                    "used_date": used_date or timezone.now().date(),
                },
            )
    except IntegrityError:
        # Concurrent insert of the same id
        created = False

    if created:
        logger.info("Marked as used", extra={"wikidata_id": wikidata_id, "ship_name": name})
    else:
        logger.info("Already marked as used", extra={"wikidata_id": wikidata_id})
    return created


def count() -> int:
    return UsedShip.objects.count()


def reset() -> int:
    """Delete every ledger entry. Administrative use only. Returns rows deleted."""
    deleted, _ = UsedShip.objects.all().delete()
    logger.warning("Usage ledger reset", extra={"deleted": deleted})
    return deleted
