"""
Content Store.

Persists finished daily records keyed by (game_date, mode). Writes are
upserts: regenerating a date overwrites the existing row.
"""

from __future__ import annotations

import logging
from datetime import date

from keel.game.dto import (
    ClueSetDTO,
    ContextClueDTO,
    GameRecordDTO,
    ShipIdentityDTO,
    SpecsClueDTO,
)
from keel.game.models import GameRecord

logger = logging.getLogger(__name__)


def _to_fields(record: GameRecordDTO) -> dict:
    clues = record.clues
    return {
        "ship_id": record.ship.id,
        "ship_name": record.ship.name,
        "ship_aliases": list(record.ship.aliases),
        "silhouette": record.silhouette,
        "clues_specs_class": clues.specs.class_name,
        "clues_specs_displacement": clues.specs.displacement,
        "clues_specs_length": clues.specs.length,
        "clues_specs_commissioned": clues.specs.commissioned,
        "clues_context_nation": clues.context.nation,
        "clues_context_conflicts": list(clues.context.conflicts),
        "clues_context_status": clues.context.status,
        "clues_trivia": clues.trivia,
        "clues_photo": clues.photo,
    }


def to_dto(row: GameRecord) -> GameRecordDTO:
    return GameRecordDTO(
        date=row.game_date,
        mode=row.mode,
        ship=ShipIdentityDTO(id=row.ship_id, name=row.ship_name, aliases=row.ship_aliases or []),
        silhouette=row.silhouette,
        clues=ClueSetDTO(
            specs=SpecsClueDTO(
                class_name=row.clues_specs_class,
                displacement=row.clues_specs_displacement,
                length=row.clues_specs_length,
                commissioned=row.clues_specs_commissioned,
            ),
            context=ContextClueDTO(
                nation=row.clues_context_nation,
                conflicts=row.clues_context_conflicts or [],
                status=row.clues_context_status,
            ),
            trivia=row.clues_trivia,
            photo=row.clues_photo,
        ),
    )


def upsert(game_date: date, mode: str, record: GameRecordDTO) -> GameRecord:
    """
    Create or overwrite the record for (game_date, mode).

    Raises:
        DatabaseError: Persistence failures propagate to the caller
    """
    row, created = GameRecord.objects.update_or_create(
        game_date=game_date,
        mode=mode,
        defaults=_to_fields(record),
    )
    logger.info(
        "Game record %s",
        "created" if created else "updated",
        extra={"game_date": game_date.isoformat(), "mode": mode, "ship_id": record.ship.id},
    )
    return row


def get(game_date: date, mode: str) -> GameRecordDTO | None:
    row = GameRecord.objects.filter(game_date=game_date, mode=mode).first()
    return to_dto(row) if row is not None else None
