"""
Game Service.

Client read path: resolves a mode and date to the stored puzzle.
"""

from __future__ import annotations

from datetime import date

from django.utils import timezone

from keel.core.modes import get_mode
from keel.game.dto import GameRecordDTO
from keel.game.services import content_store


def today_utc() -> date:
    return timezone.now().date()


def get_game(mode_id: str, game_date: date | None = None) -> GameRecordDTO | None:
    """
    Get the puzzle for a mode and date (today, UTC, by default).

    Raises:
        UnknownModeError: If mode_id is not registered
    """
    mode = get_mode(mode_id)
    return content_store.get(game_date or today_utc(), mode.id)
