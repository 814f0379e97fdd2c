"""
Game API Views.

Read-only endpoints for the client. Generation never happens in a request;
a missing record is a 404, not a trigger.

All responses are serialized from GameRecordDTO.
"""

import re
from datetime import date
from typing import Any

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET

from keel.core.modes import ALL_MODE_IDS, UnknownModeError

from .dto import GameRecordDTO
from .services import game_service

CACHE_CONTROL = "s-maxage=300, stale-while-revalidate"

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# =============================================================================
# ERROR ENVELOPE HELPER
# =============================================================================


def error_response(
    code: str,
    message: str,
    status: int = 400,
    details: dict[str, Any] | None = None,
) -> JsonResponse:
    """
    Create a standardized error response envelope.

    {
        "error": {
            "code": "not_found",
            "message": "Human-readable summary",
            "details": { ...optional extra fields... }
        }
    }
    """
    envelope: dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
        }
    }
    if details:
        envelope["error"]["details"] = details

    return JsonResponse(envelope, status=status)


def _game_response(mode: str, game_date: date | None) -> JsonResponse:
    try:
        dto: GameRecordDTO | None = game_service.get_game(mode, game_date)
    except UnknownModeError:
        return error_response(
            code="unknown_mode",
            message=f"Unknown game mode: {mode}",
            status=404,
            details={"field": "mode", "value": mode, "supported": ALL_MODE_IDS},
        )

    if dto is None:
        resolved = (game_date or game_service.today_utc()).isoformat()
        return error_response(
            code="not_found",
            message=f"No game found for {resolved}",
            status=404,
            details={"mode": mode, "date": resolved},
        )

    response = JsonResponse(dto.model_dump(mode="json", by_alias=True))
    response["Cache-Control"] = CACHE_CONTROL
    return response


# =============================================================================
# GAME ENDPOINTS
# =============================================================================


@require_GET
def healthcheck(request: HttpRequest) -> JsonResponse:
    """GET /health/"""
    return JsonResponse({
        "status": "ok",
        "service": "keel-backend",
    })


@require_GET
def get_today_game(request: HttpRequest, mode: str) -> JsonResponse:
    """
    GET /api/game/{mode}/today/

    Returns today's (UTC) puzzle for a mode.
    """
    return _game_response(mode, None)


@require_GET
def get_game_by_date(request: HttpRequest, mode: str, game_date: str) -> JsonResponse:
    """
    GET /api/game/{mode}/{YYYY-MM-DD}/

    Returns the puzzle for a specific date.
    """
    try:
        if not _ISO_DATE_RE.match(game_date):
            raise ValueError(game_date)
        parsed = date.fromisoformat(game_date)
    except ValueError:
        return error_response(
            code="invalid_date",
            message="Date must be YYYY-MM-DD",
            details={"field": "game_date", "value": game_date},
        )
    return _game_response(mode, parsed)
