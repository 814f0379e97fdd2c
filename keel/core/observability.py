"""
Observability utilities for the generation pipeline.

Every pipeline stage logs at least start and end events with run_id, mode,
game_date, trigger_source, stage name and status.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Mapping

from .run_context import RunContext

logger = logging.getLogger("keel.pipeline")

Status = Literal["start", "success", "degraded", "failure"]


def log_pipeline_event(
    ctx: RunContext,
    stage: str,
    status: Status,
    extra: Mapping[str, Any] | None = None,
    error_summary: str | None = None,
) -> None:
    """
    Log a structured pipeline event.

    Every stage should log:
    - One "start" event at the beginning
    - One "success", "degraded", or "failure" event at the end

    The payload always includes run_id, mode, game_date and trigger_source
    from the RunContext, plus stage and status. "degraded" marks a stage
    that recovered from a collaborator failure (no trivia, no segmentation).

    Args:
        ctx: RunContext for this run
        stage: Pipeline stage (e.g., "select_candidate", "render_line_art")
        status: Current status
        extra: Optional additional fields to include in the log
        error_summary: Short error description (e.g., "UpstreamQueryError: HTTP 503")
    """
    payload: dict[str, Any] = {
        "run_id": str(ctx.run_id),
        "mode": ctx.mode,
        "game_date": ctx.game_date.isoformat(),
        "trigger_source": ctx.trigger_source,
        "stage": stage,
        "status": status,
    }

    if ctx.step:
        payload["step"] = ctx.step

    if error_summary:
        payload["error_summary"] = error_summary

    if extra:
        payload.update(extra)

    level = logging.WARNING if status in ("degraded", "failure") else logging.INFO
    logger.log(level, "pipeline_event", extra=payload)
