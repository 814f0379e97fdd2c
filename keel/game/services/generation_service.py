"""
Daily Generation Service.

Runs the full pipeline for one (mode, game_date):

    ledger read -> candidate selection -> [clue synthesis || line-art render]
    -> record assembly -> content-store upsert -> ledger mark

Clue synthesis and rendering are independent once the subject is known and
run on a two-worker thread pool. Every stage logs start and end pipeline
events; fatal failures are logged and re-raised, nothing is persisted.
"""

from __future__ import annotations

import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from uuid import UUID

import requests
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from keel.core import flags
from keel.core.modes import get_mode
from keel.core.observability import log_pipeline_event
from keel.core.run_context import RunContext, TriggerSource, create_run_context
from keel.game.dto import GameRecordDTO, ShipIdentityDTO
from keel.game.services import content_store, usage_ledger
from keel.game.services.clues_service import ClueSynthesizer, SummaryClient, build_aliases
from keel.game.services.selection_service import (
    CandidateSelector,
    GraphClient,
    NoEligibleSubjectsError,
)
from keel.imaging.lineart import LineArtConfig, render_line_art
from keel.integrations.segmentation.client import BackgroundRemover, build_background_remover
from keel.integrations.wikidata.client import WikidataClient
from keel.integrations.wikipedia.client import WikipediaClient

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    run_id: UUID
    record: GameRecordDTO
    excluded_count: int
    newly_marked: bool
    duration_ms: int


@dataclass
class PipelineClients:
    """Outbound collaborators for one run. Tests pass fakes."""

    graph_client: GraphClient
    summary_client: SummaryClient | None
    background_remover: BackgroundRemover | None
    image_session: requests.Session | None = None

    @classmethod
    def from_settings(cls) -> "PipelineClients":
        user_agent = flags.get_user_agent()
        timeout_s = flags.get_http_timeout_s()
        api_url, api_key = flags.get_segmentation_api_config()
        return cls(
            graph_client=WikidataClient(
                user_agent=user_agent,
                endpoint=settings.WIKIDATA_SPARQL_ENDPOINT,
                timeout_s=timeout_s,
            ),
            summary_client=WikipediaClient(
                user_agent=user_agent,
                base_url=settings.WIKIPEDIA_SUMMARY_BASE_URL,
                timeout_s=timeout_s,
            ),
            background_remover=build_background_remover(
                flags.get_segmentation_backend(),
                api_url=api_url,
                api_key=api_key,
                timeout_s=timeout_s,
            ),
        )


def _error_summary(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"[:200]


def generate_daily_game(
    mode_id: str,
    game_date: date | None = None,
    ctx: RunContext | None = None,
    *,
    clients: PipelineClients | None = None,
    rng: random.Random | None = None,
    lineart_config: LineArtConfig | None = None,
    trigger_source: TriggerSource = "manual",
) -> GenerationResult:
    """
    Generate and persist the puzzle for one mode and date.

    Args:
        mode_id: Game mode id
        game_date: Date the record is keyed by (defaults to today, UTC)
        ctx: Optional RunContext; built from mode/date/trigger_source if None
        clients: Outbound collaborators (built from settings if None)
        rng: Random source for the offset draw
        lineart_config: Rendering parameters (max width from settings if None)
        trigger_source: Recorded on the RunContext when ctx is None

    Returns:
        GenerationResult with the persisted record

    Raises:
        UnknownModeError: mode_id is not registered
        NoEligibleSubjectsError: Nothing left to select
        UpstreamQueryError: Graph service failed
        LineArtError: Photograph could not be downloaded or decoded
        DatabaseError: Persistence failed
    """
    mode = get_mode(mode_id)
    game_date = game_date or timezone.now().date()
    if ctx is None:
        ctx = create_run_context(mode=mode.id, game_date=game_date, trigger_source=trigger_source)
    clients = clients or PipelineClients.from_settings()
    lineart_config = lineart_config or LineArtConfig(max_width=flags.get_lineart_max_width())

    run_start = time.monotonic()
    log_pipeline_event(ctx, "generate", "start")

    try:
        # 1. Ledger
        used_ids = usage_ledger.list_used_ids()
        log_pipeline_event(ctx, "read_ledger", "success", extra={"excluded_count": len(used_ids)})

        # 2. Selection
        select_ctx = ctx.with_step("select_candidate")
        log_pipeline_event(select_ctx, "select_candidate", "start")
        selector = CandidateSelector(clients.graph_client, mode, rng=rng)
        subject = selector.select_candidate(used_ids)
        if subject is None:
            raise NoEligibleSubjectsError(mode.id, excluded_count=len(used_ids))
        log_pipeline_event(
            select_ctx,
            "select_candidate",
            "success",
            extra={"subject_id": subject.id, "subject_name": subject.name},
        )

        # 3. Clues and line art, concurrently
        synthesizer = ClueSynthesizer(clients.summary_client)
        log_pipeline_event(ctx.with_step("build_artifacts"), "build_artifacts", "start")
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="keel-gen") as pool:
            clues_future = pool.submit(synthesizer.synthesize, subject)
            image_future = pool.submit(
                render_line_art,
                subject.image_url,
                config=lineart_config,
                remover=clients.background_remover,
                session=clients.image_session,
                timeout_s=flags.get_http_timeout_s(),
                user_agent=flags.get_user_agent(),
            )
            clues = clues_future.result()
            line_art = image_future.result()

        artifacts_status = "success" if line_art.segmented else "degraded"
        log_pipeline_event(
            ctx.with_step("build_artifacts"),
            "build_artifacts",
            artifacts_status,
            extra={
                "has_trivia": clues.trivia is not None,
                "segmentation_enabled": clients.background_remover is not None,
                "segmented": line_art.segmented,
            },
        )

        # 4. Assemble
        record = GameRecordDTO(
            date=game_date,
            mode=mode.id,
            ship=ShipIdentityDTO(id=subject.id, name=subject.name, aliases=build_aliases(subject)),
            silhouette=line_art.data_uri,
            clues=clues,
        )

        # 5. Persist, then mark used
        with transaction.atomic():
            content_store.upsert(game_date, mode.id, record)
            newly_marked = usage_ledger.mark_used(subject.id, subject.name, used_date=game_date)
        log_pipeline_event(ctx.with_step("persist"), "persist", "success", extra={"newly_marked": newly_marked})

    except Exception as e:
        log_pipeline_event(ctx, "generate", "failure", error_summary=_error_summary(e))
        raise

    duration_ms = int((time.monotonic() - run_start) * 1000)
    log_pipeline_event(ctx, "generate", "success", extra={"duration_ms": duration_ms, "subject_id": subject.id})

    return GenerationResult(
        run_id=ctx.run_id,
        record=record,
        excluded_count=len(used_ids),
        newly_marked=newly_marked,
        duration_ms=duration_ms,
    )
