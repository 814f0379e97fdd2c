"""
RunContext, pipeline logging, mode registry and flag reader tests.
"""

import dataclasses
import logging
from datetime import date
from uuid import UUID

import pytest

from keel.core import flags
from keel.core.modes import ALL_MODE_IDS, GAME_MODES, UnknownModeError, get_mode
from keel.core.observability import log_pipeline_event
from keel.core.run_context import RunContext, create_run_context


# =============================================================================
# RUNCONTEXT BASICS TESTS
# =============================================================================


class TestRunContextBasics:
    """Tests for RunContext construction and field preservation."""

    def test_create_run_context_preserves_fields(self):
        """create_run_context preserves all provided fields."""
        ctx = create_run_context(mode="ww2", game_date=date(2025, 6, 1), trigger_source="cron")

        assert ctx.mode == "ww2"
        assert ctx.game_date == date(2025, 6, 1)
        assert ctx.trigger_source == "cron"
        assert ctx.step is None
        assert isinstance(ctx.run_id, UUID)

    def test_run_ids_unique(self):
        """Each RunContext gets a unique run_id."""
        a = create_run_context(mode="main", game_date=date(2025, 6, 1), trigger_source="manual")
        b = create_run_context(mode="main", game_date=date(2025, 6, 1), trigger_source="manual")
        assert a.run_id != b.run_id

    def test_with_step_keeps_run_id(self):
        """with_step returns a new context with the same run_id."""
        ctx = create_run_context(mode="main", game_date=date(2025, 6, 1), trigger_source="test")
        stepped = ctx.with_step("select_candidate")

        assert stepped.run_id == ctx.run_id
        assert stepped.step == "select_candidate"
        assert ctx.step is None

    def test_run_context_is_frozen(self):
        """RunContext is immutable (frozen dataclass)."""
        ctx = create_run_context(mode="main", game_date=date(2025, 6, 1), trigger_source="test")
        assert dataclasses.is_dataclass(RunContext)
        with pytest.raises(dataclasses.FrozenInstanceError):
            ctx.mode = "ww2"  # type: ignore


# =============================================================================
# LOGGING BEHAVIOR TESTS
# =============================================================================


class MockLogHandler(logging.Handler):
    """A custom handler to capture log records for testing."""

    def __init__(self):
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def pipeline_log_handler():
    """Capture records from the keel.pipeline logger."""
    handler = MockLogHandler()
    handler.setLevel(logging.INFO)

    pipeline_logger = logging.getLogger("keel.pipeline")
    pipeline_logger.addHandler(handler)
    previous_level = pipeline_logger.level
    pipeline_logger.setLevel(logging.INFO)

    yield handler

    pipeline_logger.removeHandler(handler)
    pipeline_logger.setLevel(previous_level)


class TestPipelineEvents:
    """Tests for log_pipeline_event."""

    def test_payload_fields(self, pipeline_log_handler):
        ctx = create_run_context(mode="main", game_date=date(2025, 6, 1), trigger_source="cron")

        log_pipeline_event(ctx.with_step("render"), "render_line_art", "start", extra={"width": 800})

        record = pipeline_log_handler.records[-1]
        assert record.levelno == logging.INFO
        assert record.run_id == str(ctx.run_id)
        assert record.mode == "main"
        assert record.game_date == "2025-06-01"
        assert record.trigger_source == "cron"
        assert record.stage == "render_line_art"
        assert record.status == "start"
        assert record.step == "render"
        assert record.width == 800

    def test_failure_logged_at_warning(self, pipeline_log_handler):
        ctx = create_run_context(mode="main", game_date=date(2025, 6, 1), trigger_source="test")

        log_pipeline_event(ctx, "generate", "failure", error_summary="UpstreamQueryError: HTTP 503")

        record = pipeline_log_handler.records[-1]
        assert record.levelno == logging.WARNING
        assert record.error_summary == "UpstreamQueryError: HTTP 503"


# =============================================================================
# MODES AND FLAGS
# =============================================================================


class TestModes:
    """Tests for the mode registry."""

    def test_registry_matches_enum(self):
        assert set(GAME_MODES) == set(ALL_MODE_IDS)

    def test_main_requires_conflict(self):
        main = get_mode("main")
        assert main.require_conflict is True
        assert main.year_min == 1980
        assert "Q2607934" in main.ship_types

    def test_other_modes_require_dimensions(self):
        for mode_id in ALL_MODE_IDS:
            if mode_id != "main":
                assert get_mode(mode_id).require_dimensions, mode_id

    def test_unknown_mode(self):
        with pytest.raises(UnknownModeError) as exc_info:
            get_mode("galleon")
        assert exc_info.value.mode_id == "galleon"
        assert str(exc_info.value) == "Unknown game mode: 'galleon'"


class TestFlags:
    """Tests for flag readers."""

    def test_segmentation_disabled_in_tests(self):
        assert flags.get_segmentation_backend() == "none"

    def test_invalid_backend_falls_back_to_none(self, settings):
        settings.KEEL_SEGMENTATION_BACKEND = "gpu-cluster"
        assert flags.get_segmentation_backend() == "none"

    def test_backend_normalized(self, settings):
        settings.KEEL_SEGMENTATION_BACKEND = " Remote "
        assert flags.get_segmentation_backend() == "remote"

    def test_invalid_timeout_uses_default(self, settings):
        settings.KEEL_HTTP_TIMEOUT_S = "soon"
        assert flags.get_http_timeout_s() == flags.DEFAULT_TIMEOUT_S

    def test_timeout_parsed(self, settings):
        settings.KEEL_HTTP_TIMEOUT_S = "12.5"
        assert flags.get_http_timeout_s() == 12.5

    def test_default_user_agent(self, settings):
        settings.KEEL_USER_AGENT = ""
        assert "KeelGame/1.0" in flags.get_user_agent()

    def test_lineart_width(self, settings):
        settings.KEEL_LINEART_MAX_WIDTH = "640"
        assert flags.get_lineart_max_width() == 640
        settings.KEEL_LINEART_MAX_WIDTH = "-5"
        assert flags.get_lineart_max_width() == flags.DEFAULT_LINEART_MAX_WIDTH
