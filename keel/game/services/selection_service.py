"""
Candidate Selector.

Picks one eligible, previously unused vessel uniformly at random without
materializing the eligible set:

1. COUNT the eligible set (0 -> None, a terminal outcome)
2. Draw offset = uniform int in [0, count)
3. Fetch the row-group at that offset (label-sorted, so a fixed offset
   always addresses the same vessel)
4. Empty result (count changed in between) -> draw once more; a second
   empty result -> None

Exactly one retry. Upstream errors propagate.
"""

from __future__ import annotations

import logging
import random
from typing import Iterable, Protocol

from keel.core.modes import ModeConfig
from keel.game.services import result_parser
from keel.game.subject import SubjectRecord
from keel.integrations.wikidata.client import Binding
from keel.integrations.wikidata.queries import (
    build_detail_query,
    build_eligibility_query,
)

logger = logging.getLogger(__name__)

MAX_DETAIL_ATTEMPTS = 2


class NoEligibleSubjectsError(Exception):
    """
    Raised by callers when selection returns None.

    Signals an exhausted pool (or a lost race on both draws), not a
    transient upstream fault.
    """

    def __init__(self, mode_id: str, excluded_count: int = 0):
        self.mode_id = mode_id
        self.excluded_count = excluded_count
        super().__init__(
            f"No eligible subjects for mode {mode_id!r} "
            f"({excluded_count} excluded); reset the usage ledger or widen the mode"
        )


class GraphClient(Protocol):
    def execute(self, query: str) -> list[Binding]:
        ...

    def count(self, query: str) -> int:
        ...


class CandidateSelector:
    """Uniform count-then-offset selection over one mode's eligible set."""

    def __init__(self, client: GraphClient, mode: ModeConfig, rng: random.Random | None = None):
        self.client = client
        self.mode = mode
        self.rng = rng or random.Random()

    def count_eligible(self, exclude_ids: Iterable[str]) -> int:
        return self.client.count(build_eligibility_query(self.mode, exclude_ids))

    def fetch_at_offset(self, exclude_ids: Iterable[str], offset: int) -> list[Binding]:
        return self.client.execute(build_detail_query(self.mode, exclude_ids, offset))

    def select_candidate(self, exclude_ids: Iterable[str]) -> SubjectRecord | None:
        """
        Select one eligible subject not in exclude_ids.

        Returns:
            SubjectRecord, or None when nothing is eligible or both
            offset draws come back empty

        Raises:
            UpstreamQueryError: If any graph query fails
        """
        exclude = sorted(set(exclude_ids))

        count = self.count_eligible(exclude)
        logger.info(
            "Eligible subjects counted",
            extra={"mode": self.mode.id, "count": count, "excluded": len(exclude)},
        )
        if count <= 0:
            return None

        for attempt in range(1, MAX_DETAIL_ATTEMPTS + 1):
            offset = self.rng.randrange(count)
            rows = self.fetch_at_offset(exclude, offset)
            if rows:
                subject = result_parser.parse(rows)
                logger.info(
                    "Subject selected",
                    extra={
                        "mode": self.mode.id,
                        "offset": offset,
                        "attempt": attempt,
                        "subject_id": subject.id,
                        "rows": len(rows),
                    },
                )
                return subject
            logger.warning(
                "No subject at offset",
                extra={"mode": self.mode.id, "offset": offset, "count": count, "attempt": attempt},
            )

        return None
