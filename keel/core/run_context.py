"""
Run Context for daily generation runs.

RunContext is an in-memory context object. It is NOT persisted.

It carries:
- run_id: Unique identifier for a single generation run
- mode: Which game mode is being generated
- game_date: The calendar date the puzzle is for
- trigger_source: What initiated the run (cron, manual, test)
- step: Optional current pipeline stage
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Literal
from uuid import UUID, uuid4


TriggerSource = Literal["cron", "manual", "test"]


@dataclass(frozen=True)
class RunContext:
    """
    In-memory context for one generation run.

    It must NOT be saved to the database or have a .save() method.

    Attributes:
        mode: Game mode id
        game_date: Date the generated record is keyed by
        trigger_source: What initiated the run
        run_id: Unique UUID for this run (auto-generated if not provided)
        step: Optional current pipeline stage
    """

    mode: str
    game_date: date
    trigger_source: TriggerSource
    run_id: UUID = field(default_factory=uuid4)
    step: str | None = None

    def with_step(self, step: str) -> "RunContext":
        """
        Create a new RunContext with an updated step.

        Since RunContext is frozen, this returns a new instance.
        """
        return RunContext(
            run_id=self.run_id,
            mode=self.mode,
            game_date=self.game_date,
            trigger_source=self.trigger_source,
            step=step,
        )


def create_run_context(
    mode: str,
    game_date: date,
    trigger_source: TriggerSource,
    run_id: UUID | None = None,
    step: str | None = None,
) -> RunContext:
    """
    Factory function to create a RunContext.

    Generates a run_id if not provided.
    """
    return RunContext(
        run_id=run_id or uuid4(),
        mode=mode,
        game_date=game_date,
        trigger_source=trigger_source,
        step=step,
    )
