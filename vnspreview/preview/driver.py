from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from .branching import choose_branch_index
from .position import arrived
from .snapshot import snapshot_variables
from .types import Cursor, DebugLocation, VariableSnapshot

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 10000

REACHED = "reached"
EXHAUSTED = "exhausted"
STEP_LIMIT = "step_limit"


@dataclass(frozen=True)
class DriveOutcome:
    variables: VariableSnapshot
    steps: int
    reason: str


class CursorDriver:
    """Runs a story from its current position until it reaches the cursor.

    Each iteration either advances one unit of content or resolves one choice
    point. The run stops when a step lands at or past the cursor line in the
    cursor's file, when the story has nothing left to do, or after
    ``max_steps`` iterations; in the last case the most recent snapshot is
    returned as a best-effort result.
    """

    def __init__(self, max_steps: int = DEFAULT_MAX_STEPS,
                 branch_selector: Callable[[Any, Cursor], int] = choose_branch_index) -> None:
        if max_steps < 1:
            raise ValueError("max_steps must be positive")
        self.max_steps = int(max_steps)
        self.branch_selector = branch_selector

    def run(self, story: Any, cursor: Cursor) -> DriveOutcome:
        steps = 0
        fallback = snapshot_variables(story)
        while steps < self.max_steps:
            steps += 1
            if story.can_continue:
                story.continue_()
                location = DebugLocation.from_metadata(story.current_debug_metadata)
                if arrived(location, cursor):
                    # the step's own assignments have applied
                    return self._done(snapshot_variables(story), steps, REACHED, cursor)
                fallback = snapshot_variables(story)
            elif story.current_choices:
                story.choose_choice_index(self.branch_selector(story, cursor))
            else:
                return self._done(snapshot_variables(story), steps, EXHAUSTED, cursor)
        return self._done(fallback, steps, STEP_LIMIT, cursor)

    def _done(self, variables: VariableSnapshot, steps: int, reason: str, cursor: Cursor) -> DriveOutcome:
        logger.debug("Stopped after %d steps (%s) for cursor %s", steps, reason, cursor)
        return DriveOutcome(variables, steps, reason)


def run_to_cursor(story: Any, cursor: Cursor, max_steps: int = DEFAULT_MAX_STEPS) -> VariableSnapshot:
    return CursorDriver(max_steps).run(story, cursor).variables
