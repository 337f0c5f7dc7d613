"""Cursor-synchronized story preview.

- position: does a debug location belong to / reach the cursor
- branching: which choice's branch contains the cursor
- driver: run a story until it reaches the cursor
- snapshot: capture named variables
- service: compile + run + present, with debouncing
"""

from __future__ import annotations

from .branching import StoryProbe, choose_branch_index, pick_branch, select_branch  # noqa: F401
from .debounce import IDebouncer, ThreadingDebouncer  # noqa: F401
from .driver import CursorDriver, DriveOutcome, run_to_cursor  # noqa: F401
from .notices import INoticeObserver, SilentNoticeObserver  # noqa: F401
from .position import arrived, matches, reached  # noqa: F401
from .presenter import ConsolePresenter, IScenePresenter  # noqa: F401
from .project import ScriptProject  # noqa: F401
from .service import SceneEvaluator  # noqa: F401
from .snapshot import coerce_value, snapshot_variables  # noqa: F401
from .types import Cursor, DebugLocation, EvaluationResult, VariableSnapshot  # noqa: F401
