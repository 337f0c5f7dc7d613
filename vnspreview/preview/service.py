from __future__ import annotations

import logging
from typing import Callable, Optional

from ..config import PreviewConfig
from ..script.compiler import Compiler, CompilerOptions, JsonFileHandler
from ..script.errors import CompileError
from .debounce import IDebouncer, ThreadingDebouncer
from .driver import CursorDriver
from .notices import INoticeObserver, SilentNoticeObserver
from .presenter import IScenePresenter
from .project import ScriptProject
from .types import Cursor, EvaluationResult

logger = logging.getLogger(__name__)

CompilerFactory = Callable[[str, CompilerOptions], Compiler]


class SceneEvaluator:
    """Entry point: compile, run to the cursor and hand the result on.

    Every evaluation compiles a fresh story, so no state carries over from
    one request to the next.
    """

    def __init__(
        self,
        presenter: Optional[IScenePresenter] = None,
        *,
        config: Optional[PreviewConfig] = None,
        notice_observer: Optional[INoticeObserver] = None,
        debouncer: Optional[IDebouncer] = None,
        compiler_factory: CompilerFactory = Compiler,
    ) -> None:
        self.config = config or PreviewConfig()
        self.presenter = presenter
        self.notice_observer = notice_observer or SilentNoticeObserver()
        self.debouncer = debouncer or ThreadingDebouncer(self.config.debounce_ms)
        self.compiler_factory = compiler_factory
        self.driver = CursorDriver(self.config.max_steps)

    def evaluate(self, cursor: Cursor, project: Optional[ScriptProject]) -> EvaluationResult:
        if project is None or project.main_source is None:
            return EvaluationResult.cleared()
        if cursor.file_path and not project.contains(cursor.file_path):
            logger.debug("Cursor file %s is not part of the project", cursor.file_path)
            return EvaluationResult.cleared()

        options = CompilerOptions(project.main_path, JsonFileHandler(project.files))
        compiler = self.compiler_factory(project.main_source, options)
        try:
            story = compiler.compile()
        except CompileError as e:
            return EvaluationResult.error("\n".join(compiler.errors) or str(e))
        except Exception as e:
            logger.error("Compiler failed: %s", e, exc_info=True)
            return EvaluationResult.error(str(e) or type(e).__name__)

        self.notice_observer.attach(story)
        try:
            outcome = self.driver.run(story, cursor)
        except Exception as e:
            logger.error("Evaluation failed at cursor %s: %s", cursor, e, exc_info=True)
            return EvaluationResult.error(str(e) or type(e).__name__)
        return EvaluationResult.ok(outcome.variables)

    def present(self, result: EvaluationResult) -> None:
        if self.presenter is None:
            return
        if result.is_ok:
            self.presenter.display(result.variables)
        elif result.is_error:
            self.presenter.display_error(result.message)
        else:
            self.presenter.clear()

    def evaluate_and_present(self, cursor: Cursor, project: Optional[ScriptProject]) -> EvaluationResult:
        result = self.evaluate(cursor, project)
        self.present(result)
        return result

    def request(self, cursor: Cursor, project: Optional[ScriptProject]) -> None:
        """Debounced evaluation: only the latest request within the quiet interval runs."""
        if project is None or project.main_source is None:
            self.debouncer.cancel()
            self.present(EvaluationResult.cleared())
            return
        self.debouncer.schedule(lambda: self.evaluate_and_present(cursor, project))

    def cancel_pending(self) -> None:
        self.debouncer.cancel()
