from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QTimer
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QFileDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QSplitter,
    QTabWidget,
)

from editor.core.parser_bridge import validate_files, validate_text
from editor.core.project import Project
from editor.core.qt_debouncer import QtDebouncer
from editor.ui.problems_panel import ProblemsPanel
from editor.ui.scene_panel import ScenePanel
from editor.ui.script_editor import ScriptEditor
from vnspreview.assets.registry import AssetRegistry
from vnspreview.config import PreviewConfig
from vnspreview.preview.project import ScriptProject
from vnspreview.preview.service import SceneEvaluator
from vnspreview.preview.types import Cursor

logger = logging.getLogger(__name__)

TITLE = "VNS Scene Preview"


class MainWindow(QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle(TITLE)
        self.resize(1200, 760)

        self.tabs = QTabWidget(self)
        self.setCentralWidget(self.tabs)
        self.tabs.addTab(QLabel("Welcome. Use File > Open Project or Open Script."), "Home")

        self._current_project: Optional[Project] = None
        self._problems = ProblemsPanel()
        self._editor = ScriptEditor()
        self._scene = ScenePanel()
        self._debouncer = QtDebouncer(parent=self)
        self._evaluator = self._make_evaluator(PreviewConfig())

        self._editor_splitter = QSplitter()
        self._editor_splitter.addWidget(self._editor)
        self._editor_splitter.addWidget(self._scene)
        self._editor_splitter.setStretchFactor(0, 3)
        self._editor_splitter.setStretchFactor(1, 2)
        self.tabs.addTab(self._editor_splitter, "Editor")

        # Debounced validation; preview debouncing lives in the evaluator
        self._validate_timer = QTimer(self)
        self._validate_timer.setSingleShot(True)
        self._validate_timer.timeout.connect(self._validate_current_script)
        self._editor.textChanged.connect(self._on_editor_text_changed)
        self._editor.cursorLineChanged.connect(self._request_preview)
        self._problems.navigateRequested.connect(self._on_problem_navigate)

        self._build_menu()

    def _make_evaluator(self, cfg: PreviewConfig) -> SceneEvaluator:
        registry = None
        if cfg.registry_path:
            root = self._current_project.root if self._current_project else Path.cwd()
            assets_root = root / cfg.assets_root if cfg.assets_root else None
            registry = AssetRegistry(root / cfg.registry_path, assets_root)
        self._scene.registry = registry
        self._scene.layers = dict(cfg.layers)
        self._debouncer.set_interval(cfg.debounce_ms)
        return SceneEvaluator(self._scene, config=cfg, debouncer=self._debouncer)  # type: ignore[arg-type]

    def _build_menu(self) -> None:
        menu = self.menuBar()
        file_menu = menu.addMenu("File")

        open_action = QAction("Open Project...", self)
        open_action.triggered.connect(self._open_project)
        file_menu.addAction(open_action)

        new_action = QAction("New Project", self)
        new_action.triggered.connect(self._new_project)
        file_menu.addAction(new_action)

        open_script_action = QAction("Open Script...", self)
        open_script_action.triggered.connect(self._open_script)
        file_menu.addAction(open_script_action)

        save_script_action = QAction("Save Script", self)
        save_script_action.triggered.connect(self._save_script)
        file_menu.addAction(save_script_action)

        validate_action = QAction("Validate", self)
        validate_action.triggered.connect(self._validate_project)
        file_menu.addAction(validate_action)

        view_menu = menu.addMenu("View")
        toggle_vars = QAction("Toggle Variables", self)
        toggle_vars.triggered.connect(self._scene.toggle_variables)
        view_menu.addAction(toggle_vars)

        reload_assets = QAction("Reload Assets", self)
        reload_assets.triggered.connect(self._reload_assets)
        view_menu.addAction(reload_assets)

    # --- project/script handling ---
    def _new_project(self) -> None:
        path_str, _ = QFileDialog.getSaveFileName(
            self, "Create Project", str(Path.cwd() / "story.higanproj"), "Higan Project (*.higanproj)"
        )
        if not path_str:
            return
        project = Project.create(Path(path_str))
        self._open_project_path(project.path)

    def _open_project(self) -> None:
        path_str, _ = QFileDialog.getOpenFileName(
            self, "Open Project", str(Path.cwd()), "Higan Project (*.higanproj)"
        )
        if not path_str:
            return
        self._open_project_path(Path(path_str))

    def _open_project_path(self, path: Path) -> None:
        try:
            project = Project.load(path)
        except Exception as e:  # noqa: BLE001
            QMessageBox.critical(self, "Failed to open", str(e))
            return
        self._evaluator.cancel_pending()
        self._current_project = project
        self._evaluator = self._make_evaluator(project.preview_config)
        main = project.main_script
        if main and (project.root / main).exists():
            self._load_script(project.root / main)
        if self.tabs.indexOf(self._problems) == -1:
            self.tabs.addTab(self._problems, "Problems")
        self._update_title()

    def _open_script(self) -> None:
        path_str, _ = QFileDialog.getOpenFileName(
            self, "Open Script", str(Path.cwd()), "VNS Script (*.vns)"
        )
        if not path_str:
            return
        self._load_script(Path(path_str))

    def _load_script(self, path: Path) -> None:
        self._editor.load_file(path)
        idx = self.tabs.indexOf(self._editor_splitter)
        if idx != -1:
            self.tabs.setCurrentIndex(idx)
        self._update_title()
        self._schedule_validate()
        self._request_preview(self._editor.current_line())

    def _save_script(self) -> None:
        if not self._editor.path:
            QMessageBox.information(self, "No script", "Open a script first.")
            return
        try:
            self._editor.path.write_text(self._editor.toPlainText(), encoding="utf-8")
        except Exception as e:  # noqa: BLE001
            QMessageBox.critical(self, "Save failed", str(e))
        self._update_title()

    def _reload_assets(self) -> None:
        if self._scene.registry is not None:
            self._scene.registry.reload()
        self._request_preview(self._editor.current_line())

    # --- preview ---
    def _active_sources(self) -> tuple[Optional[ScriptProject], Optional[str]]:
        path = self._editor.path
        text = self._editor.toPlainText()
        project = self._current_project
        if project is not None:
            rel = project.relative_path(path) if path else None
            buffers = {rel: text} if rel else {}
            return project.script_project(buffers), rel
        if path is None:
            return None, None
        # a lone script is its own project
        return ScriptProject(path.name, {path.name: text}), path.name

    def _request_preview(self, line: int) -> None:
        sources, cursor_file = self._active_sources()
        self._evaluator.request(Cursor(max(1, int(line)), cursor_file), sources)

    # --- validation ---
    def _on_editor_text_changed(self) -> None:
        self._schedule_validate()
        self._request_preview(self._editor.current_line())

    def _schedule_validate(self) -> None:
        self._validate_timer.start(300)

    def _validate_current_script(self) -> None:
        text = self._editor.toPlainText()
        fpath = self._editor.path if self._editor.path else Path("<editor>")
        self._problems.setDiagnostics(validate_text(fpath, text))
        if self.tabs.indexOf(self._problems) == -1:
            self.tabs.addTab(self._problems, "Problems")

    def _validate_project(self) -> None:
        if not self._current_project:
            QMessageBox.information(self, "No project", "Open a project first.")
            return
        files = [self._current_project.root / p for p in self._current_project.scripts]
        self._problems.setDiagnostics(validate_files(files))
        if self.tabs.indexOf(self._problems) == -1:
            self.tabs.addTab(self._problems, "Problems")
        self.tabs.setCurrentWidget(self._problems)

    def _on_problem_navigate(self, file_str: str, line: int) -> None:
        try_path = Path(file_str)
        if self._editor.path and try_path.resolve() == self._editor.path.resolve():
            self._editor.goto_line(line)
        elif try_path.exists():
            self._load_script(try_path)
            self._editor.goto_line(line)
        self._update_title()

    def _update_title(self) -> None:
        proj = f" - {self._current_project.path.name}" if self._current_project else ""
        script = f" [{self._editor.path.name}]" if self._editor.path else ""
        self.setWindowTitle(f"{TITLE}{proj}{script}")
