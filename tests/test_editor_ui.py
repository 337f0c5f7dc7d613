from __future__ import annotations

import json
import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
pytest.importorskip("PySide6")

from PySide6.QtCore import QTimer  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

from editor.ui.main_window import MainWindow  # noqa: E402
from editor.ui.scene_panel import ScenePanel  # noqa: E402
from vnspreview.assets.registry import AssetRegistry  # noqa: E402


@pytest.fixture(scope="module")
def qapp():
    return QApplication.instance() or QApplication([])


def test_scene_panel_reports_missing_registry_on_first_display(qapp, tmp_path):
    panel = ScenePanel(registry=AssetRegistry(tmp_path / "missing.gd"))
    panel.display({"hp": 3})
    assert not panel.error_label.isHidden()
    assert "not found" in panel.error_label.text()
    assert panel.table.rowCount() == 1


def test_opening_projects_reuses_the_preview_timer(qapp, tmp_path):
    win = MainWindow()
    debouncer = win._evaluator.debouncer
    timers = []
    for i, delay in enumerate((120, 450)):
        path = tmp_path / f"p{i}" / "story.higanproj"
        path.parent.mkdir()
        path.write_text(json.dumps({"scripts": [], "preview": {"debounce_ms": delay}}), encoding="utf-8")
        win._open_project_path(path)
        assert win._evaluator.debouncer is debouncer
        assert debouncer.interval_ms == delay
        timers.append(len(win.findChildren(QTimer)))
    assert timers[0] == timers[1]
    win.close()
