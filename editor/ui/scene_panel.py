from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from PySide6.QtCore import Qt
from PySide6.QtGui import QPainter, QPixmap
from PySide6.QtWidgets import QLabel, QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget

from vnspreview.assets.registry import AssetRegistry
from vnspreview.config import DEFAULT_LAYERS
from vnspreview.preview.presenter import IScenePresenter
from vnspreview.preview.types import VariableSnapshot

logger = logging.getLogger(__name__)


class SceneCanvas(QWidget):
    """Paints the layer pixmaps bottom to top, scaled to the widget."""

    def __init__(self) -> None:
        super().__init__()
        self._layers: List[Tuple[str, QPixmap]] = []
        self.setMinimumSize(320, 180)

    def set_layers(self, layers: List[Tuple[str, QPixmap]]) -> None:
        self._layers = layers
        self.update()

    def paintEvent(self, event) -> None:  # type: ignore[override]  # noqa: N802
        painter = QPainter(self)
        painter.fillRect(self.rect(), Qt.GlobalColor.black)
        for _name, pixmap in self._layers:
            scaled = pixmap.scaled(self.size(), Qt.AspectRatioMode.KeepAspectRatio, Qt.TransformationMode.SmoothTransformation)
            x = (self.width() - scaled.width()) // 2
            y = (self.height() - scaled.height()) // 2
            painter.drawPixmap(x, y, scaled)
        painter.end()


class ScenePanel(QWidget):
    """Scene preview: image layers driven by story variables plus a variable table."""

    def __init__(self, registry: Optional[AssetRegistry] = None, layers: Optional[Dict[str, str]] = None) -> None:
        super().__init__()
        self.registry = registry
        self.layers = dict(layers or DEFAULT_LAYERS)
        layout = QVBoxLayout(self)
        self.canvas = SceneCanvas()
        self.error_label = QLabel()
        self.error_label.setStyleSheet("color: #c0392b;")
        self.error_label.setWordWrap(True)
        self.error_label.hide()
        self.table = QTableWidget(0, 2)
        self.table.setHorizontalHeaderLabels(["Variable", "Value"])
        self.table.horizontalHeader().setStretchLastSection(True)
        self.status = QLabel("Move cursor to evaluate")
        layout.addWidget(self.canvas, 3)
        layout.addWidget(self.error_label)
        layout.addWidget(self.table, 2)
        layout.addWidget(self.status)

    # --- presenter interface ---
    def display(self, variables: VariableSnapshot) -> None:
        self.error_label.hide()
        if self.registry is not None:
            self.registry.ensure_loaded()
            if self.registry.load_error:
                self._show_error_text(f"Asset registry: {self.registry.load_error}")
        self.canvas.set_layers(self._resolve_layers(variables))
        self._fill_table(variables)
        self.status.setText(f"{len(variables)} variables" if variables else "No variables")

    def display_error(self, message: str) -> None:
        self.canvas.set_layers([])
        self._show_error_text(message or "Unknown error")

    def clear(self) -> None:
        self.canvas.set_layers([])
        self.error_label.hide()
        self.table.setRowCount(0)
        self.status.setText("Move cursor to evaluate")

    def toggle_variables(self) -> None:
        self.table.setVisible(not self.table.isVisible())

    # --- helpers ---
    def _show_error_text(self, message: str) -> None:
        self.error_label.setText(message)
        self.error_label.show()

    def _resolve_layers(self, variables: VariableSnapshot) -> List[Tuple[str, QPixmap]]:
        out: List[Tuple[str, QPixmap]] = []
        if self.registry is None:
            return out
        for var_name, layer in self.layers.items():
            asset_id = variables.get(var_name)
            if not asset_id:
                continue
            path: Optional[Path] = self.registry.resolve(asset_id)
            if path is None:
                logger.warning("Asset not found in registry: %s (variable: %s)", asset_id, var_name)
                continue
            pixmap = QPixmap(str(path))
            if pixmap.isNull():
                logger.warning("Could not load image %s for layer %s", path, layer)
                continue
            out.append((layer, pixmap))
        return out

    def _fill_table(self, variables: VariableSnapshot) -> None:
        self.table.setRowCount(0)
        for name, value in variables.items():
            row = self.table.rowCount()
            self.table.insertRow(row)
            self.table.setItem(row, 0, QTableWidgetItem(str(name)))
            self.table.setItem(row, 1, QTableWidgetItem("null" if value is None else str(value)))


# QWidget's metaclass cannot be combined with ABCMeta, so register virtually
IScenePresenter.register(ScenePanel)
