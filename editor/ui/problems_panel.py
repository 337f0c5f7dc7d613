from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Signal
from PySide6.QtGui import QBrush, QColor
from PySide6.QtWidgets import QLabel, QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget

from editor.core.parser_bridge import Diagnostic

_SEVERITY_COLORS = {"error": QColor("#c0392b"), "warning": QColor("#b9770e")}


class ProblemsPanel(QWidget):
    """Compiler diagnostics, errors first; double-click jumps to the line."""

    navigateRequested = Signal(str, int)  # file, line

    def __init__(self) -> None:
        super().__init__()
        layout = QVBoxLayout(self)
        self.summary = QLabel("No problems")
        self.table = QTableWidget(0, 4)
        self.table.setHorizontalHeaderLabels(["Severity", "File", "Line", "Message"])
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.cellDoubleClicked.connect(self._on_cell_activated)
        layout.addWidget(self.summary)
        layout.addWidget(self.table)
        self._diagnostics: list[Diagnostic] = []

    def setDiagnostics(self, diags: list[Diagnostic]) -> None:  # noqa: N802
        self._diagnostics = sorted(diags, key=lambda d: (d.severity != "error", str(d.file), d.line or 0))
        self.table.setRowCount(0)
        for d in self._diagnostics:
            row = self.table.rowCount()
            self.table.insertRow(row)
            cells = (d.severity, Path(d.file).name, str(d.line or ""), d.message)
            for col, text in enumerate(cells):
                item = QTableWidgetItem(text)
                color = _SEVERITY_COLORS.get(d.severity)
                if color is not None and col == 0:
                    item.setForeground(QBrush(color))
                self.table.setItem(row, col, item)
        errors = sum(1 for d in self._diagnostics if d.severity == "error")
        warnings = len(self._diagnostics) - errors
        self.summary.setText(f"{errors} errors, {warnings} warnings" if self._diagnostics else "No problems")

    def _on_cell_activated(self, row: int, _column: int) -> None:
        if not 0 <= row < len(self._diagnostics):
            return
        d = self._diagnostics[row]
        self.navigateRequested.emit(str(d.file), d.line or 1)
