from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QRegularExpression, Qt, Signal
from PySide6.QtGui import QFont, QSyntaxHighlighter, QTextCharFormat
from PySide6.QtWidgets import QPlainTextEdit


def _color_format(color: Qt.GlobalColor, bold: bool = False) -> QTextCharFormat:
    fmt = QTextCharFormat()
    fmt.setForeground(color)
    if bold:
        fmt.setFontWeight(QFont.Weight.Bold)
    return fmt


class VnsHighlighter(QSyntaxHighlighter):
    def __init__(self, document) -> None:  # type: ignore[override]
        super().__init__(document)
        self.rules: list[tuple[QRegularExpression, QTextCharFormat]] = [
            (QRegularExpression(r"^\s*>.*"), _color_format(Qt.GlobalColor.darkBlue, True)),  # commands
            (QRegularExpression(r"^\s*♪.*"), _color_format(Qt.GlobalColor.darkMagenta, True)),  # BGM shorthand
            (QRegularExpression(r"^\s*\*\w+.*"), _color_format(Qt.GlobalColor.darkGreen, True)),  # labels
            (QRegularExpression(r"^\s*\?.*"), _color_format(Qt.GlobalColor.darkCyan, True)),  # choices
            (QRegularExpression(r"\{[A-Za-z_]\w*\}"), _color_format(Qt.GlobalColor.darkYellow)),  # placeholders
            (QRegularExpression(r"#.*$"), _color_format(Qt.GlobalColor.gray)),  # comments
            (QRegularExpression(r"[“「\"].*[”」\"]"), _color_format(Qt.GlobalColor.darkRed)),
        ]

    def highlightBlock(self, text: str) -> None:  # type: ignore[override]
        for pattern, fmt in self.rules:
            it = pattern.globalMatch(text)
            while it.hasNext():
                m = it.next()
                self.setFormat(m.capturedStart(), m.capturedLength(), fmt)


class ScriptEditor(QPlainTextEdit):
    cursorLineChanged = Signal(int)  # 1-based line

    def __init__(self) -> None:
        super().__init__()
        self.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)
        font = QFont("Consolas", 11)
        font.setStyleHint(QFont.StyleHint.Monospace)
        self.setFont(font)
        self._path: Path | None = None
        self._last_line = 0
        self._highlighter = VnsHighlighter(self.document())
        self.cursorPositionChanged.connect(self._on_cursor_moved)

    @property
    def path(self) -> Path | None:
        return self._path

    def load_file(self, path: Path) -> None:
        self._path = Path(path)
        self._last_line = 0
        self.setPlainText(self._path.read_text(encoding="utf-8"))

    def goto_line(self, line: int) -> None:
        block = self.document().findBlockByNumber(max(1, line) - 1)
        cursor = self.textCursor()
        cursor.setPosition(block.position())
        self.setTextCursor(cursor)
        self.centerCursor()

    def current_line(self) -> int:
        # blockNumber is 0-indexed
        return int(self.textCursor().blockNumber()) + 1

    def _on_cursor_moved(self) -> None:
        line = self.current_line()
        if line != self._last_line:
            self._last_line = line
            self.cursorLineChanged.emit(line)
