from __future__ import annotations

import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

from editor.ui.main_window import MainWindow


def run(argv: list[str] | None = None) -> int:
    argv = argv or sys.argv
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    app = QApplication(argv)
    win = MainWindow()
    win.show()
    # optional: open a project or script given on the command line
    if len(argv) > 1:
        target = Path(argv[1])
        if target.suffix == ".higanproj":
            win._open_project_path(target)
        elif target.exists():
            win._load_script(target)
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(run())
