from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from vnspreview.script.compiler import Compiler, CompilerOptions, FileSystemHandler
from vnspreview.script.errors import CompileError

_LINE_RE = re.compile(r"line (\d+):")


@dataclass
class Diagnostic:
    file: Path
    line: int | None
    column: int | None
    severity: str  # "error" | "warning"
    message: str


def _diagnostic(file: Path, severity: str, message: str) -> Diagnostic:
    m = _LINE_RE.search(message)
    return Diagnostic(file=file, line=int(m.group(1)) if m else None, column=None, severity=severity, message=message)


def validate_text(file: Path, text: str) -> list[Diagnostic]:
    options = CompilerOptions(file.name, FileSystemHandler(file.parent))
    compiler = Compiler(text, options)
    try:
        compiler.compile()
    except CompileError as e:
        if not compiler.errors:
            return [Diagnostic(file=file, line=e.line, column=None, severity="error", message=str(e))]
    diags = [_diagnostic(file, "error", msg) for msg in compiler.errors]
    diags.extend(_diagnostic(file, "warning", msg) for msg in compiler.warnings)
    return diags


def validate_files(files: Iterable[Path]) -> list[Diagnostic]:
    all_diags: list[Diagnostic] = []
    for file in files:
        try:
            text = file.read_text(encoding="utf-8")
        except Exception as e:  # noqa: BLE001
            all_diags.append(Diagnostic(file=file, line=None, column=None, severity="error", message=f"Failed to read: {e}"))
            continue
        all_diags.extend(validate_text(file, text))
    return all_diags
