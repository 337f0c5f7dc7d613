from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScriptError(Exception):
    message: str
    line: int | None = None
    context: str | None = None
    file: str | None = None

    def __str__(self) -> str:  # pragma: no cover - formatting
        where = f"{self.file} " if self.file else ""
        loc = f" ({where}line {self.line})" if self.line else (f" ({self.file})" if self.file else "")
        ctx = f"\n  >> {self.context}" if self.context else ""
        return f"{self.message}{loc}{ctx}"


class CompileError(ScriptError):
    """The script will not build (missing include, unreadable source...)."""


class StoryRuntimeError(ScriptError):
    """An error notice was raised while stepping and nobody handled it."""
