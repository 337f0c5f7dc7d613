from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

# name -> scalar (or None); read-only view over a dict built for one capture
VariableSnapshot = Mapping[str, Any]


def freeze(values: Dict[str, Any]) -> VariableSnapshot:
    return MappingProxyType(values)


EMPTY_SNAPSHOT: VariableSnapshot = freeze({})


@dataclass(frozen=True)
class Cursor:
    """Where the author is: a 1-based line, optionally within a file."""

    line: int
    file_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.line < 1:
            raise ValueError(f"cursor line must be >= 1, got {self.line}")


@dataclass(frozen=True)
class DebugLocation:
    start_line: int
    end_line: int
    file_identity: Optional[str] = None

    @classmethod
    def from_metadata(cls, dm: Any) -> Optional["DebugLocation"]:
        """Build from a story's debug metadata (None when absent)."""
        if dm is None:
            return None
        start = getattr(dm, "start_line_number", None)
        if start is None:
            return None
        end = getattr(dm, "end_line_number", None) or start
        return cls(int(start), int(end), getattr(dm, "file_name", None) or None)


@dataclass(frozen=True)
class EvaluationResult:
    status: str  # "ok" | "error" | "cleared"
    variables: VariableSnapshot = field(default_factory=lambda: EMPTY_SNAPSHOT)
    message: str = ""

    @classmethod
    def ok(cls, variables: VariableSnapshot) -> "EvaluationResult":
        return cls("ok", variables=variables)

    @classmethod
    def error(cls, message: str) -> "EvaluationResult":
        return cls("error", message=message or "Unknown error")

    @classmethod
    def cleared(cls) -> "EvaluationResult":
        return cls("cleared")

    @property
    def is_ok(self) -> bool:
        return self.status == "ok"

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    @property
    def is_cleared(self) -> bool:
        return self.status == "cleared"

