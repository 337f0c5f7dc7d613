from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class Op:
    kind: str
    payload: Dict[str, Any]

    @property
    def line(self) -> Optional[int]:
        raw = self.payload.get("line")
        return int(raw) if isinstance(raw, int) else None

    @property
    def end_line(self) -> Optional[int]:
        raw = self.payload.get("end_line", self.payload.get("line"))
        return int(raw) if isinstance(raw, int) else None

    @property
    def file(self) -> Optional[str]:
        return self.payload.get("file")


class Program:
    def __init__(self, ops: List[Op], labels: Optional[Dict[str, int]] = None) -> None:
        self.ops = ops
        self.labels = labels or {}
