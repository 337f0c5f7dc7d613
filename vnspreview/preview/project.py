from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from .position import same_file


@dataclass
class ScriptProject:
    """Sources of one story: ``files`` maps relative paths to text."""

    main_path: str
    files: Dict[str, str] = field(default_factory=dict)

    @property
    def main_source(self) -> Optional[str]:
        return self.files.get(self.main_path)

    def contains(self, path: str) -> bool:
        return any(same_file(name, path) for name in self.files)
