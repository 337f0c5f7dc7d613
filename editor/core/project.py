from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from vnspreview.config import PreviewConfig
from vnspreview.preview.project import ScriptProject


DEFAULT_PROJECT = {
    "version": 1,
    "name": "Untitled",
    "scripts": ["scripts/main.vns"],
    "preview": {
        "debounce_ms": 300,
        "max_steps": 10000,
        "registry_path": None,
        "assets_root": None,
    },
}


@dataclass
class Project:
    path: Path
    data: dict

    @property
    def root(self) -> Path:
        return self.path.parent

    @property
    def scripts(self) -> List[str]:
        return [str(s) for s in self.data.get("scripts", [])]

    @property
    def main_script(self) -> Optional[str]:
        main = self.data.get("main")
        if main:
            return str(main)
        scripts = self.scripts
        return scripts[0] if scripts else None

    @property
    def preview_config(self) -> PreviewConfig:
        return PreviewConfig.from_dict(self.data.get("preview"))

    def relative_path(self, file: Path) -> Optional[str]:
        try:
            return Path(file).resolve().relative_to(self.root.resolve()).as_posix()
        except ValueError:
            return None

    def script_project(self, buffers: Mapping[str, str] | None = None) -> Optional[ScriptProject]:
        """Sources for evaluation; unsaved editor ``buffers`` win over disk.

        Keys are relative to the main script's folder, which is where
        INCLUDE paths are resolved from.
        """
        main = self.main_script
        if not main:
            return None
        base = (self.root / main).parent
        contents: Dict[str, str] = {}
        for rel in self.scripts:
            try:
                contents[rel] = (self.root / rel).read_text(encoding="utf-8")
            except OSError:
                continue
        contents.update(dict(buffers or {}))
        files: Dict[str, str] = {}
        for rel, text in contents.items():
            p = (self.root / rel).resolve()
            try:
                files[p.relative_to(base.resolve()).as_posix()] = text
            except ValueError:
                files[rel] = text
        return ScriptProject(Path(main).name, files)

    @staticmethod
    def load(path: Path) -> "Project":
        if not path.exists():
            raise FileNotFoundError(path)
        data = json.loads(path.read_text(encoding="utf-8"))
        return Project(path=path, data=data)

    def save(self) -> None:
        self.path.write_text(json.dumps(self.data, ensure_ascii=False, indent=2), encoding="utf-8")

    @staticmethod
    def create(path: Path, template: dict | None = None) -> "Project":
        template = template or DEFAULT_PROJECT
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(template, ensure_ascii=False, indent=2), encoding="utf-8")
        return Project.load(path)
