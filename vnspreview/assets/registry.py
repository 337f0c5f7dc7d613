"""Asset id -> image file lookup for the scene preview.

Registry files list entries such as::

    "bg_bridge_airship_02": "res://assets/backgrounds/bridge-airship-02.png",

``res://`` paths are resolved against the assets root.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

ENTRY_RE = re.compile(r'"([^"]+)"\s*:\s*"res://([^"]+)"')


def parse_registry(content: str, root: Path) -> Dict[str, Path]:
    return {m.group(1): (root / m.group(2)) for m in ENTRY_RE.finditer(content)}


class AssetRegistry:
    def __init__(self, registry_path: Path | None, root: Path | None = None) -> None:
        self.registry_path = Path(registry_path) if registry_path else None
        self.root = Path(root) if root else (self.registry_path.parent if self.registry_path else Path.cwd())
        self._assets: Dict[str, Path] = {}
        self._loaded = False
        self.load_error: Optional[str] = None

    def reload(self) -> bool:
        self._assets = {}
        self._loaded = False
        self.load_error = None
        if self.registry_path is None:
            self.load_error = "No asset registry configured"
            return False
        if not self.registry_path.exists():
            self.load_error = f"Asset registry not found at: {self.registry_path}"
            logger.warning("AssetRegistry: %s", self.load_error)
            return False
        try:
            content = self.registry_path.read_text(encoding="utf-8")
        except OSError as e:
            self.load_error = f"Failed to read {self.registry_path.name}: {e}"
            logger.warning("AssetRegistry: %s", self.load_error)
            return False
        self._assets = parse_registry(content, self.root)
        self._loaded = True
        logger.info("AssetRegistry: loaded %d assets from %s", len(self._assets), self.registry_path)
        return True

    def ensure_loaded(self) -> None:
        if not self._loaded and self.load_error is None:
            self.reload()

    def resolve(self, asset_id: object) -> Optional[Path]:
        """Absolute path for ``asset_id``, or None when unset or unknown."""
        if not asset_id:
            return None
        self.ensure_loaded()
        return self._assets.get(str(asset_id))

    def __len__(self) -> int:
        self.ensure_loaded()
        return len(self._assets)
