from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# story variable name -> scene layer it drives, bottom to top
DEFAULT_LAYERS: Dict[str, str] = {
    "bg": "background",
    "vignette_shadow": "vignette_shadow",
    "locationbox": "locationbox",
    "pc": "pc",
    "npc": "npc",
    "dialogbox": "dialogbox",
    "emotebox": "emotebox",
    "emote": "emote",
    "vignette_js": "vignette_js",
    "ui_button_character": "ui_button_character",
    "ui_button_book": "ui_button_book",
}

DEFAULTS: Dict[str, Any] = {
    "debounce_ms": 300,
    "max_steps": 10000,
    "layers": DEFAULT_LAYERS,
    "registry_path": None,
    "assets_root": None,
}


@dataclass
class PreviewConfig:
    debounce_ms: int = 300
    max_steps: int = 10000
    layers: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_LAYERS))
    registry_path: Optional[str] = None
    assets_root: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "PreviewConfig":
        """Merge ``data`` over the defaults, ignoring unknown keys and bad values."""
        merged = dict(DEFAULTS)
        merged["layers"] = dict(DEFAULT_LAYERS)
        for key, value in dict(data or {}).items():
            if key not in DEFAULTS:
                continue
            if key == "layers" and isinstance(value, dict):
                merged["layers"] = {str(k): str(v) for k, v in value.items()}
            elif key in ("debounce_ms", "max_steps"):
                try:
                    merged[key] = max(0 if key == "debounce_ms" else 1, int(value))
                except (TypeError, ValueError):
                    logger.warning("Ignoring invalid %s: %r", key, value)
            elif key != "layers":
                merged[key] = value
        return cls(**merged)

    def to_dict(self) -> dict:
        return asdict(self)


def load_config(path: Optional[Path]) -> PreviewConfig:
    """Read a JSON config file; defaults when missing or unreadable."""
    if path is None:
        return PreviewConfig()
    p = Path(path)
    try:
        if p.exists():
            data = json.loads(p.read_text(encoding="utf-8"))
            # project files keep preview settings in their own section
            if isinstance(data, dict) and isinstance(data.get("preview"), dict):
                data = data["preview"]
            return PreviewConfig.from_dict(data if isinstance(data, dict) else None)
    except (OSError, ValueError) as e:
        logger.warning("Failed to read config %s: %s", p, e)
    return PreviewConfig()


def save_config(cfg: PreviewConfig, path: Path) -> bool:
    p = Path(path)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(cfg.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
        return True
    except OSError as e:
        logger.error("Failed to save config %s: %s", p, e)
        return False
