from __future__ import annotations

import json

from vnspreview.config import DEFAULT_LAYERS, PreviewConfig, load_config, save_config


def test_defaults_when_no_file(tmp_path):
    cfg = load_config(None)
    assert cfg == PreviewConfig()
    assert load_config(tmp_path / "missing.json").max_steps == 10000


def test_from_dict_merges_and_clamps():
    cfg = PreviewConfig.from_dict({
        "debounce_ms": -5,
        "max_steps": 0,
        "layers": {"bg": "background"},
        "registry_path": "registry.gd",
        "unknown": 1,
    })
    assert cfg.debounce_ms == 0
    assert cfg.max_steps == 1
    assert cfg.layers == {"bg": "background"}
    assert cfg.registry_path == "registry.gd"


def test_invalid_numbers_fall_back_to_defaults():
    cfg = PreviewConfig.from_dict({"max_steps": "lots"})
    assert cfg.max_steps == 10000
    assert cfg.layers == DEFAULT_LAYERS


def test_project_file_preview_section(tmp_path):
    p = tmp_path / "story.higanproj"
    p.write_text(json.dumps({"name": "demo", "preview": {"max_steps": 50}}), encoding="utf-8")
    assert load_config(p).max_steps == 50


def test_broken_json_falls_back(tmp_path):
    p = tmp_path / "preview.json"
    p.write_text("{not json", encoding="utf-8")
    assert load_config(p) == PreviewConfig()


def test_save_and_load_round_trip(tmp_path):
    cfg = PreviewConfig(debounce_ms=120, assets_root="assets")
    path = tmp_path / "nested" / "preview.json"
    assert save_config(cfg, path)
    assert load_config(path) == cfg
