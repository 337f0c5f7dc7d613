from __future__ import annotations

from vnspreview.assets.registry import AssetRegistry, parse_registry

REGISTRY = '''
const ASSETS = {
    "bg_bridge_airship_02": "res://assets/backgrounds/bridge-airship-02.png",
    "npc_captain": "res://assets/npc/captain.png",
    "broken": "assets/not-res.png",
}
'''


def test_parse_registry_resolves_res_paths(tmp_path):
    assets = parse_registry(REGISTRY, tmp_path)
    assert assets == {
        "bg_bridge_airship_02": tmp_path / "assets/backgrounds/bridge-airship-02.png",
        "npc_captain": tmp_path / "assets/npc/captain.png",
    }


def test_registry_loads_lazily(tmp_path):
    reg_file = tmp_path / "registry.gd"
    reg_file.write_text(REGISTRY, encoding="utf-8")
    registry = AssetRegistry(reg_file)
    assert registry.resolve("npc_captain") == tmp_path / "assets/npc/captain.png"
    assert registry.resolve("unknown") is None
    assert registry.resolve(None) is None
    assert len(registry) == 2
    assert registry.load_error is None


def test_missing_registry_reports_error(tmp_path):
    registry = AssetRegistry(tmp_path / "nope.gd")
    assert registry.resolve("npc_captain") is None
    assert "not found" in registry.load_error
    assert not registry.reload()


def test_reload_picks_up_changes(tmp_path):
    reg_file = tmp_path / "registry.gd"
    reg_file.write_text('"a": "res://a.png"', encoding="utf-8")
    registry = AssetRegistry(reg_file, root=tmp_path / "game")
    assert len(registry) == 1
    reg_file.write_text('"a": "res://a.png",\n"b": "res://b.png"', encoding="utf-8")
    assert registry.reload()
    assert registry.resolve("b") == tmp_path / "game" / "b.png"


def test_modules_carry_their_docstrings():
    import vnspreview.assets.registry as registry_module
    import vnspreview.preview as preview_package

    assert registry_module.__doc__.startswith("Asset id -> image file lookup")
    assert preview_package.__doc__.startswith("Cursor-synchronized story preview")
