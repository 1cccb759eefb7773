"""
模块加载器测试
"""

from fastapi import FastAPI

from core.loader import ModuleManifest, load_manifest, mount_module


class TestModuleLoader:
    """清单读取与路由注册"""

    def test_menu_manifest(self):
        manifest = load_manifest("menu")
        assert isinstance(manifest, ModuleManifest)
        assert manifest.id == "menu"
        assert manifest.router_prefix == "/api/v1/menus"
        assert "menu.delete" in manifest.permissions

    def test_mount_registers_routes(self):
        app = FastAPI()
        manifest = mount_module(app, "menu")

        assert manifest.router is not None
        paths = app.openapi()["paths"]
        assert "/api/v1/menus/tree" in paths
        assert paths["/api/v1/menus/tree"]["get"]["tags"] == [manifest.name]

    def test_disabled_module_skipped(self, monkeypatch):
        manifest = load_manifest("menu")
        monkeypatch.setattr(manifest, "enabled", False)

        app = FastAPI()
        assert mount_module(app, "menu") is None
        assert app.openapi()["paths"] == {}
