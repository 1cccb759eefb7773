"""
菜单模块清单
定义模块元信息、路由入口、权限声明
"""

from core.loader import ModuleManifest

manifest = ModuleManifest(
    id="menu",
    name="菜单管理",
    version="1.0.0",
    description="导航菜单树维护",
    icon="📋",

    router_prefix="/api/v1/menus",

    permissions=[
        "menu.create",
        "menu.update",
        "menu.delete"
    ],

    enabled=True
)
