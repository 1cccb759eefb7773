"""
模块加载器
按命名规范读取模块清单（{module_id}_manifest.py）与路由（{module_id}_router.py），
并把路由注册到应用上
"""

import importlib
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from fastapi import FastAPI, APIRouter

logger = logging.getLogger(__name__)


@dataclass
class ModuleManifest:
    """模块清单"""
    id: str                          # 唯一标识
    name: str                        # 显示名称，同时作为 OpenAPI 标签
    version: str                     # 版本号
    description: str = ""            # 描述
    icon: str = "📦"                 # 图标

    # 路由配置
    router_prefix: str = ""          # 路由前缀，如 /api/v1/menus
    router: Optional[APIRouter] = None

    # 权限声明
    permissions: List[str] = field(default_factory=list)

    enabled: bool = True


def load_manifest(module_id: str) -> ModuleManifest:
    """导入 modules.{id}.{id}_manifest 中的 manifest 对象"""
    module = importlib.import_module(f"modules.{module_id}.{module_id}_manifest")
    manifest = getattr(module, "manifest", None)
    if not isinstance(manifest, ModuleManifest):
        raise RuntimeError(f"模块 {module_id} 缺少 manifest 定义")
    return manifest


def mount_module(app: FastAPI, module_id: str) -> Optional[ModuleManifest]:
    """
    加载模块并注册路由

    未启用的模块返回 None；路由前缀缺省为 /api/v1/{module_id}
    """
    manifest = load_manifest(module_id)
    if not manifest.enabled:
        logger.info(f"模块未启用，跳过: {module_id}")
        return None

    router_module = importlib.import_module(f"modules.{module_id}.{module_id}_router")
    manifest.router = router_module.router

    prefix = manifest.router_prefix or f"/api/v1/{module_id}"
    app.include_router(manifest.router, prefix=prefix, tags=[manifest.name])
    logger.debug(f"注册路由成功: {prefix}")
    return manifest
