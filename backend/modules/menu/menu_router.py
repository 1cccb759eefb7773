"""
菜单API路由
RESTful风格，每个接口通过 require_policy 声明所需的动作
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from core.ability import Action, require_policy
from core.config import get_settings
from core.database import get_db
from core.errors import success_response
from core.pagination import create_page_response
from core.security import TokenData

from .menu_ability import MENU_RESOURCE
from .menu_schemas import (
    MenuCreate, MenuUpdate, MenuBatchDelete, MenuPageQuery,
    MenuSortBy, SortOrder, menu_to_dict
)
from .menu_services import MenuService

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter()


def get_service(db: AsyncSession) -> MenuService:
    """创建菜单服务实例"""
    return MenuService(db)


# ============ 查询接口 ============

@router.get("", summary="分页查询菜单")
async def list_menus(
    page: int = Query(1, ge=1, description="页码"),
    limit: int = Query(settings.menu_page_size, ge=1, le=settings.menu_max_page_size, description="每页数量"),
    sort_by: MenuSortBy = Query("sort", alias="sortBy"),
    sort_order: SortOrder = Query("asc", alias="sortOrder"),
    name: Optional[str] = Query(None, description="名称包含"),
    status: Optional[bool] = Query(None, description="启用状态"),
    parent_id: Optional[str] = Query(None, alias="parentId", description="父菜单ID，空或 null 表示只查根菜单"),
    db: AsyncSession = Depends(get_db),
    user: TokenData = Depends(require_policy(Action.READ, MENU_RESOURCE))
):
    """分页查询，支持名称、状态、父菜单过滤"""
    conditions = dict(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order, name=name, status=status)
    if parent_id is not None:
        conditions["parent_id"] = None if parent_id in ("", "null") else parent_id
    query = MenuPageQuery(**conditions)

    result = await get_service(db).get_page(query, transformer=menu_to_dict)
    return create_page_response(result)


@router.get("/all", summary="全部菜单")
async def list_all_menus(
    db: AsyncSession = Depends(get_db),
    user: TokenData = Depends(require_policy(Action.READ, MENU_RESOURCE))
):
    """平铺列表（按层级、排序），用于上级菜单选择"""
    menus = await get_service(db).get_all()
    return success_response([menu_to_dict(m) for m in menus], "获取成功")


@router.get("/tree", summary="菜单树")
async def get_menu_tree(
    db: AsyncSession = Depends(get_db),
    user: TokenData = Depends(require_policy(Action.READ, MENU_RESOURCE))
):
    tree = await get_service(db).get_tree()
    return success_response([node.model_dump(by_alias=True) for node in tree], "获取成功")


@router.get("/{menu_id}", summary="菜单详情")
async def get_menu(
    menu_id: str,
    db: AsyncSession = Depends(get_db),
    user: TokenData = Depends(require_policy(Action.READ, MENU_RESOURCE, "menu_id"))
):
    menu = await get_service(db).get_one(menu_id)
    return success_response(menu_to_dict(menu), "获取成功")


# ============ 写接口 ============

@router.post("", summary="创建菜单")
async def create_menu(
    data: MenuCreate,
    db: AsyncSession = Depends(get_db),
    user: TokenData = Depends(require_policy(Action.CREATE, MENU_RESOURCE))
):
    menu = await get_service(db).create(data)
    return success_response(menu_to_dict(menu), "创建成功")


@router.put("/{menu_id}", summary="更新菜单")
async def update_menu(
    menu_id: str,
    data: MenuUpdate,
    db: AsyncSession = Depends(get_db),
    user: TokenData = Depends(require_policy(Action.UPDATE, MENU_RESOURCE, "menu_id"))
):
    """部分更新；携带 parentId 时为移动操作"""
    menu = await get_service(db).update(menu_id, data)
    return success_response(menu_to_dict(menu), "更新成功")


@router.delete("/{menu_id}", summary="删除菜单")
async def delete_menu(
    menu_id: str,
    db: AsyncSession = Depends(get_db),
    user: TokenData = Depends(require_policy(Action.DELETE, MENU_RESOURCE, "menu_id"))
):
    """删除叶子菜单，有子菜单时拒绝"""
    await get_service(db).delete(menu_id)
    return success_response(message="删除成功")


@router.delete("", summary="批量删除菜单")
async def batch_delete_menus(
    data: MenuBatchDelete,
    db: AsyncSession = Depends(get_db),
    user: TokenData = Depends(require_policy(Action.DELETE, MENU_RESOURCE))
):
    count = await get_service(db).batch_delete(data.ids)
    return success_response({"count": count}, "删除成功")
