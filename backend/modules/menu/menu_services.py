"""
菜单业务逻辑
维护物化路径（level / path_ids / path_names），负责循环引用校验与子树级联更新

结构性写操作（移动、删除）在同一个事务内完成：
只在最后提交一次，任何失败都整体回滚。
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy import select, func, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from core.errors import (
    AppException, BusinessException, ConflictException, ErrorCode, NotFoundException
)
from core.pagination import PageResult, paginate

from .menu_models import Menu
from .menu_schemas import MenuCreate, MenuUpdate, MenuTreeNode, MenuPageQuery

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "createdAt": Menu.created_at,
    "updatedAt": Menu.updated_at,
    "sort": Menu.sort,
    "level": Menu.level,
}


def derive_path(parent: Optional[Menu]) -> dict:
    """根据父节点计算派生字段；无父节点即根节点"""
    if parent is None:
        return {"level": 1, "path_ids": [], "path_names": []}
    return {
        "level": parent.level + 1,
        "path_ids": [*(parent.path_ids or []), parent.id],
        "path_names": [*(parent.path_names or []), parent.name],
    }


class MenuService:
    """菜单服务（不感知授权，由路由层负责）"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ============ 查询 ============

    async def get_page(self, query: MenuPageQuery, transformer: Optional[Callable] = None) -> PageResult:
        """分页查询"""
        stmt = select(Menu)
        if query.name:
            stmt = stmt.where(Menu.name.contains(query.name, autoescape=True))
        if query.status is not None:
            stmt = stmt.where(Menu.status == query.status)
        if query.filters_parent:
            if query.parent_id is None:
                stmt = stmt.where(Menu.parent_id.is_(None))
            else:
                stmt = stmt.where(Menu.parent_id == query.parent_id)

        column = SORT_COLUMNS[query.sort_by]
        ordering = column.desc() if query.sort_order == "desc" else column.asc()
        # 追加主键保证翻页稳定
        stmt = stmt.order_by(ordering, Menu.id)

        return await paginate(self.db, stmt, page=query.page, limit=query.limit, transformer=transformer)

    async def get_all(self) -> List[Menu]:
        """全部菜单，按层级、排序"""
        result = await self.db.execute(select(Menu).order_by(Menu.level, Menu.sort))
        return list(result.scalars().all())

    async def get_tree(self) -> List[MenuTreeNode]:
        """
        完整菜单树

        父节点不存在的菜单按根节点处理；
        子节点顺序即整体按 sort 查询时的出现顺序。
        """
        result = await self.db.execute(select(Menu).order_by(Menu.sort))
        nodes: Dict[str, MenuTreeNode] = {
            menu.id: MenuTreeNode.model_validate(menu) for menu in result.scalars().all()
        }

        roots: List[MenuTreeNode] = []
        for node in nodes.values():
            parent = nodes.get(node.parent_id) if node.parent_id else None
            if parent is not None:
                parent.children.append(node)
            else:
                roots.append(node)
        return roots

    async def get_one(self, menu_id: str) -> Menu:
        menu = await self.db.get(Menu, menu_id)
        if menu is None:
            raise NotFoundException("菜单", menu_id, code=ErrorCode.MENU_NOT_FOUND)
        return menu

    # ============ 写操作 ============

    async def create(self, data: MenuCreate) -> Menu:
        """创建菜单，派生字段由父节点计算"""
        parent = await self._load_parent(data.parent_id)

        values = data.model_dump(exclude={"parent_id"})
        values["permissions"] = values.get("permissions") or []
        menu = Menu(**values, parent_id=parent.id if parent else None, **derive_path(parent))

        self.db.add(menu)
        await self._commit(on_integrity_error=NotFoundException(
            "父菜单", data.parent_id, code=ErrorCode.MENU_PARENT_NOT_FOUND
        ))
        await self.db.refresh(menu)

        logger.info(f"创建菜单: {menu.name} ({menu.id}) level={menu.level}")
        return menu

    async def update(self, menu_id: str, data: MenuUpdate) -> Menu:
        """
        更新菜单

        未携带 parentId：只修改普通字段；名称变化时刷新子孙的 path_names。
        携带 parentId：移动节点，重算自身派生字段并级联到整棵子树。
        """
        menu = await self._get_for_update(menu_id)

        new_parent = None
        if data.moves:
            new_parent = await self._load_parent(data.parent_id, lock=True)
            if new_parent is not None and (
                new_parent.id == menu.id or menu.id in (new_parent.path_ids or [])
            ):
                raise BusinessException(ErrorCode.MENU_CYCLE_VIOLATION)

        old_name = menu.name
        for key, value in data.model_dump(exclude_unset=True, exclude={"parent_id"}).items():
            setattr(menu, key, value)

        if data.moves:
            menu.parent_id = new_parent.id if new_parent else None
            for key, value in derive_path(new_parent).items():
                setattr(menu, key, value)

        if data.moves or menu.name != old_name:
            affected = await self._cascade(menu)
            if data.moves:
                logger.info(f"移动菜单: {menu.name} ({menu.id}) -> parent={menu.parent_id}，级联 {affected} 个子孙")

        await self._commit(on_integrity_error=NotFoundException(
            "父菜单", data.parent_id, code=ErrorCode.MENU_PARENT_NOT_FOUND
        ))
        await self.db.refresh(menu)
        return menu

    async def delete(self, menu_id: str) -> None:
        """删除叶子菜单"""
        menu = await self._get_for_update(menu_id)

        counts = await self._count_children([menu_id])
        if counts.get(menu_id):
            raise BusinessException(ErrorCode.MENU_HAS_CHILDREN)

        await self.db.delete(menu)
        await self._commit(on_integrity_error=BusinessException(ErrorCode.MENU_HAS_CHILDREN))
        logger.info(f"删除菜单: {menu.name} ({menu_id})")

    async def batch_delete(self, ids: Iterable[str]) -> int:
        """
        批量删除叶子菜单

        先逐个校验（存在且无子菜单），全部通过后一次性删除；
        任意一个不通过则整批拒绝。
        """
        menu_ids = list(dict.fromkeys(ids))

        result = await self.db.execute(
            select(Menu.id).where(Menu.id.in_(menu_ids)).with_for_update()
        )
        existing = set(result.scalars().all())
        for menu_id in menu_ids:
            if menu_id not in existing:
                raise NotFoundException("菜单", menu_id, code=ErrorCode.MENU_NOT_FOUND)

        counts = await self._count_children(menu_ids)
        for menu_id in menu_ids:
            if counts.get(menu_id):
                raise BusinessException(
                    ErrorCode.MENU_HAS_CHILDREN,
                    f"菜单ID {menu_id} 下有子菜单，不能直接删除"
                )

        try:
            result = await self.db.execute(
                delete(Menu).where(Menu.id.in_(menu_ids)).execution_options(synchronize_session="fetch")
            )
        except IntegrityError as e:
            # 校验之后被并发插入了子菜单，由外键拒绝
            await self.db.rollback()
            raise BusinessException(ErrorCode.MENU_HAS_CHILDREN) from e

        await self._commit()
        logger.info(f"批量删除菜单: {len(menu_ids)} 个")
        return result.rowcount

    # ============ 内部方法 ============

    async def _get_for_update(self, menu_id: str) -> Menu:
        result = await self.db.execute(
            select(Menu).where(Menu.id == menu_id).with_for_update()
        )
        menu = result.scalar_one_or_none()
        if menu is None:
            raise NotFoundException("菜单", menu_id, code=ErrorCode.MENU_NOT_FOUND)
        return menu

    async def _load_parent(self, parent_id: Optional[str], lock: bool = False) -> Optional[Menu]:
        if not parent_id:
            return None
        stmt = select(Menu).where(Menu.id == parent_id)
        if lock:
            stmt = stmt.with_for_update()
        parent = (await self.db.execute(stmt)).scalar_one_or_none()
        if parent is None:
            raise NotFoundException("父菜单", parent_id, code=ErrorCode.MENU_PARENT_NOT_FOUND)
        return parent

    async def _count_children(self, menu_ids: List[str]) -> Dict[str, int]:
        result = await self.db.execute(
            select(Menu.parent_id, func.count(Menu.id))
            .where(Menu.parent_id.in_(menu_ids))
            .group_by(Menu.parent_id)
        )
        return {parent_id: count for parent_id, count in result.all()}

    async def _cascade(self, root: Menu) -> int:
        """
        按层重写子孙的派生字段

        每轮用 parent_id IN (上一层) 取出下一层，依据内存中已更新的父节点计算；
        只修改会话中的对象，由调用方统一提交。
        """
        frontier: Dict[str, Menu] = {root.id: root}
        affected = 0
        while frontier:
            result = await self.db.execute(
                select(Menu)
                .where(Menu.parent_id.in_(list(frontier)))
                .order_by(Menu.sort)
                .with_for_update()
            )
            next_frontier: Dict[str, Menu] = {}
            for child in result.scalars().all():
                for key, value in derive_path(frontier[child.parent_id]).items():
                    setattr(child, key, value)
                next_frontier[child.id] = child
            affected += len(next_frontier)
            frontier = next_frontier
        return affected

    async def _commit(self, on_integrity_error: Optional[AppException] = None) -> None:
        try:
            await self.db.commit()
        except StaleDataError as e:
            await self.db.rollback()
            logger.warning(f"菜单并发修改冲突: {e}")
            raise ConflictException() from e
        except IntegrityError as e:
            await self.db.rollback()
            if on_integrity_error is None:
                raise
            raise on_integrity_error from e


async def load_menu(db: AsyncSession, menu_id: str) -> Menu:
    """授权检查前按 ID 加载菜单实例"""
    return await MenuService(db).get_one(menu_id)
