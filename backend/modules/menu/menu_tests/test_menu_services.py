"""
菜单服务层测试
覆盖：物化路径派生、移动与级联、循环引用、叶子删除、批量删除、分页过滤、菜单树
"""

import pytest

from core.errors import BusinessException, ErrorCode, NotFoundException
from modules.menu.menu_models import Menu
from modules.menu.menu_schemas import MenuCreate, MenuUpdate, MenuPageQuery
from modules.menu.menu_services import MenuService, derive_path


async def assert_paths_consistent(service: MenuService):
    """沿 parent_id 回溯到根，必须与 path_ids / path_names 一致"""
    menus = {m.id: m for m in await service.get_all()}
    for menu in menus.values():
        await service.db.refresh(menu)
    for menu in menus.values():
        chain = []
        current = menu
        while current.parent_id:
            current = menus[current.parent_id]
            chain.insert(0, current)
        assert menu.path_ids == [m.id for m in chain]
        assert menu.path_names == [m.name for m in chain]
        assert menu.level == len(chain) + 1
        assert len(menu.path_ids) == len(menu.path_names) == menu.level - 1


class TestDerivePath:
    """派生字段计算"""

    def test_root(self):
        assert derive_path(None) == {"level": 1, "path_ids": [], "path_names": []}

    def test_child(self):
        parent = Menu(id="p", name="父", level=2, path_ids=["r"], path_names=["根"])
        assert derive_path(parent) == {
            "level": 3,
            "path_ids": ["r", "p"],
            "path_names": ["根", "父"],
        }


class TestMenuCreate:
    """创建菜单"""

    @pytest.mark.asyncio
    async def test_create_root(self, menu_service):
        menu = await menu_service.create(MenuCreate(name="仪表盘", path="/dashboard"))
        assert menu.id
        assert menu.level == 1
        assert menu.path_ids == []
        assert menu.path_names == []
        assert menu.parent_id is None
        assert menu.status is True
        assert menu.hidden is False
        assert menu.permissions == []

    @pytest.mark.asyncio
    async def test_scenario_three_levels(self, menu_tree):
        a, b, c = menu_tree["A"], menu_tree["B"], menu_tree["C"]
        assert (a.level, a.path_ids) == (1, [])
        assert (b.level, b.path_ids, b.path_names) == (2, [a.id], ["A"])
        assert (c.level, c.path_ids, c.path_names) == (3, [a.id, b.id], ["A", "B"])

    @pytest.mark.asyncio
    async def test_create_with_missing_parent(self, menu_service, db_session):
        with pytest.raises(NotFoundException) as exc_info:
            await menu_service.create(MenuCreate(name="孤儿", parent_id="no-such-id"))
        assert exc_info.value.code == ErrorCode.MENU_PARENT_NOT_FOUND
        assert await menu_service.get_all() == []

    @pytest.mark.asyncio
    async def test_blank_parent_means_root(self, menu_service):
        menu = await menu_service.create(MenuCreate(name="根", parentId=""))
        assert menu.parent_id is None
        assert menu.level == 1


class TestMenuMove:
    """移动与级联"""

    @pytest.mark.asyncio
    async def test_move_subtree_under_new_root(self, menu_service, menu_tree):
        a, b, c, d = (menu_tree[k] for k in "ABCD")

        moved = await menu_service.update(b.id, MenuUpdate(parentId=d.id))
        assert moved.parent_id == d.id
        assert moved.level == 2
        assert moved.path_ids == [d.id]
        assert moved.path_names == ["D"]

        await menu_service.db.refresh(c)
        assert c.level == 3
        assert c.path_ids == [d.id, b.id]
        assert c.path_names == ["D", "B"]

        await assert_paths_consistent(menu_service)

    @pytest.mark.asyncio
    async def test_move_to_root(self, menu_service, menu_tree):
        b, c = menu_tree["B"], menu_tree["C"]

        moved = await menu_service.update(b.id, MenuUpdate(parentId=None))
        assert moved.parent_id is None
        assert moved.level == 1
        assert moved.path_ids == []

        await menu_service.db.refresh(c)
        assert c.level == 2
        assert c.path_ids == [b.id]
        assert c.path_names == ["B"]

    @pytest.mark.asyncio
    async def test_move_deep_subtree(self, menu_service, menu_tree):
        """四层子树整体下移一层"""
        c = menu_tree["C"]
        e = await menu_service.create(MenuCreate(name="E", parent_id=c.id))
        f = await menu_service.create(MenuCreate(name="F", parent_id=e.id))

        await menu_service.update(menu_tree["B"].id, MenuUpdate(parentId=menu_tree["D"].id, name="B2"))

        await menu_service.db.refresh(f)
        assert f.level == 5
        assert f.path_names == ["D", "B2", "C", "E"]
        await assert_paths_consistent(menu_service)

    @pytest.mark.asyncio
    async def test_move_under_descendant_rejected(self, menu_service, menu_tree):
        a, c = menu_tree["A"], menu_tree["C"]
        before_a = (a.parent_id, a.level, list(a.path_ids), list(a.path_names))
        before_c = (c.parent_id, c.level, list(c.path_ids), list(c.path_names))

        with pytest.raises(BusinessException) as exc_info:
            await menu_service.update(a.id, MenuUpdate(parentId=c.id, name="改名"))
        assert exc_info.value.code == ErrorCode.MENU_CYCLE_VIOLATION

        await menu_service.db.refresh(a)
        await menu_service.db.refresh(c)
        assert (a.parent_id, a.level, a.path_ids, a.path_names) == before_a
        assert (c.parent_id, c.level, c.path_ids, c.path_names) == before_c
        assert a.name == "A"

    @pytest.mark.asyncio
    async def test_move_under_itself_rejected(self, menu_service, menu_tree):
        b = menu_tree["B"]
        with pytest.raises(BusinessException) as exc_info:
            await menu_service.update(b.id, MenuUpdate(parentId=b.id))
        assert exc_info.value.code == ErrorCode.MENU_CYCLE_VIOLATION

    @pytest.mark.asyncio
    async def test_move_to_missing_parent(self, menu_service, menu_tree):
        with pytest.raises(NotFoundException) as exc_info:
            await menu_service.update(menu_tree["B"].id, MenuUpdate(parentId="missing"))
        assert exc_info.value.code == ErrorCode.MENU_PARENT_NOT_FOUND

    @pytest.mark.asyncio
    async def test_update_missing_menu(self, menu_service):
        with pytest.raises(NotFoundException) as exc_info:
            await menu_service.update("missing", MenuUpdate(name="x"))
        assert exc_info.value.code == ErrorCode.MENU_NOT_FOUND


class TestMenuUpdateFields:
    """不携带 parentId 的普通更新"""

    @pytest.mark.asyncio
    async def test_plain_update_keeps_paths(self, menu_service, menu_tree):
        b = menu_tree["B"]
        updated = await menu_service.update(b.id, MenuUpdate(sort=9, hidden=True, icon="MenuOutlined"))
        assert updated.sort == 9
        assert updated.hidden is True
        assert updated.icon == "MenuOutlined"
        assert updated.parent_id == menu_tree["A"].id
        assert updated.level == 2

    @pytest.mark.asyncio
    async def test_rename_refreshes_descendant_names(self, menu_service, menu_tree):
        await menu_service.update(menu_tree["A"].id, MenuUpdate(name="系统"))

        b, c = menu_tree["B"], menu_tree["C"]
        await menu_service.db.refresh(b)
        await menu_service.db.refresh(c)
        assert b.path_names == ["系统"]
        assert c.path_names == ["系统", "B"]
        await assert_paths_consistent(menu_service)

    @pytest.mark.asyncio
    async def test_version_increments(self, menu_service, menu_tree):
        b = menu_tree["B"]
        version = b.version
        await menu_service.update(b.id, MenuUpdate(sort=3))
        assert b.version == version + 1


class TestMenuDelete:
    """叶子删除"""

    @pytest.mark.asyncio
    async def test_delete_leaf(self, menu_service, menu_tree):
        await menu_service.delete(menu_tree["C"].id)
        with pytest.raises(NotFoundException):
            await menu_service.get_one(menu_tree["C"].id)

    @pytest.mark.asyncio
    async def test_delete_with_children_rejected(self, menu_service, menu_tree):
        b = menu_tree["B"]
        with pytest.raises(BusinessException) as exc_info:
            await menu_service.delete(b.id)
        assert exc_info.value.code == ErrorCode.MENU_HAS_CHILDREN
        assert (await menu_service.get_one(b.id)).id == b.id

    @pytest.mark.asyncio
    async def test_delete_missing(self, menu_service):
        with pytest.raises(NotFoundException) as exc_info:
            await menu_service.delete("missing")
        assert exc_info.value.code == ErrorCode.MENU_NOT_FOUND


class TestMenuBatchDelete:
    """批量删除"""

    @pytest.mark.asyncio
    async def test_batch_delete_leaves(self, menu_service, menu_tree):
        count = await menu_service.batch_delete([menu_tree["C"].id, menu_tree["D"].id])
        assert count == 2
        remaining = {m.name for m in await menu_service.get_all()}
        assert remaining == {"A", "B"}

    @pytest.mark.asyncio
    async def test_batch_rejected_when_any_has_children(self, menu_service, menu_tree):
        d, b = menu_tree["D"], menu_tree["B"]
        with pytest.raises(BusinessException) as exc_info:
            await menu_service.batch_delete([d.id, b.id])
        assert exc_info.value.code == ErrorCode.MENU_HAS_CHILDREN
        assert b.id in exc_info.value.message

        remaining = {m.id for m in await menu_service.get_all()}
        assert d.id in remaining
        assert b.id in remaining

    @pytest.mark.asyncio
    async def test_batch_rejected_on_unknown_id(self, menu_service, menu_tree):
        d = menu_tree["D"]
        with pytest.raises(NotFoundException):
            await menu_service.batch_delete([d.id, "missing"])
        assert (await menu_service.get_one(d.id)).id == d.id

    @pytest.mark.asyncio
    async def test_batch_parent_with_its_child_rejected(self, menu_service, menu_tree):
        """父子同批也视为有子菜单"""
        with pytest.raises(BusinessException):
            await menu_service.batch_delete([menu_tree["B"].id, menu_tree["C"].id])


class TestMenuQueries:
    """查询"""

    @pytest.mark.asyncio
    async def test_get_all_ordered_by_level_then_sort(self, menu_service, menu_tree):
        names = [m.name for m in await menu_service.get_all()]
        assert names == ["A", "D", "B", "C"]

    @pytest.mark.asyncio
    async def test_page_status_filter(self, menu_service, menu_tree):
        await menu_service.update(menu_tree["D"].id, MenuUpdate(status=False))

        result = await menu_service.get_page(MenuPageQuery(status=True, limit=2))
        assert result.total == 3
        assert len(result.items) == 2
        assert all(m.status for m in result.items)
        assert result.page_count == 2
        assert result.has_next is True

    @pytest.mark.asyncio
    async def test_page_name_filter(self, menu_service, menu_tree):
        result = await menu_service.get_page(MenuPageQuery(name="B"))
        assert [m.name for m in result.items] == ["B"]

    @pytest.mark.asyncio
    async def test_page_name_filter_is_literal(self, menu_service):
        await menu_service.create(MenuCreate(name="用户管理"))
        await menu_service.create(MenuCreate(name="100%完成"))

        percent = await menu_service.get_page(MenuPageQuery(name="%"))
        assert [m.name for m in percent.items] == ["100%完成"]

        underscore = await menu_service.get_page(MenuPageQuery(name="_"))
        assert underscore.items == []
        assert underscore.total == 0

    @pytest.mark.asyncio
    async def test_page_root_only(self, menu_service, menu_tree):
        result = await menu_service.get_page(MenuPageQuery(parent_id=None))
        assert {m.name for m in result.items} == {"A", "D"}

    @pytest.mark.asyncio
    async def test_page_by_parent(self, menu_service, menu_tree):
        result = await menu_service.get_page(MenuPageQuery(parent_id=menu_tree["A"].id))
        assert [m.name for m in result.items] == ["B"]

    @pytest.mark.asyncio
    async def test_page_sort_desc(self, menu_service, menu_tree):
        result = await menu_service.get_page(MenuPageQuery(sort_by="level", sort_order="desc"))
        assert result.items[0].name == "C"

    @pytest.mark.asyncio
    async def test_page_transformer(self, menu_service, menu_tree):
        result = await menu_service.get_page(MenuPageQuery(), transformer=lambda m: m.name)
        assert sorted(result.items) == ["A", "B", "C", "D"]

    @pytest.mark.asyncio
    async def test_tree(self, menu_service, menu_tree):
        tree = await menu_service.get_tree()
        assert [n.name for n in tree] == ["A", "D"]
        assert [n.name for n in tree[0].children] == ["B"]
        assert [n.name for n in tree[0].children[0].children] == ["C"]

    @pytest.mark.asyncio
    async def test_tree_orphan_becomes_root(self, menu_service, db_session, monkeypatch):
        """父节点不在结果中的菜单按根处理"""
        from unittest.mock import AsyncMock, MagicMock

        rows = [
            Menu(id="a", name="A", sort=1, hidden=False, status=True, level=1, path_ids=[], path_names=[]),
            Menu(id="c", name="C", sort=2, hidden=False, status=True, parent_id="ghost", level=2, path_ids=["ghost"], path_names=["G"]),
            Menu(id="b", name="B", sort=3, hidden=False, status=True, parent_id="a", level=2, path_ids=["a"], path_names=["A"]),
        ]
        result = MagicMock()
        result.scalars.return_value.all.return_value = rows
        monkeypatch.setattr(db_session, "execute", AsyncMock(return_value=result))

        tree = await menu_service.get_tree()
        assert [n.name for n in tree] == ["A", "C"]
        assert [n.name for n in tree[0].children] == ["B"]

    @pytest.mark.asyncio
    async def test_get_one_missing(self, menu_service):
        with pytest.raises(NotFoundException):
            await menu_service.get_one("missing")
