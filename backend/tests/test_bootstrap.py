"""
引导初始化与演示数据测试
"""

import pytest
from unittest.mock import patch
from sqlalchemy import select

from core.bootstrap import init_admin_user, seed_demo_data, DEMO_MENUS
from core.config import Settings
from models import User


class TestBootstrap:
    """系统引导初始化测试"""

    @pytest.mark.asyncio
    async def test_init_admin_user_creates_once(self, db_session):
        result = await init_admin_user()
        assert result["created"] is True
        assert result["username"] == "admin"

        again = await init_admin_user()
        assert again["created"] is False

        users = (await db_session.execute(select(User).where(User.role == "admin"))).scalars().all()
        assert len(users) == 1

    @pytest.mark.asyncio
    async def test_init_admin_user_empty_password(self, db_session):
        with patch("core.bootstrap.get_settings", return_value=Settings(admin_password="  ")):
            result = await init_admin_user()
        assert result["created"] is False


class TestSeedDemoData:
    """演示数据"""

    @pytest.mark.asyncio
    async def test_seed_demo_data(self, db_session):
        from modules.menu.menu_models import Menu

        result = await seed_demo_data()
        assert result["users"] == 2
        assert result["menus"] == 5

        menus = {m.name: m for m in (await db_session.execute(select(Menu))).scalars().all()}
        system = menus["系统管理"]
        assert menus["仪表盘"].level == 1
        assert menus["菜单管理"].level == 2
        assert menus["菜单管理"].parent_id == system.id
        assert menus["菜单管理"].path_ids == [system.id]
        assert menus["菜单管理"].path_names == ["系统管理"]
        assert menus["菜单管理"].permissions == ["menu:view", "menu:create", "menu:edit", "menu:delete"]

        roles = {u.username: u.role for u in (await db_session.execute(select(User))).scalars().all()}
        assert roles == {"admin": "admin", "user": "user"}

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, db_session):
        await seed_demo_data()
        result = await seed_demo_data()
        assert result == {"users": 0, "menus": 0}

    def test_demo_tree_shape(self):
        assert [m["name"] for m in DEMO_MENUS] == ["仪表盘", "系统管理"]
        assert [c["name"] for c in DEMO_MENUS[1]["children"]] == ["用户管理", "角色管理", "菜单管理"]
