"""
菜单模块测试夹具
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from modules.menu.menu_schemas import MenuCreate
from modules.menu.menu_services import MenuService


@pytest.fixture
def menu_service(db_session: AsyncSession) -> MenuService:
    return MenuService(db_session)


@pytest_asyncio.fixture
async def menu_tree(menu_service: MenuService) -> dict:
    """
    A (根)
    └── B
        └── C
    D (根)
    """
    a = await menu_service.create(MenuCreate(name="A", sort=1))
    b = await menu_service.create(MenuCreate(name="B", parent_id=a.id, sort=1))
    c = await menu_service.create(MenuCreate(name="C", parent_id=b.id, sort=1))
    d = await menu_service.create(MenuCreate(name="D", sort=2))
    return {"A": a, "B": b, "C": c, "D": d}


@pytest_asyncio.fixture
async def editor_client(client: AsyncClient, db_session: AsyncSession) -> AsyncClient:
    """拥有 menu.create / menu.update 权限、但不能删除的普通用户"""
    from tests.test_conftest import create_test_user, get_auth_token

    data = {
        "username": "editor",
        "password": "Editor@123456",
        "role": "user",
        "permissions": ["menu.create", "menu.update"],
    }
    await create_test_user(db_session, data)
    token = await get_auth_token(client, data["username"], data["password"])
    client.headers["Authorization"] = f"Bearer {token}"
    return client
