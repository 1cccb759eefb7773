"""
系统引导初始化
首次启动时创建默认管理员账户，可选写入演示数据
"""

import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from .database import async_session
from .config import get_settings
from .security import hash_password
from models import User

logger = logging.getLogger(__name__)

# 演示账户：(用户名, 昵称, 角色)
DEMO_USERS = [
    ("admin", "系统管理员", "admin"),
    ("user", "普通用户", "user"),
]
DEMO_PASSWORD = "Aa123456"

# 演示菜单树，子菜单通过 children 声明
DEMO_MENUS = [
    {
        "name": "仪表盘", "path": "/dashboard", "icon": "DashboardOutlined",
        "component": "/dashboard/index", "sort": 1, "permissions": ["dashboard:view"],
    },
    {
        "name": "系统管理", "path": "/system", "icon": "SettingOutlined",
        "component": "LAYOUT", "sort": 100, "permissions": ["system:view"],
        "children": [
            {
                "name": "用户管理", "path": "/system/user", "icon": "UserOutlined",
                "component": "/system/user/index", "sort": 1,
                "permissions": ["user:view", "user:create", "user:edit", "user:delete"],
            },
            {
                "name": "角色管理", "path": "/system/role", "icon": "TeamOutlined",
                "component": "/system/role/index", "sort": 2,
                "permissions": ["role:view", "role:create", "role:edit", "role:delete"],
            },
            {
                "name": "菜单管理", "path": "/system/menu", "icon": "MenuOutlined",
                "component": "/system/menu/index", "sort": 3,
                "permissions": ["menu:view", "menu:create", "menu:edit", "menu:delete"],
            },
        ],
    },
]


async def init_admin_user() -> dict:
    """
    初始化默认管理员账户
    仅在首次启动时创建，如果已存在管理员账户则跳过
    """
    settings = get_settings()
    admin_password = settings.admin_password.strip()
    if not admin_password:
        logger.error("管理员密码不能为空")
        return {"created": False, "message": "管理员密码不能为空"}

    async with async_session() as db:
        result = await db.execute(
            select(User).where(
                (User.role == "admin") | (User.username == settings.admin_username)
            )
        )
        existing = result.scalars().first()
        if existing:
            logger.debug(f"管理员账户已存在: {existing.username}")
            return {"created": False, "message": f"管理员账户已存在: {existing.username}"}

        db.add(User(
            username=settings.admin_username,
            password_hash=hash_password(admin_password),
            nickname=settings.admin_nickname,
            role="admin",
            permissions=[],
            is_active=True
        ))
        await db.commit()

    logger.info(f"默认管理员账户创建成功: {settings.admin_username}")
    logger.warning("⚠️  正在使用配置中的默认密码，请立即修改！")
    return {
        "created": True,
        "username": settings.admin_username,
        "message": f"默认管理员账户已创建: {settings.admin_username}"
    }


async def _seed_users(db: AsyncSession) -> int:
    created = 0
    for username, nickname, role in DEMO_USERS:
        exists = await db.execute(select(User.id).where(User.username == username))
        if exists.scalar_one_or_none() is not None:
            continue
        db.add(User(
            username=username,
            password_hash=hash_password(DEMO_PASSWORD),
            nickname=nickname,
            role=role,
            permissions=[],
            is_active=True
        ))
        created += 1
    await db.commit()
    return created


async def _seed_menus(db: AsyncSession) -> int:
    """通过菜单服务逐个创建，保证派生字段正确"""
    from modules.menu.menu_models import Menu
    from modules.menu.menu_schemas import MenuCreate
    from modules.menu.menu_services import MenuService

    count = (await db.execute(select(func.count()).select_from(Menu))).scalar() or 0
    if count:
        logger.debug(f"菜单表已有 {count} 条数据，跳过演示菜单")
        return 0

    service = MenuService(db)
    created = 0
    pending = [(item, None) for item in DEMO_MENUS]
    while pending:
        item, parent_id = pending.pop(0)
        values = {k: v for k, v in item.items() if k != "children"}
        menu = await service.create(MenuCreate(**values, parent_id=parent_id))
        created += 1
        pending.extend((child, menu.id) for child in item.get("children", []))
    return created


async def seed_demo_data() -> dict:
    """写入演示用户和菜单树（已存在的数据不会重复写入）"""
    async with async_session() as db:
        users = await _seed_users(db)
        menus = await _seed_menus(db)
    logger.info(f"演示数据写入完成: 用户 {users} 个，菜单 {menus} 个")
    return {"users": users, "menus": menus}
