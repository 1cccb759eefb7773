# -*- coding: utf-8 -*-
"""
演示数据初始化工具
建表后写入管理员账号、演示用户和演示菜单树

运行: python scripts/seed_demo.py
"""

import asyncio
import logging
import sys
from pathlib import Path

# 确保可以导入项目模块
BACKEND_DIR = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(BACKEND_DIR))

from core.bootstrap import init_admin_user, seed_demo_data
from core.database import init_db, close_db

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger("seed_demo")


async def main() -> int:
    try:
        await init_db()
        admin = await init_admin_user()
        result = await seed_demo_data()
    finally:
        await close_db()

    if admin.get("created"):
        logger.info(f"管理员账号已创建: {admin['username']}")
    logger.info(f"演示数据写入完成: 用户 {result['users']} 个, 菜单 {result['menus']} 个")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
