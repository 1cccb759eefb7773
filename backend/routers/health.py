"""
健康检查路由
"""

import time
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from core.config import get_settings
from core.database import engine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["健康检查"])

# 系统启动时间
_start_time = time.time()


class ComponentHealth(BaseModel):
    """组件健康状态"""
    status: str
    message: Optional[str] = None
    latency_ms: Optional[float] = None


async def check_database() -> ComponentHealth:
    """检查数据库连接"""
    start = time.time()
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"数据库健康检查失败: {e}")
        return ComponentHealth(status="unhealthy", message=f"数据库连接失败: {e}")

    return ComponentHealth(
        status="healthy",
        message="数据库连接正常",
        latency_ms=round((time.time() - start) * 1000, 2)
    )


@router.get("/health")
async def health_check():
    """健康检查（不需要认证）"""
    settings = get_settings()
    database = await check_database()
    return {
        "status": "healthy" if database.status == "healthy" else "unhealthy",
        "version": settings.app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime_seconds": round(time.time() - _start_time, 2),
        "components": {"database": database.model_dump()}
    }
