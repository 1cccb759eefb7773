"""
Menu Admin - 主入口
基于FastAPI的导航菜单管理后端

- 菜单树（物化路径）的增删改查
- 基于能力的访问控制
- 请求日志中间件
- 标准化错误处理
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import get_settings
from core.database import init_db, close_db
from core.bootstrap import init_admin_user, seed_demo_data
from core.middleware import RequestLoggingMiddleware
from core.errors import register_exception_handlers

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# 减少第三方库的日志输出
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # ==================== 启动阶段 ====================
    logger.info(f"🚀 正在启动 {settings.app_name} v{settings.app_version}...")

    # 1. 初始化数据库
    await init_db()

    # 2. 初始化默认管理员账户（首次启动时）
    try:
        admin_result = await init_admin_user()
        if admin_result.get("created"):
            logger.warning(f"⚠️ 已创建默认管理员: {admin_result['username']}，请尽快登录并修改密码！")
    except Exception as e:
        logger.error(f"❌ 初始化管理员失败: {e}")

    # 3. 演示数据（可选）
    if settings.seed_demo_data:
        await seed_demo_data()

    logger.info(f"🎉 {settings.app_name} 启动完成! 访问: http://localhost:8000")

    yield

    # ==================== 关闭阶段 ====================
    logger.info("🛑 系统关闭中...")
    await close_db()
    logger.info("👋 系统已关闭")


# ==================== 创建应用 ====================
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="导航菜单管理后端",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)


# ==================== 中间件配置（后添加的先执行） ====================

# 1. CORS 跨域配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 生产环境应限制为具体域名
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# 2. 请求日志中间件
app.add_middleware(
    RequestLoggingMiddleware,
    skip_paths=["/health", "/api/docs", "/api/redoc", "/api/openapi.json"],
    slow_request_threshold=settings.slow_request_threshold
)


# ==================== 异常处理器 ====================
register_exception_handlers(app)


# ==================== 注册路由 ====================
from routers import auth, health
from core.loader import mount_module

app.include_router(auth.router)
app.include_router(health.router)
mount_module(app, "menu")


@app.get("/api", include_in_schema=False)
async def api_info():
    """API 信息"""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/api/docs",
        "health": "/health"
    }


# ==================== 启动入口 ====================
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
