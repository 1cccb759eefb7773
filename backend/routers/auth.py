"""
认证路由
用户登录、当前用户信息
"""

import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from core.config import get_settings
from core.database import get_db
from core.errors import AuthException, ErrorCode, NotFoundException, success_response
from core.security import (
    verify_password,
    create_token_pair,
    TokenData,
    get_current_user
)
from models import User
from schemas import UserLogin, UserInfo

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["认证"])


@router.post("/login")
async def login(data: UserLogin, request: Request, db: AsyncSession = Depends(get_db)):
    """用户登录"""
    client_ip = request.client.host if request.client else "unknown"

    result = await db.execute(select(User).where(User.username == data.username))
    user = result.scalar_one_or_none()

    if not user or not verify_password(data.password, user.password_hash):
        logger.warning(f"登录失败 - IP: {client_ip}, 用户名: {data.username}")
        raise AuthException(ErrorCode.LOGIN_FAILED)

    if not user.is_active:
        logger.warning(f"登录被阻止 - IP: {client_ip}, 用户ID: {user.id}, 原因: 账户已禁用")
        raise AuthException(ErrorCode.ACCOUNT_DISABLED)

    user.last_login = datetime.now(timezone.utc)
    await db.commit()

    permissions = user.permissions if isinstance(user.permissions, list) else []
    token_data = TokenData(
        user_id=user.id,
        username=user.username,
        role=user.role,
        permissions=permissions
    )
    access_token, refresh_token = create_token_pair(token_data)

    settings = get_settings()
    logger.info(f"用户登录成功: {user.username}")

    return success_response({
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "expires_in": settings.jwt_expire_minutes * 60,
        "user": {
            "id": user.id,
            "username": user.username,
            "nickname": user.nickname,
            "role": user.role,
            "permissions": permissions
        }
    }, "登录成功")


@router.get("/me")
async def get_me(
    current_user: TokenData = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """获取当前用户信息"""
    user = await db.get(User, current_user.user_id)
    if not user:
        raise NotFoundException("用户", current_user.user_id)

    return success_response(UserInfo.model_validate(user).model_dump(), "获取成功")
