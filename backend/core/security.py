"""
统一鉴权模块
提供JWT令牌生成、验证和密码处理功能
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import bcrypt
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from .config import get_settings

# Bearer令牌认证（缺少令牌时由 get_current_user 统一返回 401）
security = HTTPBearer(auto_error=False)


class TokenData(BaseModel):
    """令牌数据（即授权检查中的当前主体）"""
    user_id: int
    username: str
    role: str = "user"
    permissions: list[str] = []


def hash_password(password: str) -> str:
    """
    加密密码
    bcrypt 限制密码长度不超过 72 字节
    """
    password_bytes = str(password).encode('utf-8')[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt())
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证密码"""
    password_bytes = str(plain_password).encode('utf-8')[:72]
    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))
    except ValueError:
        # 存储的哈希格式不正确
        return False


def create_token(data: TokenData, expires_delta: Optional[timedelta] = None, token_type: str = "access") -> str:
    """
    创建JWT令牌

    Args:
        data: 令牌数据
        expires_delta: 过期时间增量
        token_type: 令牌类型（access 或 refresh）
    """
    settings = get_settings()
    to_encode = data.model_dump()

    if expires_delta is None:
        if token_type == "refresh":
            expires_delta = timedelta(days=settings.jwt_refresh_expire_days)
        else:
            expires_delta = timedelta(minutes=settings.jwt_expire_minutes)

    to_encode.update({
        "exp": datetime.now(timezone.utc) + expires_delta,
        "type": token_type
    })

    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_token_pair(data: TokenData) -> tuple[str, str]:
    """
    创建访问令牌和刷新令牌对

    Returns:
        (access_token, refresh_token)
    """
    return create_token(data, token_type="access"), create_token(data, token_type="refresh")


def decode_token(token: str, expected_type: Optional[str] = None) -> Optional[TokenData]:
    """
    解码JWT令牌

    Args:
        token: 待解码的JWT
        expected_type: 期望的令牌类型（"access"/"refresh"），不匹配则返回None
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if expected_type and payload.get("type") != expected_type:
        return None
    return TokenData(**payload)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenData:
    """获取当前用户（依赖注入用）"""
    token_data = decode_token(credentials.credentials, expected_type="access") if credentials else None

    if token_data is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="无效的认证凭据",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return token_data
