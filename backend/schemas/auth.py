"""
认证数据验证
登录请求与当前用户信息
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserLogin(BaseModel):
    """用户登录"""
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1, max_length=128)


class UserInfo(BaseModel):
    """用户信息"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    nickname: Optional[str] = None
    role: str
    permissions: List[str] = []
    is_active: bool
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    @field_validator("permissions", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []
