"""
数据验证模式目录
"""

from .auth import UserLogin, UserInfo

__all__ = ["UserLogin", "UserInfo"]
