"""
菜单数据模型
表名遵循隔离协议：menu_前缀
物化路径：level / path_ids / path_names 为冗余的祖先链，由服务层维护
"""

import uuid
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import String, Integer, Boolean, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Menu(Base):
    """导航菜单（无限层级）"""
    __tablename__ = "menu_menus"
    __table_args__ = {"extend_existing": True, "comment": "导航菜单表"}

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(100))  # 菜单名称
    path: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)  # 路由地址
    icon: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    component: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)  # 前端组件
    permissions: Mapped[Optional[list]] = mapped_column(JSON, nullable=True, default=list)

    # 同级排序，升序
    sort: Mapped[int] = mapped_column(Integer, default=0)
    hidden: Mapped[bool] = mapped_column(Boolean, default=False)
    status: Mapped[bool] = mapped_column(Boolean, default=True)

    # 有子菜单时数据库拒绝删除父菜单
    parent_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("menu_menus.id", ondelete="RESTRICT"),
        nullable=True,
        index=True
    )

    # 物化路径（根节点 level=1，path_ids/path_names 为空）
    level: Mapped[int] = mapped_column(Integer, default=1, index=True)
    path_ids: Mapped[list] = mapped_column(JSON, default=list)
    path_names: Mapped[list] = mapped_column(JSON, default=list)

    # 乐观锁版本号
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Menu {self.id} {self.name!r} level={self.level}>"
