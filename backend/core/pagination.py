"""
统一分页工具
提供标准化的分页查询功能
"""

import math
from typing import List, Optional, Any, Callable
from pydantic import BaseModel, Field

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


class PageResult(BaseModel):
    """分页结果"""
    items: List[Any] = Field(description="数据列表")
    total: int = Field(description="总记录数")
    page: int = Field(description="当前页码")
    limit: int = Field(description="每页数量")
    page_count: int = Field(description="总页数")

    @classmethod
    def create(
        cls,
        items: List[Any],
        total: int,
        page: int,
        limit: int
    ) -> "PageResult":
        """创建分页结果"""
        page_count = math.ceil(total / limit) if limit > 0 else 0
        return cls(
            items=items,
            total=total,
            page=page,
            limit=limit,
            page_count=page_count
        )

    @property
    def has_next(self) -> bool:
        return self.page < self.page_count

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def to_dict(self) -> dict:
        """
        转换为字典（用于API响应）

        meta 字段沿用前端表格组件约定的驼峰命名
        """
        return {
            "items": self.items,
            "meta": {
                "totalCount": self.total,
                "page": self.page,
                "limit": self.limit,
                "pageCount": self.page_count,
                "hasNext": self.has_next,
                "hasPrev": self.has_prev
            }
        }


async def paginate(
    db: AsyncSession,
    query,
    page: int = 1,
    limit: int = 20,
    transformer: Optional[Callable] = None
) -> PageResult:
    """
    通用分页查询

    Args:
        db: 数据库会话
        query: SQLAlchemy select 语句（可带 where / order_by）
        page: 页码（从1开始）
        limit: 每页数量
        transformer: 可选的数据转换函数，用于将ORM对象转换为字典或其他格式

    Usage:
        query = select(Menu).where(Menu.status == True).order_by(Menu.sort)
        result = await paginate(db, query, page=1, limit=20)
    """
    # 总数基于去掉排序的子查询统计
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar() or 0

    offset = (page - 1) * limit
    result = await db.execute(query.offset(offset).limit(limit))
    items = list(result.scalars().all())

    if transformer:
        items = [transformer(item) for item in items]

    return PageResult.create(items=items, total=total, page=page, limit=limit)


def create_page_response(
    result: PageResult,
    message: str = "获取成功"
) -> dict:
    """创建标准分页响应"""
    from .errors import success_response
    return success_response(data=result.to_dict(), message=message)
