"""
菜单数据验证模式
对外字段使用前端约定的命名（parentId / createdAt / updatedAt），
path_ids / path_names 保持原样
"""

from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


MenuSortBy = Literal["createdAt", "updatedAt", "sort", "level"]
SortOrder = Literal["asc", "desc"]


def _blank_to_none(value):
    """空字符串的 parentId 视为根节点"""
    if isinstance(value, str) and not value.strip():
        return None
    return value


class MenuCreate(BaseModel):
    """创建菜单"""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100)
    path: Optional[str] = Field(None, max_length=255)
    icon: Optional[str] = Field(None, max_length=100)
    component: Optional[str] = Field(None, max_length=255)
    permissions: Optional[List[str]] = None
    sort: int = 0
    hidden: bool = False
    status: bool = True
    parent_id: Optional[str] = Field(None, alias="parentId")

    @field_validator("parent_id", mode="before")
    @classmethod
    def normalize_parent(cls, v):
        return _blank_to_none(v)


class MenuUpdate(BaseModel):
    """
    更新菜单（部分字段）

    是否携带 parentId 决定是否为移动操作：
    未携带时只修改普通字段；携带 null 或空字符串表示移动为根节点。
    """
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    path: Optional[str] = Field(None, max_length=255)
    icon: Optional[str] = Field(None, max_length=100)
    component: Optional[str] = Field(None, max_length=255)
    permissions: Optional[List[str]] = None
    sort: Optional[int] = None
    hidden: Optional[bool] = None
    status: Optional[bool] = None
    parent_id: Optional[str] = Field(None, alias="parentId")

    @field_validator("parent_id", mode="before")
    @classmethod
    def normalize_parent(cls, v):
        return _blank_to_none(v)

    @field_validator("name", "sort", "hidden", "status")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("不能为空")
        return v

    @property
    def moves(self) -> bool:
        """请求中是否显式携带了 parentId"""
        return "parent_id" in self.model_fields_set


class MenuInfo(BaseModel):
    """菜单信息"""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    name: str
    path: Optional[str] = None
    icon: Optional[str] = None
    component: Optional[str] = None
    permissions: List[str] = []
    sort: int = 0
    hidden: bool = False
    status: bool = True
    parent_id: Optional[str] = Field(None, alias="parentId")
    level: int = 1
    path_ids: List[str] = []
    path_names: List[str] = []
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    @field_validator("permissions", "path_ids", "path_names", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []


class MenuTreeNode(MenuInfo):
    """菜单树节点"""
    children: List["MenuTreeNode"] = []


class MenuBatchDelete(BaseModel):
    """批量删除"""
    ids: List[str] = Field(..., min_length=1)


class MenuPageQuery(BaseModel):
    """
    分页查询条件

    parent_id 仅在显式设置时参与过滤，设置为 None 表示只查根节点
    """
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)
    sort_by: MenuSortBy = "sort"
    sort_order: SortOrder = "asc"
    name: Optional[str] = None
    status: Optional[bool] = None
    parent_id: Optional[str] = None

    @property
    def filters_parent(self) -> bool:
        return "parent_id" in self.model_fields_set


def menu_to_dict(menu) -> dict:
    """ORM 对象转为对外 JSON 结构"""
    return MenuInfo.model_validate(menu).model_dump(by_alias=True)
