"""
能力（Ability）授权
基于 动作 + 资源类型 的权限判定，支持按资源实例字段附加条件

各模块通过 register_ability 注册自己的能力工厂，
路由通过 require_policy 声明所需的动作，业务服务层本身不感知授权。
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .database import get_db
from .errors import PermissionException
from .security import TokenData, get_current_user

logger = logging.getLogger(__name__)


class Action(str, Enum):
    """授权动作，MANAGE 表示任意动作"""
    MANAGE = "manage"
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class Rule:
    """单条授权规则"""
    action: Action
    resource: str
    conditions: Dict[str, Any] = field(default_factory=dict)

    def matches(self, action: Action, resource: str, instance: Any = None) -> bool:
        if self.resource != resource:
            return False
        if self.action != Action.MANAGE and self.action != action:
            return False
        # 类型级检查不校验条件；实例级检查要求字段全部相等
        if instance is None or not self.conditions:
            return True
        return all(getattr(instance, key, None) == value for key, value in self.conditions.items())


class Ability:
    """某个主体拥有的全部规则"""

    def __init__(self, rules: Optional[List[Rule]] = None):
        self.rules = list(rules or [])

    def can(self, action: Action, resource: str, instance: Any = None) -> bool:
        return any(rule.matches(Action(action), resource, instance) for rule in self.rules)

    def cannot(self, action: Action, resource: str, instance: Any = None) -> bool:
        return not self.can(action, resource, instance)


class AbilityBuilder:
    """
    规则构建器

    Usage:
        builder = AbilityBuilder()
        builder.can(Action.READ, "Menu")
        builder.can(Action.UPDATE, "Menu", status=True)
        ability = builder.build()
    """

    def __init__(self):
        self._rules: List[Rule] = []

    def can(self, action: Action, resource: str, **conditions) -> "AbilityBuilder":
        self._rules.append(Rule(Action(action), resource, conditions))
        return self

    def build(self) -> Ability:
        return Ability(self._rules)


AbilityFactory = Callable[[TokenData], Ability]
InstanceLoader = Callable[[AsyncSession, Any], Awaitable[Any]]


@dataclass
class PolicyRegistration:
    """资源类型的授权注册信息"""
    factory: AbilityFactory
    loader: Optional[InstanceLoader] = None


_registry: Dict[str, PolicyRegistration] = {}


def register_ability(resource: str, factory: AbilityFactory, loader: Optional[InstanceLoader] = None):
    """
    注册资源类型的能力工厂

    Args:
        resource: 资源类型名称，如 "Menu"
        factory: 根据当前用户构建 Ability 的函数
        loader: 可选，按 ID 加载资源实例（不存在时应抛出 NotFoundException）
    """
    _registry[resource] = PolicyRegistration(factory=factory, loader=loader)
    logger.debug(f"注册能力工厂: {resource}")


def get_registration(resource: str) -> Optional[PolicyRegistration]:
    return _registry.get(resource)


def authorize(principal: TokenData, action: Action, resource: str, instance: Any = None) -> bool:
    """判断主体能否对资源执行动作；未注册的资源类型一律拒绝"""
    registration = get_registration(resource)
    if registration is None:
        logger.warning(f"资源类型 {resource} 未注册能力工厂，拒绝访问")
        return False
    ability = registration.factory(principal)
    return ability.can(action, resource, instance)


def require_policy(action: Action, resource: str, id_param: Optional[str] = None):
    """
    授权检查依赖工厂

    Args:
        action: 所需动作
        resource: 资源类型
        id_param: 路径参数名；提供时先加载资源实例再做实例级检查

    Usage:
        @router.put("/{menu_id}")
        async def update(user: TokenData = Depends(require_policy(Action.UPDATE, "Menu", "menu_id"))):
            ...
    """
    async def policy_checker(
        request: Request,
        user: TokenData = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
    ) -> TokenData:
        registration = get_registration(resource)
        if registration is None:
            raise PermissionException(f"未声明资源 {resource} 的访问策略")

        instance = None
        if id_param and registration.loader:
            item_id = request.path_params.get(id_param)
            if item_id is not None:
                instance = await registration.loader(db, item_id)

        if not authorize(user, action, resource, instance):
            logger.info(f"拒绝访问: user={user.username} action={Action(action).value} resource={resource}")
            raise PermissionException(f"缺少权限: {resource}.{Action(action).value}")
        return user

    return policy_checker
