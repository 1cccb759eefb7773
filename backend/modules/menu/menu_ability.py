"""
菜单访问能力
admin 角色可管理全部菜单；其他用户可读，
并按权限字符串 menu.<动作> 追加对应的写权限
"""

from core.ability import Ability, AbilityBuilder, Action, register_ability
from core.security import TokenData

from .menu_services import load_menu

MENU_RESOURCE = "Menu"


def build_menu_ability(user: TokenData) -> Ability:
    builder = AbilityBuilder()

    if user.role == "admin":
        builder.can(Action.MANAGE, MENU_RESOURCE)
        return builder.build()

    builder.can(Action.READ, MENU_RESOURCE)
    granted = set(user.permissions or [])
    for action in (Action.CREATE, Action.UPDATE, Action.DELETE):
        if f"menu.{action.value}" in granted:
            builder.can(action, MENU_RESOURCE)
    return builder.build()


register_ability(MENU_RESOURCE, build_menu_ability, loader=load_menu)
