"""创建用户表与菜单表

Revision ID: 3f7a9c1d2e40
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f7a9c1d2e40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # 用户表
    op.create_table(
        'sys_users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False, comment='主键ID'),
        sa.Column('username', sa.String(50), nullable=False, comment='用户名'),
        sa.Column('password_hash', sa.String(128), nullable=False, comment='密码哈希'),
        sa.Column('nickname', sa.String(50), nullable=True, comment='昵称'),
        sa.Column('role', sa.String(20), nullable=False, comment='角色：admin/user'),
        sa.Column('permissions', sa.JSON(), nullable=True, comment='细粒度权限'),
        sa.Column('is_active', sa.Boolean(), nullable=False, comment='是否启用'),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True, comment='最后登录时间'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='创建时间'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, comment='更新时间'),
        sa.PrimaryKeyConstraint('id'),
        comment='用户表'
    )
    op.create_index('ix_sys_users_username', 'sys_users', ['username'], unique=True)

    # 菜单表（物化路径）
    op.create_table(
        'menu_menus',
        sa.Column('id', sa.String(36), nullable=False, comment='主键ID（UUID）'),
        sa.Column('name', sa.String(100), nullable=False, comment='菜单名称'),
        sa.Column('path', sa.String(255), nullable=True, comment='路由地址'),
        sa.Column('icon', sa.String(100), nullable=True, comment='图标'),
        sa.Column('component', sa.String(255), nullable=True, comment='前端组件'),
        sa.Column('permissions', sa.JSON(), nullable=True, comment='权限标识'),
        sa.Column('sort', sa.Integer(), nullable=False, comment='同级排序'),
        sa.Column('hidden', sa.Boolean(), nullable=False, comment='是否隐藏'),
        sa.Column('status', sa.Boolean(), nullable=False, comment='是否启用'),
        sa.Column('parent_id', sa.String(36), nullable=True, comment='父菜单ID'),
        sa.Column('level', sa.Integer(), nullable=False, comment='层级，根为1'),
        sa.Column('path_ids', sa.JSON(), nullable=False, comment='祖先ID链'),
        sa.Column('path_names', sa.JSON(), nullable=False, comment='祖先名称链'),
        sa.Column('version', sa.Integer(), nullable=False, comment='乐观锁版本号'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='创建时间'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, comment='更新时间'),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['parent_id'], ['menu_menus.id'], ondelete='RESTRICT'),
        comment='导航菜单表'
    )
    op.create_index('ix_menu_menus_parent_id', 'menu_menus', ['parent_id'])
    op.create_index('ix_menu_menus_level', 'menu_menus', ['level'])


def downgrade() -> None:
    op.drop_index('ix_menu_menus_level', 'menu_menus')
    op.drop_index('ix_menu_menus_parent_id', 'menu_menus')
    op.drop_table('menu_menus')
    op.drop_index('ix_sys_users_username', 'sys_users')
    op.drop_table('sys_users')
