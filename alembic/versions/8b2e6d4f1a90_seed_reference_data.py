"""Seed roles, permissions and professional types

Revision ID: 8b2e6d4f1a90
Revises: 3f9a1c2b7d45
Create Date: 2026-09-28 14:40:02.117630

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from app.db.reference_data import ROLES, PERMISSIONS, PROFESSIONAL_TYPES, ROLE_PERMISSIONS


# revision identifiers, used by Alembic.
revision: str = '8b2e6d4f1a90'
down_revision: Union[str, None] = '3f9a1c2b7d45'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _lookup_table(name: str) -> sa.Table:
    return sa.table(
        name,
        sa.column('id', sa.Integer),
        sa.column('name', sa.String),
        sa.column('description', sa.Text),
    )


roles = _lookup_table('roles')
permissions = _lookup_table('permissions')
professional_types = _lookup_table('professional_types')
role_permissions = sa.table(
    'role_permissions',
    sa.column('role_id', sa.Integer),
    sa.column('permission_id', sa.Integer),
)


def upgrade() -> None:
    """Upgrade schema."""
    op.bulk_insert(roles, ROLES)
    op.bulk_insert(permissions, PERMISSIONS)
    op.bulk_insert(professional_types, PROFESSIONAL_TYPES)

    connection = op.get_bind()
    role_ids = dict(connection.execute(sa.select(roles.c.name, roles.c.id)).all())
    permission_ids = dict(connection.execute(sa.select(permissions.c.name, permissions.c.id)).all())

    op.bulk_insert(role_permissions, [
        {"role_id": role_ids[role], "permission_id": permission_ids[permission]}
        for role, granted in ROLE_PERMISSIONS.items()
        for permission in granted
    ])


def downgrade() -> None:
    """Downgrade schema."""
    op.execute(role_permissions.delete())
    op.execute(professional_types.delete().where(
        professional_types.c.name.in_([t["name"] for t in PROFESSIONAL_TYPES])
    ))
    op.execute(permissions.delete().where(permissions.c.name.in_([p["name"] for p in PERMISSIONS])))
    op.execute(roles.delete().where(roles.c.name.in_([r["name"] for r in ROLES])))
