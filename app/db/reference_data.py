# app/db/reference_data.py
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.users import Role, Permission
from app.models.professionals import ProfessionalType

ROLES = [
    {"name": "customer", "description": "Regular user who can buy gemstones and jewelry"},
    {"name": "dealer", "description": "Professional who can sell gemstones and jewelry"},
    {"name": "cutter", "description": "Professional who can cut rough stones into gemstones"},
    {"name": "appraiser", "description": "Professional who can appraise and certify gemstones"},
    {"name": "admin", "description": "System administrator"},
]

PROFESSIONAL_TYPES = [
    {"name": "dealer", "description": "Buys and sells gemstones and jewelry"},
    {"name": "cutter", "description": "Specializes in cutting and polishing rough stones"},
    {"name": "appraiser", "description": "Evaluates and certifies gemstones"},
    {"name": "jeweler", "description": "Designs and sets gemstones into jewelry"},
]

PERMISSIONS = [
    {"name": "user:read", "description": "View user information"},
    {"name": "user:write", "description": "Edit user information"},
    {"name": "gemstone:read", "description": "View gemstone information"},
    {"name": "gemstone:write", "description": "Edit gemstone information"},
    {"name": "gemstone:delete", "description": "Delete gemstone entries"},
    {"name": "rough-stone:read", "description": "View rough stone information"},
    {"name": "rough-stone:write", "description": "Edit rough stone information"},
    {"name": "rough-stone:delete", "description": "Delete rough stone entries"},
    {"name": "professional:verify", "description": "Verify professional accounts"},
    {"name": "admin:access", "description": "Access admin functionality"},
]

ROLE_PERMISSIONS = {
    "customer": ["user:read", "gemstone:read", "rough-stone:read"],
    "dealer": ["user:read", "gemstone:read", "gemstone:write", "rough-stone:read", "rough-stone:write"],
    "cutter": ["user:read", "gemstone:read", "gemstone:write", "rough-stone:read", "rough-stone:write"],
    "appraiser": ["user:read", "gemstone:read", "gemstone:write", "rough-stone:read"],
    "admin": [
        "user:read", "user:write", "gemstone:read", "gemstone:write", "gemstone:delete",
        "rough-stone:read", "rough-stone:write", "rough-stone:delete", "professional:verify", "admin:access",
    ],
}


async def seed_reference_data(db: AsyncSession) -> None:
    """Insert roles, permissions and professional types that are missing"""
    existing_roles = set((await db.execute(select(Role.name))).scalars().all())
    existing_permissions = set((await db.execute(select(Permission.name))).scalars().all())
    existing_types = set((await db.execute(select(ProfessionalType.name))).scalars().all())

    permissions = {}
    for data in PERMISSIONS:
        if data["name"] not in existing_permissions:
            permission = Permission(**data)
            db.add(permission)
            permissions[data["name"]] = permission

    for data in ROLES:
        if data["name"] in existing_roles:
            continue
        role = Role(**data)
        role.permissions = [
            permissions[name] for name in ROLE_PERMISSIONS[data["name"]] if name in permissions
        ]
        db.add(role)

    for data in PROFESSIONAL_TYPES:
        if data["name"] not in existing_types:
            db.add(ProfessionalType(**data))

    await db.commit()
