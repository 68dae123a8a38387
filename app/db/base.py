# Import every model so Base.metadata is complete for Alembic and create_all
from app.models.base import Base  # noqa: F401
from app.models.users import User, Role, Permission, user_roles, role_permissions  # noqa: F401
from app.models.professionals import (  # noqa: F401
    Professional, ProfessionalType, VerificationDocument, professional_professional_types,
)
