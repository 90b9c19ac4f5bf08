# parish_registry/models/__init__.py
"""
Central model registry.

Import this once at startup (main.py, alembic env, tests) so SQLAlchemy sees
every mapped class before relationships are configured.
"""
from parish_registry.db import Base  # re-export Base

from .rbac import Role, RolePermission, User, UserRole  # noqa: F401
from .family import Family  # noqa: F401
from .member import Gender, MatrimonyStatus, Member, MembershipStatus  # noqa: F401
from .sacrament import DetailedRecordKind, Sacrament, SacramentType  # noqa: F401
from .baptism_record import BaptismRecord  # noqa: F401
from .marriage_record import MarriageRecord  # noqa: F401
from .tithe import PaymentMethod, Tithe, TitheType  # noqa: F401
from .activity import Activity, ActivityParticipant, ActivityStatus, ActivityType, ParticipantRole  # noqa: F401

__all__ = [
    "Activity",
    "ActivityParticipant",
    "ActivityStatus",
    "ActivityType",
    "Base",
    "BaptismRecord",
    "DetailedRecordKind",
    "Family",
    "Gender",
    "MarriageRecord",
    "MatrimonyStatus",
    "Member",
    "MembershipStatus",
    "ParticipantRole",
    "PaymentMethod",
    "Role",
    "RolePermission",
    "Sacrament",
    "SacramentType",
    "Tithe",
    "TitheType",
    "User",
    "UserRole",
]
