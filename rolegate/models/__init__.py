"""
Database models.
"""

from .base import (
    Base,
    TimestampMixin,
    UUIDMixin,
    StandardMixin,
)
from .permission import Permission
from .role import Role, role_permissions, user_roles
from .user import User

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "StandardMixin",
    # Join tables
    "role_permissions",
    "user_roles",
    # Models
    "Permission",
    "Role",
    "User",
]
