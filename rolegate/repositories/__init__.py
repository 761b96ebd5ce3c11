"""
Repository pattern for data access.
"""

from rolegate.repositories.base import BaseRepository
from rolegate.repositories.links import SqlRolePermissionLink, SqlSubjectRoleLink
from rolegate.repositories.role import SqlPermissionRepository, SqlRoleRepository
from rolegate.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "SqlRoleRepository",
    "SqlPermissionRepository",
    "SqlSubjectRoleLink",
    "SqlRolePermissionLink",
    "UserRepository",
]
