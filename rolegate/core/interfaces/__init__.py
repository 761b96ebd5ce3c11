"""
Core interfaces - Protocol definitions for the storage boundary.
Implementations should satisfy these protocols.
"""

from .repositories import (
    SyncResult,
    RoleRepository,
    SubjectRoleLink,
    RolePermissionLink,
)

__all__ = [
    "SyncResult",
    "RoleRepository",
    "SubjectRoleLink",
    "RolePermissionLink",
]
