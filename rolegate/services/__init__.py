"""
Business logic services.
"""

from .assignment import RoleAssignment
from .role import RoleService

__all__ = ["RoleAssignment", "RoleService"]
