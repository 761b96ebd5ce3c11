"""
rolegate - role-based access control for SQLAlchemy applications.

Attach roles to users, grant permissions to roles, and answer
"can this user do X?" from the roles a user holds.

    from rolegate import RoleAssignment, RoleService, UserRepository

    editor = await RoleService(db).create_role("Editor", permissions=["posts.*"])
    await RoleAssignment.for_session(db, user.id).assign_role(editor.id)
    await db.commit()

    user = await UserRepository(db).get_with_roles(user.id)
    user.can("posts.delete")   # True
    user.is_("EDITOR")         # True
"""

from rolegate.core.exceptions import (
    RBACError,
    NotFoundError,
    StorageError,
    InvalidInputError,
    ConflictError,
)
from rolegate.rbac import AuthorizationFacade, Authorizable, PermissionSet
from rolegate.models import Permission, Role, User
from rolegate.repositories import UserRepository
from rolegate.services import RoleAssignment, RoleService

__version__ = "0.1.0"

__all__ = [
    # Errors
    "RBACError",
    "NotFoundError",
    "StorageError",
    "InvalidInputError",
    "ConflictError",
    # Evaluation
    "PermissionSet",
    "AuthorizationFacade",
    "Authorizable",
    # Models
    "Permission",
    "Role",
    "User",
    # Services
    "RoleAssignment",
    "RoleService",
    "UserRepository",
]
