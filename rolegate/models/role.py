"""
Role model and the join tables.

Roles group permissions together and can be assigned to users.

Usage:
    editor = Role(slug="editor", name="Editor", permissions=[edit, manage])
    editor.can("posts.delete")                   # via "posts.*"
    editor.can_at_least(["posts.view", "x.y"])   # True if any matches
"""

from typing import Iterable

import structlog
from sqlalchemy import Column, DateTime, ForeignKey, String, Table, Uuid, func, inspect
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from rolegate.core.config import get_settings
from rolegate.rbac.permissions import PermissionSet

from .base import Base, StandardMixin
from .permission import Permission

logger = structlog.get_logger()


# Many-to-many between users and roles. The composite primary key makes
# a (user, role) pair unique.
user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Uuid(as_uuid=True), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column(
        "updated_at",
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    ),
)

# Many-to-many between roles and permissions
role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column("role_id", Uuid(as_uuid=True), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "permission_id",
        Uuid(as_uuid=True),
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column(
        "updated_at",
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    ),
)


class Role(Base, StandardMixin):
    """
    Role definition.

    The slug is the stable identifier and is always stored lowercase.
    Permissions are loaded together with the role (selectin), so checks
    never trigger I/O.
    """

    __tablename__ = "roles"

    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    permissions: Mapped[list[Permission]] = relationship(
        Permission,
        secondary=role_permissions,
        lazy="selectin",
    )

    @validates("slug")
    def _normalize_slug(self, key: str, value: str | None) -> str | None:
        return value.strip().lower() if value is not None else None

    def _loaded_permissions(self) -> list[Permission]:
        state = inspect(self)
        if state.has_identity and "permissions" in state.unloaded:
            # Expired or detached without its permissions; never load implicitly.
            logger.warning(
                "Role permissions not loaded, treating as empty",
                role_id=str(state.identity[0]) if state.identity else None,
            )
            return []
        return list(self.permissions)

    @property
    def permission_set(self) -> PermissionSet:
        rbac = get_settings().rbac
        return PermissionSet(
            (p.slug for p in self._loaded_permissions()),
            wildcard=rbac.wildcard,
            separator=rbac.separator,
        )

    def get_permissions(self) -> list[str]:
        """Permission slugs owned by this role, in load order."""
        return self.permission_set.slugs

    def can(self, permission: str) -> bool:
        """Check if the role grants the permission (exact or wildcard)."""
        return self.permission_set.contains(permission)

    def can_at_least(self, permissions: Iterable[str]) -> bool:
        """Check if the role grants at least one of the permissions."""
        return self.permission_set.contains_any(permissions)

    def __repr__(self) -> str:
        return f"<Role {self.slug}>"
