"""
Subject-side authorization queries.

AuthorizationFacade answers role and permission questions over a role
collection that the caller has already loaded. It never performs I/O:
load the roles first (RoleAssignment.list_roles() or
UserRepository.get_with_roles()), then ask.

    facade = AuthorizationFacade(await assignment.list_roles())
    facade.is_("Editor")                        # case-insensitive
    facade.has_role_at_least(["admin", "editor"])
    facade.can("posts.delete")                  # OR across roles

AuthorizationFacade(None) represents a collection that was never loaded:
get_roles() returns None and every check is False.

Authorizable is the mixin for subject models; it builds a facade from the
model's ``roles`` relationship.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from sqlalchemy import inspect

from .permissions import ensure_sequence

if TYPE_CHECKING:
    from rolegate.models.role import Role


# (prefix, target method, camel case) - "is_editor", "isEditor", "can_publish", "canPublish"
SHORTCUTS: tuple[tuple[str, str, bool], ...] = (
    ("is_", "is_", False),
    ("can_", "can", False),
    ("is", "is_", True),
    ("can", "can", True),
)


def _reject_defined_name(owner: object, method_name: str) -> None:
    # Shortcuts only stand in for names the class does not define itself
    if hasattr(type(owner), method_name):
        raise AttributeError(
            f"{method_name!r} is defined on {type(owner).__name__!r}; call it directly"
        )


class AuthorizationFacade:
    """Role and permission queries over a materialized role collection."""

    def __init__(self, roles: Iterable[Role] | None):
        self._roles: list[Role] | None = list(roles) if roles is not None else None

    @property
    def loaded(self) -> bool:
        return self._roles is not None

    @property
    def roles(self) -> list[Role]:
        return list(self._roles or [])

    # ============================================================
    # ROLES
    # ============================================================

    def get_roles(self) -> list[str] | None:
        """Held role slugs in load order, or None if never loaded."""
        if self._roles is None:
            return None
        return [role.slug for role in self._roles]

    def is_(self, slug: str) -> bool:
        """Check if a held role has this slug (case-insensitive)."""
        slug = slug.lower()
        return any(role.slug == slug for role in self.roles)

    def has_role(self, slug: str) -> bool:
        return self.has_role_at_least([slug])

    def has_role_at_least(self, slugs: Iterable[str]) -> bool:
        """Check if the subject holds at least one of the roles."""
        wanted = {slug.lower() for slug in ensure_sequence(slugs, "slugs")}
        return any(held in wanted for held in self.get_roles() or [])

    # ============================================================
    # PERMISSIONS
    # ============================================================

    def get_permissions(self) -> list[str]:
        """
        Permission slugs of every held role, concatenated.

        Duplicates are kept: a permission granted by two roles appears twice.
        """
        permissions: list[str] = []
        for role in self.roles:
            permissions.extend(role.get_permissions())
        return permissions

    def can(self, permission: str) -> bool:
        """Check if any held role grants the permission."""
        return any(role.can(permission) for role in self.roles)

    def can_at_least(self, permissions: Iterable[str]) -> bool:
        """Check if any single held role grants at least one of the permissions."""
        permissions = ensure_sequence(permissions, "permissions")
        return any(role.can_at_least(permissions) for role in self.roles)

    # ============================================================
    # SHORTCUTS
    # ============================================================

    def shortcut(self, method_name: str) -> bool:
        """
        Resolve a named check such as "is_admin" or "canPublish".

        Role names go through is_() so they are case-insensitive;
        permission names go through can() unchanged.

        Raises:
            AttributeError: the name does not match a shortcut, or names an
                existing attribute such as "can_at_least"
        """
        _reject_defined_name(self, method_name)
        for prefix, target, camel in SHORTCUTS:
            if not method_name.startswith(prefix):
                continue
            argument = method_name[len(prefix):]
            if not argument or argument.startswith("_"):
                continue
            if camel and not argument[0].isupper():
                continue
            return getattr(self, target)(argument)

        raise AttributeError(
            f"{type(self).__name__!r} object has no attribute {method_name!r}"
        )

    def __repr__(self) -> str:
        return f"<AuthorizationFacade roles={self.get_roles()!r}>"


class Authorizable:
    """
    Mixin for SQLAlchemy subject models with a ``roles`` relationship.

    Usage:
        class User(Base, StandardMixin, Authorizable):
            roles: Mapped[list[Role]] = relationship(
                Role, secondary=user_roles, lazy="raise",
            )

        user = await UserRepository(db).get_with_roles(user_id)
        user.can("posts.edit")

    An unloaded relationship is reported as None by get_roles() instead of
    being loaded behind the caller's back.
    """

    roles_attribute = "roles"

    @property
    def authorization(self) -> AuthorizationFacade:
        if self.roles_attribute in inspect(self).unloaded:
            return AuthorizationFacade(None)
        return AuthorizationFacade(getattr(self, self.roles_attribute))

    def get_roles(self) -> list[str] | None:
        return self.authorization.get_roles()

    def is_(self, slug: str) -> bool:
        return self.authorization.is_(slug)

    def has_role(self, slug: str) -> bool:
        return self.authorization.has_role(slug)

    def has_role_at_least(self, slugs: Iterable[str]) -> bool:
        return self.authorization.has_role_at_least(slugs)

    def get_permissions(self) -> list[str]:
        return self.authorization.get_permissions()

    def can(self, permission: str) -> bool:
        return self.authorization.can(permission)

    def can_at_least(self, permissions: Iterable[str]) -> bool:
        return self.authorization.can_at_least(permissions)

    def shortcut(self, method_name: str) -> bool:
        _reject_defined_name(self, method_name)
        return self.authorization.shortcut(method_name)
