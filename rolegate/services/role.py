"""
Role Service - Manage roles, permissions, and the permissions granted to each role.

Usage:
    service = RoleService(db)

    # Create a role with permissions
    role = await service.create_role(
        name="Editor",
        permissions=["posts.edit", "posts.*"],
    )

    # Grant / take away one permission
    await service.assign_permission(role.id, publish.id)
    await service.revoke_permission(role.id, publish.id)

    role.can("posts.delete")  # True via "posts.*"
"""

from typing import Any, Iterable
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.config import RBACSettings, get_settings
from rolegate.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from rolegate.core.interfaces import SyncResult
from rolegate.models import Permission, Role
from rolegate.rbac.permissions import ensure_sequence
from rolegate.repositories import (
    SqlPermissionRepository,
    SqlRoleRepository,
    SqlRolePermissionLink,
)
from rolegate.repositories.base import coerce_id, storage_errors
from rolegate.utils.slugs import require_name, require_slug, slugify

logger = structlog.get_logger()


class RoleService:
    """
    Service for managing roles, permissions, and role permissions.

    Changes are flushed, never committed.
    """

    def __init__(self, db: AsyncSession, settings: RBACSettings | None = None):
        self.db = db
        self.settings = settings or get_settings().rbac
        self.roles = SqlRoleRepository(db)
        self.permissions = SqlPermissionRepository(db)
        self.links = SqlRolePermissionLink(db)

    async def _require_role(self, role_id: Any) -> Role:
        role = await self.roles.find(role_id)
        if role is None:
            raise NotFoundError("Role", role_id)
        return role

    async def _require_permission(self, permission_id: Any) -> Permission:
        permission = await self.permissions.find(permission_id)
        if permission is None:
            raise NotFoundError("Permission", permission_id)
        return permission

    async def _reload_permissions(self, role: Role) -> None:
        with storage_errors("reload role permissions", role_id=str(role.id)):
            await self.db.refresh(role, attribute_names=["permissions"])

    def _role_slug(self, value: str) -> str:
        return require_slug(slugify(value), "Role", self.settings.slug_max_length)

    # ============================================================
    # ROLE MANAGEMENT
    # ============================================================

    async def create_role(
        self,
        name: str,
        slug: str | None = None,
        description: str | None = None,
        permissions: Iterable[str] | None = None,
    ) -> Role:
        """
        Create a new role with optional permissions.

        Args:
            name: Display name
            slug: Unique identifier; derived from the name when omitted
            description: Role description
            permissions: Permission slugs, created if they do not exist yet

        Returns:
            Created Role

        Raises:
            ConflictError: slug already taken
            InvalidInputError: empty name or slug
        """
        name = require_name(name, "Role")
        slug_value = self._role_slug(slug or name)

        if await self.roles.find_by_slug(slug_value) is not None:
            raise ConflictError(f"Role slug already exists: {slug_value}")

        role = await self.roles.add(Role(slug=slug_value, name=name, description=description))

        if permissions is not None:
            granted = [
                await self.get_or_create_permission(p)
                for p in ensure_sequence(permissions, "permissions")
            ]
            if granted:
                await self.links.sync(role.id, [p.id for p in granted])
        await self._reload_permissions(role)

        logger.info("Role created", role=role.slug, permissions=role.get_permissions())
        return role

    async def get_role(self, role_id: UUID | str) -> Role | None:
        """Get role by ID."""
        return await self.roles.find(role_id)

    async def get_role_by_slug(self, slug: str) -> Role | None:
        """Get role by slug (case-insensitive)."""
        return await self.roles.find_by_slug(slug)

    async def list_roles(self) -> list[Role]:
        """List all roles ordered by slug."""
        return await self.roles.all(order_by="slug")

    async def update_role(
        self,
        role_id: UUID | str,
        name: str | None = None,
        slug: str | None = None,
        description: str | None = None,
    ) -> Role:
        """Update role properties."""
        role = await self._require_role(role_id)

        if slug is not None:
            slug_value = self._role_slug(slug)
            if slug_value != role.slug:
                if await self.roles.find_by_slug(slug_value) is not None:
                    raise ConflictError(f"Role slug already exists: {slug_value}")
                role.slug = slug_value
        if name is not None:
            role.name = require_name(name, "Role")
        if description is not None:
            role.description = description

        await self.roles.save(role)
        logger.info("Role updated", role=role.slug)
        return role

    async def delete_role(self, role_id: UUID | str) -> bool:
        """Delete a role and all of its assignments."""
        role = await self.roles.find(role_id)
        if role is None:
            return False

        slug = role.slug
        await self.roles.delete(role)
        logger.info("Role deleted", role=slug)
        return True

    # ============================================================
    # PERMISSION MANAGEMENT
    # ============================================================

    async def create_permission(
        self,
        slug: str,
        name: str | None = None,
        description: str | None = None,
    ) -> Permission:
        """
        Create a permission.

        Permission slugs are stored as given (case-sensitive). End a slug
        with the wildcard segment ("posts.*") to grant a whole prefix.
        """
        slug_value = require_slug(
            (slug or "").strip(), "Permission", self.settings.slug_max_length
        )
        if any(ch.isspace() for ch in slug_value):
            raise InvalidInputError(f"Permission slug may not contain whitespace: {slug_value!r}")

        if await self.permissions.find_by_slug(slug_value) is not None:
            raise ConflictError(f"Permission slug already exists: {slug_value}")

        permission = await self.permissions.add(
            Permission(slug=slug_value, name=name or slug_value, description=description)
        )
        logger.info("Permission created", permission=permission.slug)
        return permission

    async def get_or_create_permission(self, slug: str, name: str | None = None) -> Permission:
        """Get a permission by slug, creating it if missing."""
        existing = await self.permissions.find_by_slug((slug or "").strip())
        if existing is not None:
            return existing
        return await self.create_permission(slug, name=name)

    async def list_permissions(self) -> list[Permission]:
        """List all permissions ordered by slug."""
        return await self.permissions.all(order_by="slug")

    # ============================================================
    # ROLE PERMISSIONS
    # ============================================================

    async def assign_permission(self, role_id: UUID | str, permission_id: UUID | str) -> bool:
        """
        Grant a permission to a role.

        Returns:
            True if granted, False if the role already had it
        """
        role = await self._require_role(role_id)
        permission = await self._require_permission(permission_id)

        if any(p.id == permission.id for p in role.permissions):
            return False

        await self.links.attach(role.id, permission.id)
        await self._reload_permissions(role)
        logger.info("Permission granted", role=role.slug, permission=permission.slug)
        return True

    async def revoke_permission(self, role_id: UUID | str, permission_id: UUID | str) -> bool:
        """Take a permission away from a role. Not holding it is not an error."""
        role = await self._require_role(role_id)

        await self.links.detach(role.id, coerce_id(permission_id))
        await self._reload_permissions(role)
        logger.info("Permission revoked", role=role.slug, permission_id=str(permission_id))
        return True

    async def sync_permissions(
        self,
        role_id: UUID | str,
        permission_ids: Iterable[UUID | str],
    ) -> SyncResult:
        """Replace the role's permissions with exactly permission_ids."""
        if permission_ids is None or isinstance(permission_ids, (str, bytes)):
            raise InvalidInputError(
                f"permission_ids must be a collection of ids, got {permission_ids!r}"
            )
        role = await self._require_role(role_id)
        resolved = [
            (await self._require_permission(pid)).id
            for pid in dict.fromkeys(permission_ids)
        ]

        result = await self.links.sync(role.id, resolved)
        await self._reload_permissions(role)
        logger.info(
            "Permissions synced",
            role=role.slug,
            attached=[str(i) for i in result.attached],
            detached=[str(i) for i in result.detached],
        )
        return result

    async def revoke_all_permissions(self, role_id: UUID | str) -> int:
        """Remove every permission from the role. Returns the number removed."""
        role = await self._require_role(role_id)

        removed = await self.links.detach(role.id)
        await self._reload_permissions(role)
        logger.info("All permissions revoked", role=role.slug, removed=removed)
        return removed
