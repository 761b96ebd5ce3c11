"""
Role and permission repositories.
"""

from typing import Any

from sqlalchemy import delete

from rolegate.models import Permission, Role, user_roles

from .base import BaseRepository, coerce_id, storage_errors


class SqlRoleRepository(BaseRepository[Role]):
    """Role lookups. Permissions are loaded with every role (selectin)."""

    model = Role

    async def find(self, id: Any) -> Role | None:
        return await self.get_by_id(id)

    async def find_by_slug(self, slug: str) -> Role | None:
        """Get role by slug. Role slugs compare lowercase."""
        return await self.get_one(slug=slug.strip().lower())

    async def delete(self, entity: Role) -> None:
        """Delete a role and every user assignment of it."""
        stmt = delete(user_roles).where(user_roles.c.role_id == coerce_id(entity.id))
        with storage_errors("detach role from users", role_id=str(entity.id)):
            await self.db.execute(stmt)
        await super().delete(entity)


class SqlPermissionRepository(BaseRepository[Permission]):
    """Permission lookups. Slugs are matched exactly (case-sensitive)."""

    model = Permission

    async def find(self, id: Any) -> Permission | None:
        return await self.get_by_id(id)

    async def find_by_slug(self, slug: str) -> Permission | None:
        return await self.get_one(slug=slug)
