"""
SQLAlchemy implementations of the association links.

The links issue statements in the caller's session and never commit.
sync() computes the difference and applies it in the same transaction,
so once the caller commits other sessions see either the old set or the
new one.

Usage:
    links = SqlSubjectRoleLink(db)
    await links.attach(user.id, role.id)
    result = await links.sync(user.id, [editor.id, viewer.id])
    await db.commit()
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Table, delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.interfaces import SyncResult
from rolegate.models import Permission, Role, role_permissions, user_roles

from .base import coerce_id, storage_errors


class AssociationLink:
    """
    Many-to-many rows between an owner and its targets.

    Subclasses name the join table and its two columns.
    """

    table: Table
    owner_column: str
    target_column: str

    def __init__(self, db: AsyncSession):
        self.db = db

    @property
    def _owner(self):
        return self.table.c[self.owner_column]

    @property
    def _target(self):
        return self.table.c[self.target_column]

    async def target_ids(self, owner_id: Any) -> list[UUID]:
        """IDs currently linked to the owner."""
        stmt = select(self._target).where(self._owner == coerce_id(owner_id))
        with storage_errors(f"read {self.table.name}", owner_id=str(owner_id)):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

    async def attach(self, owner_id: Any, target_id: Any) -> None:
        await self._insert(coerce_id(owner_id), [coerce_id(target_id)])

    async def detach(self, owner_id: Any, target_id: Any | None = None) -> int:
        """Remove one row, or every row of the owner when target_id is None."""
        stmt = delete(self.table).where(self._owner == coerce_id(owner_id))
        if target_id is not None:
            stmt = stmt.where(self._target == coerce_id(target_id))
        with storage_errors(f"detach {self.table.name}", owner_id=str(owner_id)):
            result = await self.db.execute(stmt)
        return result.rowcount or 0

    async def sync(self, owner_id: Any, target_ids: Sequence[Any]) -> SyncResult:
        """Replace the owner's rows with exactly target_ids."""
        owner_id = coerce_id(owner_id)
        wanted = list(dict.fromkeys(coerce_id(t) for t in target_ids))
        current = await self.target_ids(owner_id)

        wanted_set, current_set = set(wanted), set(current)
        to_detach = [t for t in current if t not in wanted_set]
        to_attach = [t for t in wanted if t not in current_set]

        if to_detach:
            stmt = delete(self.table).where(
                self._owner == owner_id,
                self._target.in_(to_detach),
            )
            with storage_errors(f"sync {self.table.name}", owner_id=str(owner_id)):
                await self.db.execute(stmt)
        if to_attach:
            await self._insert(owner_id, to_attach)

        return SyncResult(attached=to_attach, detached=to_detach)

    async def _insert(self, owner_id: UUID, target_ids: list[UUID]) -> None:
        rows = [
            {self.owner_column: owner_id, self.target_column: target_id}
            for target_id in target_ids
        ]
        with storage_errors(f"attach {self.table.name}", owner_id=str(owner_id)):
            await self.db.execute(insert(self.table), rows)


class SqlSubjectRoleLink(AssociationLink):
    """users <-> roles"""

    table = user_roles
    owner_column = "user_id"
    target_column = "role_id"

    async def list_for_subject(self, subject_id: Any) -> list[Role]:
        """Roles held by the subject in assignment order, permissions loaded."""
        stmt = (
            select(Role)
            .join(user_roles, user_roles.c.role_id == Role.id)
            .where(user_roles.c.user_id == coerce_id(subject_id))
            .order_by(user_roles.c.created_at, Role.slug)
            .execution_options(populate_existing=True)
        )
        with storage_errors("list subject roles", subject_id=str(subject_id)):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())


class SqlRolePermissionLink(AssociationLink):
    """roles <-> permissions"""

    table = role_permissions
    owner_column = "role_id"
    target_column = "permission_id"

    async def list_for_role(self, role_id: Any) -> list[Permission]:
        stmt = (
            select(Permission)
            .join(role_permissions, role_permissions.c.permission_id == Permission.id)
            .where(role_permissions.c.role_id == coerce_id(role_id))
            .order_by(role_permissions.c.created_at, Permission.slug)
        )
        with storage_errors("list role permissions", role_id=str(role_id)):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
