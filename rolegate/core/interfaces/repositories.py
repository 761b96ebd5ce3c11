"""
Repository protocols consumed by the assignment and role services.
Implementations: rolegate.repositories (SQLAlchemy)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, Sequence

if TYPE_CHECKING:
    from rolegate.models import Permission, Role


@dataclass
class SyncResult:
    """Outcome of replacing an association set."""
    attached: list[Any] = field(default_factory=list)
    detached: list[Any] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.attached or self.detached)


class RoleRepository(Protocol):
    """Lookup of role definitions."""

    async def find(self, id: Any) -> Role | None:
        """Get role by ID. Returns None if not found."""
        ...

    async def find_by_slug(self, slug: str) -> Role | None:
        """Get role by slug (case-insensitive). Returns None if not found."""
        ...


class SubjectRoleLink(Protocol):
    """
    Subject <-> role association.

    Every method raises StorageError when the store fails.
    """

    async def attach(self, subject_id: Any, role_id: Any) -> None:
        """Create one association."""
        ...

    async def detach(self, subject_id: Any, role_id: Any | None = None) -> int:
        """Remove one association, or all of them when role_id is None. Returns count."""
        ...

    async def sync(self, subject_id: Any, role_ids: Sequence[Any]) -> SyncResult:
        """Make the subject's associations exactly role_ids."""
        ...

    async def list_for_subject(self, subject_id: Any) -> list[Role]:
        """Roles held by the subject, with permissions loaded. Empty list if none."""
        ...


class RolePermissionLink(Protocol):
    """Role <-> permission association."""

    async def list_for_role(self, role_id: Any) -> list[Permission]:
        """Permissions granted to the role. Empty list if none."""
        ...

    async def attach(self, role_id: Any, permission_id: Any) -> None:
        ...

    async def detach(self, role_id: Any, permission_id: Any | None = None) -> int:
        ...

    async def sync(self, role_id: Any, permission_ids: Sequence[Any]) -> SyncResult:
        ...
