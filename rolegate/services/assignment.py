"""
Role assignment service - manage the roles held by one subject.

Usage:
    assignment = RoleAssignment.for_session(db, user.id)

    await assignment.assign_role(editor.id)      # True
    await assignment.assign_role(editor.id)      # False, already held
    await assignment.sync_roles([viewer.id])     # exactly {viewer}
    await assignment.revoke_all_roles()
    await db.commit()

    facade = await assignment.authorization()
    facade.can("posts.edit")

Nothing here commits: the caller's transaction decides when changes
become visible.
"""

from typing import Any, Iterable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.config import RBACSettings, get_settings
from rolegate.core.exceptions import InvalidInputError, NotFoundError
from rolegate.core.interfaces import RoleRepository, SubjectRoleLink, SyncResult
from rolegate.models import Role
from rolegate.rbac import AuthorizationFacade
from rolegate.repositories import SqlRoleRepository, SqlSubjectRoleLink
from rolegate.repositories.base import coerce_id

logger = structlog.get_logger()


class RoleAssignment:
    """Subject <-> role association manager for a single subject."""

    def __init__(
        self,
        subject_id: Any,
        links: SubjectRoleLink,
        roles: RoleRepository,
        settings: RBACSettings | None = None,
    ):
        self.subject_id = subject_id
        self.links = links
        self.roles = roles
        self.settings = settings or get_settings().rbac

    @classmethod
    def for_session(
        cls,
        db: AsyncSession,
        subject_id: Any,
        settings: RBACSettings | None = None,
    ) -> "RoleAssignment":
        """Assignment backed by the SQLAlchemy repositories."""
        return cls(subject_id, SqlSubjectRoleLink(db), SqlRoleRepository(db), settings)

    async def _require_role(self, role_id: Any) -> Role:
        role = await self.roles.find(role_id)
        if role is None:
            raise NotFoundError("Role", role_id)
        return role

    # ============================================================
    # QUERIES
    # ============================================================

    async def list_roles(self) -> list[Role]:
        """Roles held by the subject. Never None; empty list when none."""
        roles = await self.links.list_for_subject(self.subject_id)
        return list(roles or [])

    async def authorization(self) -> AuthorizationFacade:
        """Load the subject's roles and wrap them for queries."""
        return AuthorizationFacade(await self.list_roles())

    # ============================================================
    # MUTATIONS
    # ============================================================

    async def assign_role(self, role_id: Any) -> bool:
        """
        Give the subject a role.

        Returns:
            True if the role was attached, False if already held

        Raises:
            NotFoundError: role does not exist
            StorageError: store failure
        """
        role = await self._require_role(role_id)

        held = await self.list_roles()
        if any(r.id == role.id for r in held):
            logger.debug(
                "Role already assigned",
                subject_id=str(self.subject_id),
                role=role.slug,
            )
            return False

        await self.links.attach(self.subject_id, role.id)
        logger.info("Role assigned", subject_id=str(self.subject_id), role=role.slug)
        return True

    async def revoke_role(self, role_id: Any) -> bool:
        """
        Take a role away. Revoking a role that is not held is not an error.

        Raises:
            InvalidInputError: role_id is missing or not an id
            StorageError: store failure
        """
        # detach() without a role id removes every role
        role_id = coerce_id(role_id)
        removed = await self.links.detach(self.subject_id, role_id)
        logger.info(
            "Role revoked",
            subject_id=str(self.subject_id),
            role_id=str(role_id),
            removed=removed,
        )
        return True

    async def sync_roles(self, role_ids: Iterable[Any]) -> SyncResult:
        """
        Replace the subject's roles with exactly role_ids.

        Duplicates are ignored. An empty collection revokes every role
        unless RBAC_ALLOW_EMPTY_SYNC is false.

        Raises:
            InvalidInputError: not a collection, or empty when disallowed
            NotFoundError: one of the roles does not exist
            StorageError: store failure
        """
        if role_ids is None or isinstance(role_ids, (str, bytes)):
            raise InvalidInputError(f"role_ids must be a collection of ids, got {role_ids!r}")

        requested = list(dict.fromkeys(role_ids))
        if not requested and not self.settings.allow_empty_sync:
            raise InvalidInputError("Refusing to sync an empty role set")

        resolved = [(await self._require_role(role_id)).id for role_id in requested]

        result = await self.links.sync(self.subject_id, resolved)
        logger.info(
            "Roles synced",
            subject_id=str(self.subject_id),
            attached=[str(i) for i in result.attached],
            detached=[str(i) for i in result.detached],
        )
        return result

    async def revoke_all_roles(self) -> int:
        """Remove every role from the subject. Returns the number removed."""
        removed = await self.links.detach(self.subject_id)
        logger.info("All roles revoked", subject_id=str(self.subject_id), removed=removed)
        return removed
