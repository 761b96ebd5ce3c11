"""
User repository.
"""

from typing import Any

from sqlalchemy import Select
from sqlalchemy.orm import selectinload

from rolegate.models import User

from .base import BaseRepository, coerce_id, storage_errors


class UserRepository(BaseRepository[User]):
    """User lookups. Roles are only loaded through get_with_roles()."""

    model = User

    def _with_roles_query(self) -> Select:
        # populate_existing refreshes a user already in the session after
        # its assignments changed.
        return (
            self._base_query()
            .options(selectinload(User.roles))
            .execution_options(populate_existing=True)
        )

    async def get_with_roles(self, user_id: Any) -> User | None:
        """
        Load a user together with its roles and their permissions.

        This is the explicit load step for authorization checks:
            user = await UserRepository(db).get_with_roles(user_id)
            user.can("posts.edit")
        """
        stmt = self._with_roles_query().where(User.id == coerce_id(user_id))
        with storage_errors("get user with roles", user_id=str(user_id)):
            result = await self.db.execute(stmt)
            return result.scalar_one_or_none()
