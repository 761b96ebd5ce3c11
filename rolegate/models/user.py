"""
User model.
"""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolegate.rbac.authorization import Authorizable

from .base import Base, StandardMixin
from .role import Role, user_roles


class User(Base, StandardMixin, Authorizable):
    """
    User account model.

    ``roles`` is never loaded implicitly: load it with
    UserRepository.get_with_roles() (or selectinload(User.roles)) before
    asking authorization questions.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    roles: Mapped[list[Role]] = relationship(
        Role,
        secondary=user_roles,
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"
