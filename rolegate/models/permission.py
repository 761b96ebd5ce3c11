"""
Permission model.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from rolegate.core.config import get_settings
from rolegate.rbac.permissions import wildcard_prefix

from .base import Base, StandardMixin


class Permission(Base, StandardMixin):
    """
    Permission definition.

    The slug is matched case-sensitively, exactly as stored. A slug ending
    in the wildcard segment grants every permission sharing its prefix.

    Examples:
        Permission(slug="posts.edit", name="Edit posts")
        Permission(slug="posts.*", name="Manage posts")
    """

    __tablename__ = "permissions"

    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    @property
    def is_wildcard(self) -> bool:
        rbac = get_settings().rbac
        return wildcard_prefix(self.slug, rbac.wildcard, rbac.separator) is not None

    def __repr__(self) -> str:
        return f"<Permission {self.slug}>"
