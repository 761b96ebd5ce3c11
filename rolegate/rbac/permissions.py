"""
Permission matching for a single role.

A PermissionSet is a pure query over permission slugs that are already in
memory. Matching is case-sensitive: "posts.edit" and "Posts.edit" are
different permissions.

Wildcards:
    "posts.*" matches "posts.edit", "posts.delete", "posts.edit.draft"
    "*"       matches every permission

Usage:
    perms = PermissionSet(["posts.view", "comments.*"])
    perms.contains("comments.delete")                 # True
    perms.contains_any(["posts.edit", "posts.view"])  # True
    perms.contains_any([])                            # False
"""

from typing import Iterable, Iterator

from rolegate.core.exceptions import InvalidInputError

DEFAULT_WILDCARD = "*"
DEFAULT_SEPARATOR = "."


def wildcard_prefix(
    slug: str,
    wildcard: str = DEFAULT_WILDCARD,
    separator: str = DEFAULT_SEPARATOR,
) -> str | None:
    """
    Return the prefix a wildcard slug grants, or None for a plain slug.

    The separator stays on the prefix so "posts.*" grants "posts." and
    never "postsmeta.edit".
    """
    if slug == wildcard:
        return ""
    if slug.endswith(separator + wildcard):
        return slug[: -len(wildcard)]
    return None


def ensure_sequence(values: Iterable[str], argument: str) -> list[str]:
    """Materialize an iterable of slugs, rejecting a bare string."""
    if values is None or isinstance(values, (str, bytes)):
        raise InvalidInputError(f"{argument} must be a sequence of slugs, got {values!r}")
    return list(values)


class PermissionSet:
    """Permissions owned by one role."""

    def __init__(
        self,
        slugs: Iterable[str] = (),
        wildcard: str = DEFAULT_WILDCARD,
        separator: str = DEFAULT_SEPARATOR,
    ):
        self._slugs = list(slugs)
        self._exact = set(self._slugs)
        self._prefixes: list[str] = []
        for slug in self._slugs:
            prefix = wildcard_prefix(slug, wildcard, separator)
            if prefix is not None:
                self._prefixes.append(prefix)

    @property
    def slugs(self) -> list[str]:
        return list(self._slugs)

    def contains(self, permission: str) -> bool:
        """Exact match, or a held wildcard whose prefix the slug starts with."""
        if not permission:
            return False
        if permission in self._exact:
            return True
        # posts.* needs at least one character after "posts."
        return any(
            len(permission) > len(prefix) and permission.startswith(prefix)
            for prefix in self._prefixes
        )

    def contains_any(self, permissions: Iterable[str]) -> bool:
        """True if at least one of the slugs is contained. Empty input is False."""
        return any(self.contains(p) for p in ensure_sequence(permissions, "permissions"))

    def __contains__(self, permission: object) -> bool:
        return isinstance(permission, str) and self.contains(permission)

    def __iter__(self) -> Iterator[str]:
        return iter(self._slugs)

    def __len__(self) -> int:
        return len(self._slugs)

    def __repr__(self) -> str:
        return f"<PermissionSet {self._slugs!r}>"
