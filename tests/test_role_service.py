"""
Tests for role and permission management.
"""

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from rolegate.models import Role, User
from rolegate.repositories import SqlRolePermissionLink, UserRepository
from rolegate.services import RoleAssignment, RoleService


@pytest.mark.asyncio
async def test_create_role_derives_slug(role_service: RoleService):
    role = await role_service.create_role("Content Editor", description="Edits content")

    assert role.slug == "content-editor"
    assert role.name == "Content Editor"
    assert role.get_permissions() == []


@pytest.mark.asyncio
async def test_create_role_explicit_slug_is_lowercased(role_service: RoleService):
    role = await role_service.create_role("Moderator", slug="MOD")

    assert role.slug == "mod"
    assert await role_service.get_role_by_slug("Mod") is not None


@pytest.mark.asyncio
async def test_create_role_with_permissions(role_service: RoleService):
    role = await role_service.create_role("Editor", permissions=["posts.edit", "posts.*"])

    assert sorted(role.get_permissions()) == ["posts.*", "posts.edit"]
    assert role.can("posts.delete")


@pytest.mark.asyncio
async def test_create_role_reuses_permissions(role_service: RoleService):
    await role_service.create_role("Author", permissions=["posts.create"])
    await role_service.create_role("Reviewer", permissions=["posts.create"])

    slugs = [p.slug for p in await role_service.list_permissions()]
    assert slugs == ["posts.create"]


@pytest.mark.asyncio
async def test_create_role_duplicate_slug(role_service: RoleService, editor: Role):
    with pytest.raises(ConflictError):
        await role_service.create_role("EDITOR")


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["", "   "])
async def test_create_role_requires_name(role_service: RoleService, name: str):
    with pytest.raises(InvalidInputError):
        await role_service.create_role(name)


@pytest.mark.asyncio
async def test_list_roles(role_service: RoleService, editor: Role, viewer: Role, admin: Role):
    roles = await role_service.list_roles()

    assert [r.slug for r in roles] == ["admin", "editor", "viewer"]


@pytest.mark.asyncio
async def test_update_role(role_service: RoleService, editor: Role):
    role = await role_service.update_role(editor.id, name="Chief Editor", slug="Chief-Editor")

    assert role.name == "Chief Editor"
    assert role.slug == "chief-editor"


@pytest.mark.asyncio
async def test_update_role_slug_conflict(role_service: RoleService, editor: Role, viewer: Role):
    with pytest.raises(ConflictError):
        await role_service.update_role(editor.id, slug="viewer")


@pytest.mark.asyncio
async def test_update_missing_role(role_service: RoleService):
    with pytest.raises(NotFoundError):
        await role_service.update_role(uuid4(), name="Ghost")


@pytest.mark.asyncio
async def test_delete_role_removes_assignments(
    db: AsyncSession,
    role_service: RoleService,
    test_user: User,
    editor: Role,
):
    await RoleAssignment.for_session(db, test_user.id).assign_role(editor.id)
    await db.commit()

    assert await role_service.delete_role(editor.id) is True
    await db.commit()

    user = await UserRepository(db).get_with_roles(test_user.id)
    assert user.get_roles() == []
    assert await role_service.get_role(editor.id) is None


@pytest.mark.asyncio
async def test_delete_missing_role(role_service: RoleService):
    assert await role_service.delete_role(uuid4()) is False


# ============ Permissions ============


@pytest.mark.asyncio
async def test_create_permission(role_service: RoleService):
    permission = await role_service.create_permission("Posts.Publish")

    # Permission slugs keep their case
    assert permission.slug == "Posts.Publish"
    assert permission.name == "Posts.Publish"


@pytest.mark.asyncio
async def test_create_permission_duplicate(role_service: RoleService):
    await role_service.create_permission("posts.publish")

    with pytest.raises(ConflictError):
        await role_service.create_permission("posts.publish")


@pytest.mark.asyncio
@pytest.mark.parametrize("slug", ["", "  ", "posts publish"])
async def test_create_permission_invalid_slug(role_service: RoleService, slug: str):
    with pytest.raises(InvalidInputError):
        await role_service.create_permission(slug)


@pytest.mark.asyncio
async def test_get_or_create_permission(role_service: RoleService):
    first = await role_service.get_or_create_permission("posts.publish")
    second = await role_service.get_or_create_permission("posts.publish")

    assert first.id == second.id


# ============ Role permissions ============


@pytest.mark.asyncio
async def test_assign_permission(role_service: RoleService, viewer: Role):
    publish = await role_service.create_permission("posts.publish")

    assert await role_service.assign_permission(viewer.id, publish.id) is True
    assert await role_service.assign_permission(viewer.id, publish.id) is False
    assert viewer.can("posts.publish")


@pytest.mark.asyncio
async def test_assign_missing_permission(role_service: RoleService, viewer: Role):
    with pytest.raises(NotFoundError) as exc_info:
        await role_service.assign_permission(viewer.id, uuid4())

    assert exc_info.value.kind == "Permission"


@pytest.mark.asyncio
async def test_revoke_permission(role_service: RoleService, viewer: Role):
    view = viewer.permissions[0]

    assert await role_service.revoke_permission(viewer.id, view.id) is True
    assert not viewer.can("posts.view")

    # Not held any more: still not an error
    assert await role_service.revoke_permission(viewer.id, view.id) is True


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_id", [None, "posts.edit"])
async def test_revoke_permission_rejects_missing_id(role_service: RoleService, editor: Role, bad_id):
    with pytest.raises(InvalidInputError):
        await role_service.revoke_permission(editor.id, bad_id)

    assert sorted(editor.get_permissions()) == ["posts.*", "posts.edit"]


@pytest.mark.asyncio
async def test_sync_permissions(db: AsyncSession, role_service: RoleService, editor: Role):
    comment = await role_service.create_permission("comments.*")
    edit = next(p for p in editor.permissions if p.slug == "posts.edit")

    result = await role_service.sync_permissions(editor.id, [edit.id, comment.id])

    assert result.attached == [comment.id]
    assert len(result.detached) == 1
    assert sorted(editor.get_permissions()) == ["comments.*", "posts.edit"]
    assert not editor.can("posts.delete")
    assert editor.can("comments.delete")

    listed = await SqlRolePermissionLink(db).list_for_role(editor.id)
    assert sorted(p.slug for p in listed) == ["comments.*", "posts.edit"]


@pytest.mark.asyncio
async def test_sync_permissions_rejects_string(role_service: RoleService, editor: Role):
    with pytest.raises(InvalidInputError):
        await role_service.sync_permissions(editor.id, "posts.edit")


@pytest.mark.asyncio
async def test_revoke_all_permissions(role_service: RoleService, editor: Role):
    assert await role_service.revoke_all_permissions(editor.id) == 2
    assert editor.get_permissions() == []
    assert not editor.can("posts.edit")


@pytest.mark.asyncio
async def test_permission_changes_reach_subjects(
    db: AsyncSession,
    role_service: RoleService,
    test_user: User,
    viewer: Role,
):
    await RoleAssignment.for_session(db, test_user.id).assign_role(viewer.id)
    publish = await role_service.create_permission("posts.publish")
    await role_service.assign_permission(viewer.id, publish.id)
    await db.commit()

    user = await UserRepository(db).get_with_roles(test_user.id)

    assert user.can("posts.publish")
    assert user.get_permissions().count("posts.view") == 1
