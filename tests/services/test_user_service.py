"""Tests for UserService: hierarchy-bounded user management."""

from uuid import uuid4

import pytest
from sqlalchemy import select

from taskhub.auth.passwords import verify_password
from taskhub.db.models import AuditLog, Task, User
from taskhub.rbac.exceptions import (
    ConflictError,
    DenialReason,
    DuplicateEmailError,
    ForbiddenError,
    OrganizationNotFoundError,
    RoleNotFoundError,
    UserNotFoundError,
)
from taskhub.rbac.organizations import OrganizationClosureResolver
from taskhub.rbac.roles import RoleName
from taskhub.schemas import UserCreate, UserUpdate
from taskhub.services.auth import principal_for
from taskhub.services.users import UserService


def new_user(world, org="Eng", role=RoleName.VIEWER, email="new@example.com") -> UserCreate:
    return UserCreate(
        email=email,
        password="s3cret-pass",
        first_name="New",
        last_name="Person",
        organization_id=world.org_id(org),
        role_id=world.roles[role].id,
    )


class TestCreateUser:
    async def test_owner_creates_admin_in_child_org(self, db_session, world):
        """The new Admin's closure covers Eng but not its sibling Mkt."""
        result = await UserService(db_session).create_user(
            world.principal("owner"), new_user(world, role=RoleName.ADMIN)
        )
        created = result.value
        assert created.organization_id == world.org_id("Eng")
        assert created.role.name == "Admin"

        closure = await OrganizationClosureResolver(db_session).resolve(principal_for(created))
        assert world.org_id("Eng") in closure
        assert world.org_id("Platform") in closure
        assert world.org_id("Mkt") not in closure

    async def test_admin_cannot_create_owner(self, db_session, world):
        with pytest.raises(ForbiddenError) as exc_info:
            await UserService(db_session).create_user(
                world.principal("admin"), new_user(world, role=RoleName.OWNER)
            )
        assert exc_info.value.reason is DenialReason.ROLE_LEVEL

    async def test_admin_cannot_create_peer_admin(self, db_session, world):
        with pytest.raises(ForbiddenError) as exc_info:
            await UserService(db_session).create_user(
                world.principal("admin"), new_user(world, role=RoleName.ADMIN)
            )
        assert exc_info.value.reason is DenialReason.ROLE_LEVEL

    async def test_admin_cannot_create_outside_closure(self, db_session, world):
        with pytest.raises(ForbiddenError) as exc_info:
            await UserService(db_session).create_user(world.principal("admin"), new_user(world, org="Mkt"))
        assert exc_info.value.reason is DenialReason.ORGANIZATION_ACCESS

    async def test_password_is_hashed(self, db_session, world):
        result = await UserService(db_session).create_user(world.principal("admin"), new_user(world))
        stored = result.value.password_hash
        assert stored != "s3cret-pass"
        assert verify_password("s3cret-pass", stored)

    async def test_duplicate_email(self, db_session, world):
        with pytest.raises(DuplicateEmailError):
            await UserService(db_session).create_user(
                world.principal("owner"), new_user(world, email="viewer@example.com")
            )

    async def test_unknown_organization(self, db_session, world):
        data = new_user(world)
        data.organization_id = uuid4()
        with pytest.raises(OrganizationNotFoundError):
            await UserService(db_session).create_user(world.principal("owner"), data)

    async def test_unknown_role(self, db_session, world):
        data = new_user(world)
        data.role_id = uuid4()
        with pytest.raises(RoleNotFoundError):
            await UserService(db_session).create_user(world.principal("owner"), data)

    async def test_audit_details_never_contain_password(self, db_session, world):
        result = await UserService(db_session).create_user(world.principal("admin"), new_user(world))
        entry = result.audit_log
        assert entry.action == "CREATE"
        assert entry.resource == "USER"
        assert entry.details == "Created user: new@example.com"
        assert "s3cret-pass" not in entry.details


class TestReadUsers:
    async def test_list_is_scoped_to_closure(self, db_session, world):
        users = await UserService(db_session).list_users(world.principal("admin"))
        assert {user.email for user in users} == {
            "admin@example.com",
            "viewer@example.com",
            "viewer2@example.com",
            "platform@example.com",
        }

    async def test_reads_are_not_audited(self, db_session, world):
        await UserService(db_session).list_users(world.principal("owner"))
        assert (await db_session.execute(select(AuditLog))).scalars().all() == []

    async def test_get_outside_closure(self, db_session, world):
        with pytest.raises(ForbiddenError):
            await UserService(db_session).get_user(world.principal("admin"), world.users["mkt_admin"].id)

    async def test_get_missing(self, db_session, world):
        with pytest.raises(UserNotFoundError):
            await UserService(db_session).get_user(world.principal("owner"), uuid4())


class TestUpdateUser:
    async def test_update_names(self, db_session, world):
        target = world.users["viewer"]
        result = await UserService(db_session).update_user(
            world.principal("admin"), target.id, UserUpdate(first_name="Veronica")
        )
        assert result.value.first_name == "Veronica"
        assert result.value.last_name == "User"
        assert result.audit_log.details == "Updated user: viewer@example.com"

    async def test_role_change_must_stay_below_principal(self, db_session, world):
        target = world.users["viewer"]
        with pytest.raises(ForbiddenError) as exc_info:
            await UserService(db_session).update_user(
                world.principal("admin"), target.id, UserUpdate(role_id=world.roles[RoleName.ADMIN].id)
            )
        assert exc_info.value.reason is DenialReason.ROLE_LEVEL

    async def test_owner_promotes_viewer_to_admin(self, db_session, world):
        target = world.users["viewer"]
        result = await UserService(db_session).update_user(
            world.principal("owner"), target.id, UserUpdate(role_id=world.roles[RoleName.ADMIN].id)
        )
        assert result.value.role.level == 2

    async def test_email_change_conflict(self, db_session, world):
        with pytest.raises(DuplicateEmailError):
            await UserService(db_session).update_user(
                world.principal("owner"),
                world.users["viewer"].id,
                UserUpdate(email="admin@example.com"),
            )

    async def test_keeping_same_email_is_fine(self, db_session, world):
        result = await UserService(db_session).update_user(
            world.principal("owner"),
            world.users["viewer"].id,
            UserUpdate(email="viewer@example.com", last_name="Same"),
        )
        assert result.value.last_name == "Same"


class TestDeleteUser:
    async def test_self_check_runs_before_level_check(self, db_session, world):
        admin = world.principal("admin")
        with pytest.raises(ForbiddenError) as exc_info:
            await UserService(db_session).delete_user(admin, admin.user_id)
        assert exc_info.value.reason is DenialReason.SELF_TARGET

    async def test_admin_cannot_delete_other_admin(self, db_session, world):
        owner = world.principal("owner")
        result = await UserService(db_session).create_user(
            owner, new_user(world, role=RoleName.ADMIN, email="admin2@example.com")
        )
        with pytest.raises(ForbiddenError) as exc_info:
            await UserService(db_session).delete_user(world.principal("admin"), result.value.id)
        assert exc_info.value.reason is DenialReason.ROLE_LEVEL

    async def test_admin_deletes_viewer(self, db_session, world):
        target = world.users["viewer2"]
        result = await UserService(db_session).delete_user(world.principal("admin"), target.id)

        assert result.value == target.id
        assert await db_session.get(User, target.id) is None
        assert result.audit_log.action == "DELETE"
        assert result.audit_log.resource_id == target.id
        assert result.audit_log.details == "Deleted user: viewer2@example.com"

    async def test_task_creator_cannot_be_deleted(self, db_session, world, add_task):
        target = world.users["viewer2"]
        task = await add_task("Still mine", world.orgs["Eng"], target)

        with pytest.raises(ConflictError) as exc_info:
            await UserService(db_session).delete_user(world.principal("admin"), target.id)
        assert exc_info.value.code == "USER_IN_USE"

        assert await db_session.get(User, target.id) is not None
        assert await db_session.get(Task, task.id) is not None
        rows = await db_session.execute(select(AuditLog).where(AuditLog.resource_id == target.id))
        assert rows.scalars().all() == []

    async def test_task_assignee_cannot_be_deleted(self, db_session, world, add_task):
        target = world.users["viewer2"]
        await add_task("Handed over", world.orgs["Eng"], world.users["admin"], assigned_to_id=target.id)

        with pytest.raises(ConflictError):
            await UserService(db_session).delete_user(world.principal("admin"), target.id)
        assert await db_session.get(User, target.id) is not None
