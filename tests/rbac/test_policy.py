"""Tests for the pure authorization decisions."""

from dataclasses import dataclass
from uuid import UUID, uuid4

import pytest

from taskhub.rbac import policy
from taskhub.rbac.exceptions import DenialReason, ForbiddenError
from taskhub.rbac.principal import Principal
from taskhub.rbac.roles import RoleLevel

ENG = uuid4()
PLATFORM = uuid4()
MKT = uuid4()
ENG_CLOSURE = frozenset({ENG, PLATFORM})


@dataclass
class FakeTask:
    organization_id: UUID
    created_by_id: UUID


@dataclass
class FakeUser:
    id: UUID
    organization_id: UUID


def principal(level: int, org: UUID = ENG) -> Principal:
    return Principal(user_id=uuid4(), organization_id=org, role_id=uuid4(), role_level=level)


class TestCapabilityGate:
    def test_allows_equal_and_higher(self):
        policy.check_min_role_level(principal(RoleLevel.ADMIN), RoleLevel.ADMIN)
        policy.check_min_role_level(principal(RoleLevel.OWNER), RoleLevel.ADMIN)

    def test_denies_lower_with_levels_in_message(self):
        with pytest.raises(ForbiddenError) as exc_info:
            policy.check_min_role_level(principal(RoleLevel.VIEWER), RoleLevel.ADMIN)
        assert exc_info.value.reason is DenialReason.ROLE_LEVEL
        assert "Required: 2, Current: 1" in exc_info.value.message


class TestTaskRules:
    @pytest.mark.parametrize("level", list(RoleLevel))
    def test_read_follows_closure_membership(self, level):
        p = principal(level)
        assert policy.can_read_task(p, FakeTask(PLATFORM, uuid4()), ENG_CLOSURE)
        assert not policy.can_read_task(p, FakeTask(MKT, uuid4()), ENG_CLOSURE)

    def test_read_outside_closure_is_organization_denial(self):
        with pytest.raises(ForbiddenError) as exc_info:
            policy.check_task_read(principal(RoleLevel.ADMIN), FakeTask(MKT, uuid4()), ENG_CLOSURE)
        assert exc_info.value.reason is DenialReason.ORGANIZATION_ACCESS

    def test_viewer_cannot_modify_others_tasks(self):
        viewer = principal(RoleLevel.VIEWER)
        task = FakeTask(ENG, uuid4())
        assert not policy.can_update_task(viewer, task, ENG_CLOSURE)
        assert not policy.can_delete_task(viewer, task, ENG_CLOSURE)

        with pytest.raises(ForbiddenError) as exc_info:
            policy.check_task_update(viewer, task, ENG_CLOSURE)
        assert exc_info.value.reason is DenialReason.OWNERSHIP
        assert exc_info.value.message == "Viewers can only modify their own tasks"

    def test_viewer_can_modify_own_tasks(self):
        viewer = principal(RoleLevel.VIEWER)
        task = FakeTask(ENG, viewer.user_id)
        assert policy.can_update_task(viewer, task, ENG_CLOSURE)
        assert policy.can_delete_task(viewer, task, ENG_CLOSURE)

    def test_ownership_does_not_bypass_closure(self):
        viewer = principal(RoleLevel.VIEWER)
        task = FakeTask(MKT, viewer.user_id)
        with pytest.raises(ForbiddenError) as exc_info:
            policy.check_task_update(viewer, task, ENG_CLOSURE)
        assert exc_info.value.reason is DenialReason.ORGANIZATION_ACCESS

    def test_admin_can_modify_any_task_in_closure(self):
        admin = principal(RoleLevel.ADMIN)
        task = FakeTask(PLATFORM, uuid4())
        assert policy.can_update_task(admin, task, ENG_CLOSURE)
        assert policy.can_delete_task(admin, task, ENG_CLOSURE)


class TestUserRules:
    @pytest.mark.parametrize(
        "principal_level,target_level,allowed",
        [
            (RoleLevel.OWNER, RoleLevel.ADMIN, True),
            (RoleLevel.OWNER, RoleLevel.VIEWER, True),
            (RoleLevel.OWNER, RoleLevel.OWNER, False),
            (RoleLevel.ADMIN, RoleLevel.VIEWER, True),
            (RoleLevel.ADMIN, RoleLevel.ADMIN, False),
            (RoleLevel.ADMIN, RoleLevel.OWNER, False),
        ],
    )
    def test_create_requires_strictly_lower_role(self, principal_level, target_level, allowed):
        p = principal(principal_level)
        assert policy.can_create_user(p, ENG, target_level, ENG_CLOSURE) is allowed

    def test_create_outside_closure_is_organization_denial(self):
        with pytest.raises(ForbiddenError) as exc_info:
            policy.check_user_create(principal(RoleLevel.ADMIN), MKT, RoleLevel.VIEWER, ENG_CLOSURE)
        assert exc_info.value.reason is DenialReason.ORGANIZATION_ACCESS

    def test_update_role_change_must_stay_below(self):
        admin = principal(RoleLevel.ADMIN)
        target = FakeUser(uuid4(), ENG)
        policy.check_user_update(admin, target, ENG_CLOSURE, new_role_level=RoleLevel.VIEWER)
        with pytest.raises(ForbiddenError) as exc_info:
            policy.check_user_update(admin, target, ENG_CLOSURE, new_role_level=RoleLevel.ADMIN)
        assert exc_info.value.reason is DenialReason.ROLE_LEVEL

    def test_update_without_role_change_only_checks_closure(self):
        admin = principal(RoleLevel.ADMIN)
        policy.check_user_update(admin, FakeUser(uuid4(), PLATFORM), ENG_CLOSURE)
        with pytest.raises(ForbiddenError):
            policy.check_user_update(admin, FakeUser(uuid4(), MKT), ENG_CLOSURE)

    def test_self_delete_is_always_denied(self):
        owner = principal(RoleLevel.OWNER)
        me = FakeUser(owner.user_id, ENG)
        # Levels would otherwise permit it; self-targeting wins.
        with pytest.raises(ForbiddenError) as exc_info:
            policy.check_user_delete(owner, me, RoleLevel.VIEWER, ENG_CLOSURE)
        assert exc_info.value.reason is DenialReason.SELF_TARGET

    def test_delete_peer_is_denied(self):
        admin = principal(RoleLevel.ADMIN)
        peer = FakeUser(uuid4(), ENG)
        assert not policy.can_delete_user(admin, peer, RoleLevel.ADMIN, ENG_CLOSURE)

    def test_delete_lower_role_in_closure(self):
        admin = principal(RoleLevel.ADMIN)
        assert policy.can_delete_user(admin, FakeUser(uuid4(), PLATFORM), RoleLevel.VIEWER, ENG_CLOSURE)
        assert not policy.can_delete_user(admin, FakeUser(uuid4(), MKT), RoleLevel.VIEWER, ENG_CLOSURE)
