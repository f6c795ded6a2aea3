"""Authorization decisions for tasks and users.

Every ``check_*`` function is pure: it takes the principal, a snapshot of the
target and the principal's closure set, and either returns ``None`` (allowed)
or raises a typed :class:`ForbiddenError`. Existence checks (NotFound) happen
in the services before these run.

The ``can_*`` helpers wrap the checks as booleans for callers that only need
a yes/no answer.
"""

from typing import Any, Callable, Collection, Protocol
from uuid import UUID

from taskhub.rbac.exceptions import DenialReason, ForbiddenError
from taskhub.rbac.principal import Principal
from taskhub.rbac.roles import RoleLevel, at_least, strictly_below


class OwnedResource(Protocol):
    organization_id: UUID
    created_by_id: UUID


class Member(Protocol):
    id: UUID
    organization_id: UUID


# ========== Capability Gate ==========

def check_min_role_level(principal: Principal, required_level: int) -> None:
    """Coarse gate applied before the finer-grained rules run."""
    if not at_least(principal.role_level, required_level):
        raise ForbiddenError(
            "Access denied. Insufficient role level. "
            f"Required: {int(required_level)}, Current: {int(principal.role_level)}",
            reason=DenialReason.ROLE_LEVEL,
        )


def check_organization_access(
    principal: Principal,
    organization_id: UUID,
    closure: Collection[UUID],
    message: str = "You do not have access to this organization",
) -> None:
    if organization_id not in closure:
        raise ForbiddenError(message, reason=DenialReason.ORGANIZATION_ACCESS)


# ========== Task Rules ==========

def check_task_read(principal: Principal, task: OwnedResource, closure: Collection[UUID]) -> None:
    check_organization_access(
        principal, task.organization_id, closure, "You do not have access to this task"
    )


def _check_task_ownership(principal: Principal, task: OwnedResource, message: str) -> None:
    if principal.role_level < RoleLevel.ADMIN and task.created_by_id != principal.user_id:
        raise ForbiddenError(message, reason=DenialReason.OWNERSHIP)


def check_task_update(principal: Principal, task: OwnedResource, closure: Collection[UUID]) -> None:
    check_task_read(principal, task, closure)
    _check_task_ownership(principal, task, "Viewers can only modify their own tasks")


def check_task_delete(principal: Principal, task: OwnedResource, closure: Collection[UUID]) -> None:
    check_task_read(principal, task, closure)
    _check_task_ownership(
        principal, task, "Only Admins, Owners, or task creators can delete tasks"
    )


def check_task_assignment(principal: Principal, assignee: Member, closure: Collection[UUID]) -> None:
    """Tasks may only be assigned to users inside the principal's closure set."""
    check_organization_access(
        principal, assignee.organization_id, closure, "You cannot assign tasks to this user"
    )


# ========== User Rules ==========

def check_role_assignment(principal: Principal, role_level: int) -> None:
    """A principal may only hand out roles strictly below its own level."""
    if not strictly_below(role_level, principal.role_level):
        raise ForbiddenError(
            "You cannot assign a role at or above your own level",
            reason=DenialReason.ROLE_LEVEL,
        )


def check_user_create(
    principal: Principal,
    organization_id: UUID,
    role_level: int,
    closure: Collection[UUID],
) -> None:
    check_organization_access(
        principal, organization_id, closure, "You cannot create users in this organization"
    )
    if not strictly_below(role_level, principal.role_level):
        raise ForbiddenError(
            "You cannot create users with equal or higher role level",
            reason=DenialReason.ROLE_LEVEL,
        )


def check_user_read(principal: Principal, target: Member, closure: Collection[UUID]) -> None:
    check_organization_access(
        principal, target.organization_id, closure, "You do not have access to this user"
    )


def check_user_update(
    principal: Principal,
    target: Member,
    closure: Collection[UUID],
    new_role_level: int | None = None,
) -> None:
    check_user_read(principal, target, closure)
    if new_role_level is not None:
        check_role_assignment(principal, new_role_level)


def check_user_delete(
    principal: Principal,
    target: Member,
    target_role_level: int,
    closure: Collection[UUID],
) -> None:
    check_user_read(principal, target, closure)
    if target.id == principal.user_id:
        raise ForbiddenError("You cannot delete yourself", reason=DenialReason.SELF_TARGET)
    if not strictly_below(target_role_level, principal.role_level):
        raise ForbiddenError(
            "You cannot delete users with equal or higher role level",
            reason=DenialReason.ROLE_LEVEL,
        )


# ========== Boolean helpers ==========

def _allowed(check: Callable[..., None], *args: Any) -> bool:
    try:
        check(*args)
    except ForbiddenError:
        return False
    return True


def can_read_task(principal: Principal, task: OwnedResource, closure: Collection[UUID]) -> bool:
    return _allowed(check_task_read, principal, task, closure)


def can_update_task(principal: Principal, task: OwnedResource, closure: Collection[UUID]) -> bool:
    return _allowed(check_task_update, principal, task, closure)


def can_delete_task(principal: Principal, task: OwnedResource, closure: Collection[UUID]) -> bool:
    return _allowed(check_task_delete, principal, task, closure)


def can_create_user(
    principal: Principal,
    organization_id: UUID,
    role_level: int,
    closure: Collection[UUID],
) -> bool:
    return _allowed(check_user_create, principal, organization_id, role_level, closure)


def can_delete_user(
    principal: Principal,
    target: Member,
    target_role_level: int,
    closure: Collection[UUID],
) -> bool:
    return _allowed(check_user_delete, principal, target, target_role_level, closure)
