"""Seed data for system roles and the optional demo tenant.

Role seeding is idempotent and runs on every startup. Demo data (an
organization tree with users and tasks) is only created when the database
holds no organizations yet.
"""

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.auth.passwords import hash_password
from taskhub.db.models import Organization, Role, Task, TaskCategory, TaskPriority, TaskStatus, User
from taskhub.rbac.exceptions import DuplicateRoleError
from taskhub.rbac.roles import SYSTEM_ROLES, RoleName

logger = logging.getLogger(__name__)

DEMO_ORGANIZATIONS: dict[str, str | None] = {
    "Acme Corp.": None,
    "Engineering Department": "Acme Corp.",
    "Marketing Department": "Acme Corp.",
}

DEMO_USERS: list[dict[str, Any]] = [
    {"email": "owner@acme.example.com", "first_name": "John", "last_name": "Owner",
     "organization": "Acme Corp.", "role": RoleName.OWNER},
    {"email": "admin@acme.example.com", "first_name": "Jane", "last_name": "Admin",
     "organization": "Engineering Department", "role": RoleName.ADMIN},
    {"email": "viewer@acme.example.com", "first_name": "Bob", "last_name": "Viewer",
     "organization": "Engineering Department", "role": RoleName.VIEWER},
    {"email": "marketing@acme.example.com", "first_name": "Alice", "last_name": "Marketing",
     "organization": "Marketing Department", "role": RoleName.ADMIN},
]

DEMO_TASKS: list[dict[str, Any]] = [
    {"title": "Implement JWT Authentication",
     "description": "Set up JWT-based authentication for the API",
     "status": TaskStatus.DONE, "priority": TaskPriority.HIGH,
     "organization": "Engineering Department", "created_by": "owner@acme.example.com",
     "assigned_to": "admin@acme.example.com", "sort_order": 1},
    {"title": "Design Task Management UI",
     "description": "Create wireframes and mockups for the dashboard",
     "status": TaskStatus.IN_PROGRESS, "priority": TaskPriority.MEDIUM,
     "organization": "Engineering Department", "created_by": "admin@acme.example.com",
     "assigned_to": "viewer@acme.example.com", "sort_order": 2},
    {"title": "Write API Documentation",
     "description": "Document all API endpoints with examples",
     "status": TaskStatus.TODO, "priority": TaskPriority.LOW,
     "organization": "Engineering Department", "created_by": "admin@acme.example.com",
     "sort_order": 3},
    {"title": "Launch Marketing Campaign",
     "description": "Coordinate social media posts for product launch",
     "status": TaskStatus.IN_PROGRESS, "priority": TaskPriority.HIGH,
     "organization": "Marketing Department", "created_by": "marketing@acme.example.com",
     "sort_order": 1},
    {"title": "Update Team on Progress",
     "description": "Send weekly update email to stakeholders",
     "status": TaskStatus.TODO, "priority": TaskPriority.MEDIUM,
     "organization": "Acme Corp.", "created_by": "owner@acme.example.com",
     "sort_order": 1},
]


async def seed_system_roles(session: AsyncSession) -> dict[RoleName, Role]:
    """Create the Owner/Admin/Viewer roles if they don't exist.

    Raises:
        DuplicateRoleError: If a role with a system name exists at a
            different level.
    """
    roles: dict[RoleName, Role] = {}
    for role_name, role_data in SYSTEM_ROLES.items():
        result = await session.execute(select(Role).where(Role.name == role_name.value))
        role = result.scalar_one_or_none()

        if role is None:
            role = Role(
                name=role_name.value,
                level=int(role_data["level"]),
                description=role_data["description"],
            )
            session.add(role)
            logger.info("Seeded role %s (level %d)", role.name, role.level)
        elif role.level != role_data["level"]:
            raise DuplicateRoleError(role_name.value)

        roles[role_name] = role

    await session.commit()
    return roles


async def seed_demo_data(session: AsyncSession, roles: dict[RoleName, Role], password: str) -> bool:
    """Create the demo organization tree, users and tasks.

    Returns False without touching anything when organizations already exist.
    """
    org_count = await session.scalar(select(func.count()).select_from(Organization))
    if org_count:
        logger.info("Organizations already present, skipping demo data")
        return False

    organizations: dict[str, Organization] = {}
    for name, parent_name in DEMO_ORGANIZATIONS.items():
        org = Organization(name=name)
        if parent_name is not None:
            org.parent = organizations[parent_name]
        session.add(org)
        organizations[name] = org
    await session.flush()

    password_hash = hash_password(password)
    users: dict[str, User] = {}
    for data in DEMO_USERS:
        user = User(
            email=data["email"],
            password_hash=password_hash,
            first_name=data["first_name"],
            last_name=data["last_name"],
        )
        user.organization = organizations[data["organization"]]
        user.role = roles[data["role"]]
        session.add(user)
        users[user.email] = user
    await session.flush()

    for data in DEMO_TASKS:
        assignee = users.get(data.get("assigned_to", ""))
        session.add(Task(
            title=data["title"],
            description=data["description"],
            status=data["status"].value,
            category=TaskCategory.WORK.value,
            priority=data["priority"].value,
            sort_order=data["sort_order"],
            organization_id=organizations[data["organization"]].id,
            created_by_id=users[data["created_by"]].id,
            assigned_to_id=assignee.id if assignee else None,
        ))

    await session.commit()
    logger.info(
        "Seeded demo data: %d organizations, %d users, %d tasks",
        len(organizations), len(users), len(DEMO_TASKS),
    )
    return True


async def seed_all(session: AsyncSession, demo: bool = False, demo_password: str | None = None) -> None:
    """Seed roles, and demo data when requested."""
    roles = await seed_system_roles(session)
    if demo:
        await seed_demo_data(session, roles, demo_password or "Password123!")
