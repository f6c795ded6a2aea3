"""Role hierarchy.

Roles are totally ordered by level (Owner > Admin > Viewer). Every privilege
comparison goes through the level, never through the role name.
"""

from enum import Enum, IntEnum
from typing import Any


class RoleName(str, Enum):
    OWNER = "Owner"
    ADMIN = "Admin"
    VIEWER = "Viewer"


class RoleLevel(IntEnum):
    VIEWER = 1
    ADMIN = 2
    OWNER = 3


# Seeded once; see taskhub.db.seed_data
SYSTEM_ROLES: dict[RoleName, dict[str, Any]] = {
    RoleName.OWNER: {
        "level": RoleLevel.OWNER,
        "description": "Full system access",
    },
    RoleName.ADMIN: {
        "level": RoleLevel.ADMIN,
        "description": "Can manage users and tasks within organization",
    },
    RoleName.VIEWER: {
        "level": RoleLevel.VIEWER,
        "description": "Read-only access, can only modify own tasks",
    },
}


def at_least(principal_level: int, required_level: int) -> bool:
    """Return True if ``principal_level`` meets ``required_level``."""
    return principal_level >= required_level


def strictly_below(a: int, b: int) -> bool:
    """Return True if level ``a`` is lower than level ``b``.

    Used for "cannot assign a role at or above your own level".
    """
    return a < b
