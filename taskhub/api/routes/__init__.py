"""Routes for the taskhub API."""

from .audit import router as audit_router
from .auth import router as auth_router
from .health import router as health_router
from .organizations import router as organizations_router
from .tasks import router as tasks_router
from .users import router as users_router

__all__ = [
    "audit_router",
    "auth_router",
    "health_router",
    "organizations_router",
    "tasks_router",
    "users_router",
]
