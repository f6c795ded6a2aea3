"""Application services. Each takes a session and performs authorized, audited work."""

from taskhub.services.auth import AuthService, LoginResult, principal_for
from taskhub.services.organizations import OrganizationService
from taskhub.services.tasks import TaskService
from taskhub.services.users import UserService

__all__ = [
    "AuthService",
    "LoginResult",
    "OrganizationService",
    "TaskService",
    "UserService",
    "principal_for",
]
