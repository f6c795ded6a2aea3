"""RBAC-related exceptions.

Every denial produced by the authorization engine is one of these typed
errors. The HTTP layer maps ``status_code`` onto the response.
"""

from enum import Enum


class DenialReason(str, Enum):
    """Why a Forbidden decision was made."""
    ORGANIZATION_ACCESS = "organization_access"
    ROLE_LEVEL = "insufficient_role_level"
    SELF_TARGET = "self_target"
    OWNERSHIP = "ownership"


class RBACError(Exception):
    """Base exception for RBAC errors."""

    status_code: int = 500

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code


class AuthenticationError(RBACError):
    """Raised when credentials or a bearer token cannot be verified.

    HTTP Status: 401 Unauthorized
    """

    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, code="AUTHENTICATION_FAILED")


class ForbiddenError(RBACError):
    """Raised when a principal is not allowed to perform an action.

    HTTP Status: 403 Forbidden
    """

    status_code = 403

    def __init__(self, message: str, reason: DenialReason):
        super().__init__(message, code="FORBIDDEN")
        self.reason = reason


class NotFoundError(RBACError):
    """Raised when a referenced entity does not exist.

    HTTP Status: 404 Not Found
    """

    status_code = 404

    def __init__(self, message: str = "Resource not found", code: str = "NOT_FOUND"):
        super().__init__(message, code=code)


class TaskNotFoundError(NotFoundError):
    def __init__(self, task_id: object | None = None):
        message = f"Task not found: {task_id}" if task_id else "Task not found"
        super().__init__(message, code="TASK_NOT_FOUND")


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: object | None = None):
        message = f"User not found: {user_id}" if user_id else "User not found"
        super().__init__(message, code="USER_NOT_FOUND")


class OrganizationNotFoundError(NotFoundError):
    def __init__(self, org_id: object | None = None):
        message = f"Organization not found: {org_id}" if org_id else "Organization not found"
        super().__init__(message, code="ORG_NOT_FOUND")


class RoleNotFoundError(NotFoundError):
    def __init__(self, role_id: object | None = None, role_name: str | None = None):
        if role_id:
            message = f"Role not found: {role_id}"
        elif role_name:
            message = f"Role not found: {role_name}"
        else:
            message = "Role not found"
        super().__init__(message, code="ROLE_NOT_FOUND")


class ConflictError(RBACError):
    """Raised on a uniqueness violation.

    HTTP Status: 409 Conflict
    """

    status_code = 409

    def __init__(self, message: str, code: str = "CONFLICT"):
        super().__init__(message, code=code)


class DuplicateEmailError(ConflictError):
    def __init__(self, email: str):
        super().__init__(f"User with email already exists: {email}", code="DUPLICATE_EMAIL")


class DuplicateRoleError(ConflictError):
    def __init__(self, role_name: str):
        super().__init__(f"Role already exists: {role_name}", code="DUPLICATE_ROLE")


class InvalidConfigurationError(RBACError):
    """Raised when the organization tree is malformed (e.g. contains a cycle).

    This is a fatal condition of the stored data, not a per-request denial.
    """

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message, code="INVALID_CONFIGURATION")
