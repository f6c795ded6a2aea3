"""RBAC (Role-Based Access Control) module for taskhub.

This module provides the role hierarchy, organization closure resolution,
authorization decisions and audit logging for the multi-tenant
organization/user/task model.
"""

from taskhub.rbac.audit import AuditedResult, AuditLogger
from taskhub.rbac.exceptions import (
    AuthenticationError,
    ConflictError,
    DenialReason,
    ForbiddenError,
    InvalidConfigurationError,
    NotFoundError,
    RBACError,
)
from taskhub.rbac.organizations import OrganizationClosureResolver, OrganizationTree
from taskhub.rbac.principal import Principal
from taskhub.rbac.roles import RoleLevel, RoleName, at_least, strictly_below

__all__ = [
    # Audit
    "AuditLogger",
    "AuditedResult",
    # Closure
    "OrganizationClosureResolver",
    "OrganizationTree",
    # Roles
    "Principal",
    "RoleLevel",
    "RoleName",
    "at_least",
    "strictly_below",
    # Exceptions
    "RBACError",
    "AuthenticationError",
    "ConflictError",
    "DenialReason",
    "ForbiddenError",
    "InvalidConfigurationError",
    "NotFoundError",
]
