"""The authenticated caller's context for one request."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from taskhub.rbac.roles import RoleLevel


@dataclass(frozen=True)
class Principal:
    """Immutable identity passed explicitly into every decision function.

    Reconstructed per request from a verified token; the engine trusts it.
    """
    user_id: UUID
    organization_id: UUID
    role_id: UUID
    role_level: int
    email: str | None = None
    role_name: str | None = None

    @property
    def is_owner(self) -> bool:
        return self.role_level == RoleLevel.OWNER

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "Principal":
        """Build a principal from verified token claims.

        Raises:
            KeyError: If a required claim is missing.
            ValueError: If an id claim is not a UUID.
        """
        return cls(
            user_id=UUID(str(claims["sub"])),
            organization_id=UUID(str(claims["organization_id"])),
            role_id=UUID(str(claims["role_id"])),
            role_level=int(claims["role_level"]),
            email=claims.get("email"),
            role_name=claims.get("role_name"),
        )

    def to_claims(self) -> dict[str, Any]:
        return {
            "sub": str(self.user_id),
            "email": self.email,
            "role_id": str(self.role_id),
            "role_name": self.role_name,
            "role_level": int(self.role_level),
            "organization_id": str(self.organization_id),
        }
