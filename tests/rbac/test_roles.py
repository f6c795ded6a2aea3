"""Tests for the role hierarchy and the Principal value."""

from uuid import uuid4

import pytest

from taskhub.rbac.principal import Principal
from taskhub.rbac.roles import SYSTEM_ROLES, RoleLevel, RoleName, at_least, strictly_below


class TestRoleLevels:
    def test_levels_are_totally_ordered(self):
        assert RoleLevel.OWNER > RoleLevel.ADMIN > RoleLevel.VIEWER
        assert [int(level) for level in (RoleLevel.VIEWER, RoleLevel.ADMIN, RoleLevel.OWNER)] == [1, 2, 3]

    def test_system_roles_cover_every_name(self):
        assert set(SYSTEM_ROLES) == set(RoleName)
        assert SYSTEM_ROLES[RoleName.OWNER]["level"] == RoleLevel.OWNER
        assert SYSTEM_ROLES[RoleName.VIEWER]["level"] == RoleLevel.VIEWER

    @pytest.mark.parametrize(
        "principal_level,required,expected",
        [(3, 2, True), (2, 2, True), (1, 2, False)],
    )
    def test_at_least(self, principal_level, required, expected):
        assert at_least(principal_level, required) is expected

    def test_strictly_below_excludes_equal(self):
        assert strictly_below(1, 2)
        assert not strictly_below(2, 2)
        assert not strictly_below(3, 2)


class TestPrincipal:
    def _principal(self, level: int = RoleLevel.ADMIN) -> Principal:
        return Principal(
            user_id=uuid4(),
            organization_id=uuid4(),
            role_id=uuid4(),
            role_level=level,
            email="someone@example.com",
            role_name="Admin",
        )

    def test_is_owner(self):
        assert self._principal(RoleLevel.OWNER).is_owner
        assert not self._principal(RoleLevel.ADMIN).is_owner

    def test_claims_round_trip(self):
        principal = self._principal()
        assert Principal.from_claims(principal.to_claims()) == principal

    def test_claims_use_sub_for_user_id(self):
        principal = self._principal()
        claims = principal.to_claims()
        assert claims["sub"] == str(principal.user_id)
        assert claims["role_level"] == 2

    def test_missing_claim_raises(self):
        claims = self._principal().to_claims()
        del claims["organization_id"]
        with pytest.raises(KeyError):
            Principal.from_claims(claims)

    def test_malformed_id_raises(self):
        claims = self._principal().to_claims()
        claims["sub"] = "not-a-uuid"
        with pytest.raises(ValueError):
            Principal.from_claims(claims)

    def test_is_immutable(self):
        principal = self._principal()
        with pytest.raises(AttributeError):
            principal.role_level = RoleLevel.OWNER
