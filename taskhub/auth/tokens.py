"""Signed bearer tokens carrying a principal's claims."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
from jwt.exceptions import InvalidTokenError

from taskhub.rbac.exceptions import AuthenticationError
from taskhub.rbac.principal import Principal


class TokenService:
    """Issue and validate HS256 JWTs for authenticated principals."""

    def __init__(self, secret: str, algorithm: str = "HS256", expiration_minutes: int = 1440) -> None:
        self.secret = secret
        self.algorithm = algorithm
        self.expiration = timedelta(minutes=expiration_minutes)

    def issue(self, principal: Principal) -> str:
        payload = principal.to_claims()
        payload["exp"] = datetime.now(timezone.utc) + self.expiration
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> Principal:
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except InvalidTokenError as exc:
            raise AuthenticationError(f"Invalid token: {exc}") from exc

        try:
            return Principal.from_claims(claims)
        except (KeyError, ValueError) as exc:
            raise AuthenticationError("Token is missing required claims") from exc
