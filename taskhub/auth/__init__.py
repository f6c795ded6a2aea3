"""Authentication helpers: password hashing and bearer tokens."""

from taskhub.auth.passwords import hash_password, verify_password
from taskhub.auth.tokens import TokenService

__all__ = ["TokenService", "hash_password", "verify_password"]
