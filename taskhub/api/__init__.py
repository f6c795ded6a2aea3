"""HTTP surface for taskhub."""

from taskhub.api.app import create_app

__all__ = ["create_app"]
