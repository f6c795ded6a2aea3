"""taskhub: multi-tenant task management with hierarchical RBAC and auditing."""

__version__ = "0.1.0"
