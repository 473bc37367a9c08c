"""ScopeGuard: resource-scoped authorization engine."""

__version__ = "0.1.0"
