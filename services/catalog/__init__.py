# services/catalog/__init__.py
"""catalog services package initializer — explicit exports only; no runtime side effects."""

__all__ = ["repo", "routes"]
