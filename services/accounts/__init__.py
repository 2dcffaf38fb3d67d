# services/accounts/__init__.py
"""accounts services package initializer — explicit exports only; no runtime side effects."""

__all__ = ["passwords", "repo", "routes"]
