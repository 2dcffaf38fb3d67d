# services/verification/__init__.py
"""verification services package initializer — explicit exports only; no runtime side effects."""

__all__ = ["channel", "telegram", "routes"]
