"""
Auth package for clicklink.

Users are opaque handles (UUID strings) kept in an in-memory registry.
Identity is checked by comparison only; there are no passwords.
"""

from .service import UserRegistry

__all__ = ["UserRegistry"]
