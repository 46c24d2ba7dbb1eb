"""
Core user-identity logic.

This module keeps the set of registered user handles. Membership checks are
O(1) and safe to call from several threads.
"""

import threading
import uuid
from typing import Set


class UserRegistry:
    """In-memory registry of opaque user handles."""

    def __init__(self) -> None:
        self._users: Set[str] = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def create_user_id(self) -> str:
        """
        Register a new user and return their handle.

        Returns:
            str: A random UUID4 string.
        """
        user_id = str(uuid.uuid4())
        self.add_user(user_id)
        return user_id

    def add_user(self, user_id: str) -> None:
        with self._lock:
            self._users.add(user_id)

    def is_user_exist(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._users
