"""
Storage module for clicklink (in-memory implementation).

Responsibilities:
    - Keep `Link` records keyed by short code
    - Hand out per-key locks for read-modify-write of a single link
    - Sweep entries matching a predicate without blocking unrelated keys

Design:
    - The dict is guarded by `_guard`, held only for single dict operations.
    - Per-key locks live in a WeakValueDictionary: a lock exists while any
      caller references it and is reclaimed after the link is gone, so evicted
      codes do not leak locks.
    - Nothing here persists across restarts.

LLM Prompt Example:
    "Explain how fine-grained per-key locks let concurrent redemptions of
     different links proceed in parallel while the same link is serialised."
"""

import logging
import threading
import weakref
from typing import Dict, Optional

from clicklink.models import Link

from .base import BaseStorage, LinkPredicate

log = logging.getLogger(__name__)


class KeyLock:
    """Per-key mutex; a plain object so the store can hold it weakly."""

    __slots__ = ("_lock", "__weakref__")

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def acquire(self, blocking: bool = True, timeout: float = -1) -> bool:
        return self._lock.acquire(blocking, timeout)

    def release(self) -> None:
        self._lock.release()

    def __enter__(self) -> "KeyLock":
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info) -> None:
        self._lock.release()


class Storage(BaseStorage):
    def __init__(self):
        """
        Initialize empty storage.

        Internal schema:
            self._links = {short_code: Link}
            self._locks = {short_code: KeyLock}  (weak values)
        """
        self._links: Dict[str, Link] = {}
        self._guard = threading.Lock()
        self._locks: "weakref.WeakValueDictionary[str, KeyLock]" = weakref.WeakValueDictionary()

    def __len__(self) -> int:
        with self._guard:
            return len(self._links)

    def __contains__(self, code: object) -> bool:
        with self._guard:
            return code in self._links

    def lock(self, code: str) -> KeyLock:
        """
        Return the lock serialising mutations of `code`.

        The same lock object is returned to every caller for as long as
        anyone holds a reference to it.
        """
        with self._guard:
            key_lock = self._locks.get(code)
            if key_lock is None:
                key_lock = KeyLock()
                self._locks[code] = key_lock
            return key_lock

    def find(self, code: str) -> Optional[Link]:
        with self._guard:
            return self._links.get(code)

    def find_all(self) -> Dict[str, Link]:
        """
        Snapshot of all live entries.

        The returned dict is a copy: iterating it never races with concurrent
        saves or removals, but the Link objects are the stored ones.
        """
        with self._guard:
            return dict(self._links)

    def save(self, link: Link) -> Link:
        with self._guard:
            self._links[link.short_code] = link
        return link

    def add(self, link: Link) -> bool:
        with self._guard:
            if link.short_code in self._links:
                return False
            self._links[link.short_code] = link
            return True

    def remove(self, code: str) -> None:
        with self._guard:
            self._links.pop(code, None)

    def remove_where(self, predicate: LinkPredicate) -> int:
        """
        Check-and-remove entry by entry.

        Iterates a snapshot of the keys taken at the start; a link created
        after that point is not visited. Each check runs under the entry's own
        lock and re-reads the entry, so a link replaced or removed meanwhile is
        judged on its current state.
        """
        removed = 0
        for code in list(self.find_all()):
            with self.lock(code):
                link = self.find(code)
                if link is not None and predicate(link):
                    self.remove(code)
                    removed += 1
        log.debug("remove_where removed %d entries", removed)
        return removed
