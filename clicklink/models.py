"""
Domain records for clicklink.

`Link` is the only entity. Its identity fields (code, URLs, owner, creation
time, ttl) never change after creation; `click_limit`, `click_count` and
`active` change only while the caller holds the link's storage lock.

LLM Prompt Example:
    "Show how a small mutable dataclass can carry lifecycle predicates
    (expired, limit reached, usable) so policy code reads declaratively."
"""

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional


@dataclass
class Link:
    short_code: str
    short_url: str
    original_url: str
    owner_id: str
    created_at: datetime
    ttl: timedelta
    click_limit: int
    click_count: int = 0
    active: bool = True

    @property
    def expires_at(self) -> datetime:
        return self.created_at + self.ttl

    def is_expired(self, now: datetime) -> bool:
        """True once `now` is strictly past `created_at + ttl`."""
        return now > self.expires_at

    def is_limit_reached(self) -> bool:
        return self.click_count >= self.click_limit

    def is_usable(self, now: datetime) -> bool:
        return self.active and not self.is_expired(now) and not self.is_limit_reached()

    def increment_clicks(self) -> None:
        self.click_count += 1

    def disable(self) -> None:
        # One-way: nothing sets active back to True.
        self.active = False


class RedeemStatus(str, enum.Enum):
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    OPENED = "opened"
    OPENED_AND_EXPIRED = "opened_and_expired"


@dataclass(frozen=True)
class Redemption:
    """
    Outcome of a single redemption attempt.

    Attributes:
        status: Terminal state of the attempt.
        link: A copy of the record taken under the link's lock when the
            attempt finished (None when not found). Later redemptions or edits
            do not change it. After OPENED_AND_EXPIRED or UNAVAILABLE the
            link is no longer stored.
        open_error: Why opening the original URL failed, if it did. The click
            is consumed either way.
    """

    status: RedeemStatus
    link: Optional[Link] = None
    open_error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status in (RedeemStatus.OPENED, RedeemStatus.OPENED_AND_EXPIRED)


class OwnerActionStatus(str, enum.Enum):
    """Outcome of an owner-only change (click limit edit, removal)."""

    OK = "ok"
    NOT_FOUND = "not_found"
    NOT_OWNER = "not_owner"
