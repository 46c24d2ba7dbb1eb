"""
LinkManager module for clicklink.

Responsibilities:
    - Create links with clamped lifetime and click limit
    - Redeem links: count the click, open the URL, evict exhausted links
    - Let owners change a link's click limit or remove it
    - Sweep expired links

Redemption state machine (per attempt):
    1. Unknown code                         -> NOT_FOUND, nothing changes
    2. Inactive, expired or limit reached   -> disable + remove, UNAVAILABLE
    3. Otherwise count the click
    4. Limit now reached                    -> disable + remove, OPENED_AND_EXPIRED
    5. Otherwise                            -> OPENED
    The URL is opened after steps 3-5 have been applied under the link's lock,
    so a failing opener never leaves the store inconsistent and never gives
    the click back.

Design notes:
    - The caller's identity is an explicit argument of every owner-only call.
    - Eviction is lazy: an unusable link is removed when a redemption observes
      it or when the sweep runs, never by a timer.
    - Business outcomes are return values; nothing here raises for them.

LLM Prompt Example:
    "Explain how a per-key lock makes the last permitted click and the
    eviction of the link a single step for concurrent callers."
"""

import dataclasses
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from clicklink.config import Settings
from clicklink.exceptions import CodeGenerationError
from clicklink.models import Link, OwnerActionStatus, RedeemStatus, Redemption
from clicklink.storage.base import BaseStorage

from .opener import NO_BROWSER, Opener, open_in_browser
from .strategies import BaseStrategy, RandomStrategy, get_strategy_from_config

log = logging.getLogger(__name__)

Clock = Callable[[], datetime]

DEFAULT_BASE_URL = "http://clck.ru/"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LinkManager:
    """
    Enforces link policy on top of an injected storage.

    Args:
        storage: Backend holding the links.
        max_lifetime_hours: Upper bound for a link's lifetime.
        min_clicks_limit: Lower bound for a link's click limit.
        code_strategy: Short-code generator (random Base62 by default).
        base_url: Prefix joined with the code to form the short URL.
        opener: Called with the original URL on every successful redemption.
        clock: Returns the current aware datetime.
        code_length: Length passed to the code strategy.
        max_code_attempts: Codes tried before giving up on collisions.
    """

    def __init__(
        self,
        storage: BaseStorage,
        max_lifetime_hours: int,
        min_clicks_limit: int,
        code_strategy: Optional[BaseStrategy] = None,
        base_url: str = DEFAULT_BASE_URL,
        opener: Opener = open_in_browser,
        clock: Clock = utc_now,
        code_length: int = 6,
        max_code_attempts: int = 10,
    ):
        self.storage = storage
        self.max_lifetime_hours = max_lifetime_hours
        self.min_clicks_limit = min_clicks_limit
        self.code_strategy = code_strategy or RandomStrategy()
        self.base_url = base_url
        self.opener = opener
        self.clock = clock
        self.code_length = code_length
        self.max_code_attempts = max_code_attempts

    @classmethod
    def from_settings(cls, settings: Settings, storage: BaseStorage, **kwargs) -> "LinkManager":
        """Build a manager from loaded `Settings`; kwargs override the rest."""
        kwargs.setdefault("code_strategy", get_strategy_from_config(settings.code_strategy))
        kwargs.setdefault("base_url", settings.base_url)
        kwargs.setdefault("code_length", settings.code_length)
        return cls(
            storage,
            max_lifetime_hours=settings.max_lifetime_hours,
            min_clicks_limit=settings.min_clicks_limit,
            **kwargs,
        )

    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------
    def _code_from(self, short_code_or_url: str) -> str:
        """Accept either a bare code or a full short URL."""
        value = short_code_or_url.strip()
        if self.base_url and value.startswith(self.base_url):
            return value[len(self.base_url):]
        return value

    def _clamp_limit(self, clicks_limit: int) -> int:
        return max(clicks_limit, self.min_clicks_limit)

    def _evict(self, link: Link) -> None:
        # Caller holds the link's lock.
        link.disable()
        self.storage.remove(link.short_code)

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def get_link(self, short_code_or_url: str) -> Optional[Link]:
        """Read-only lookup; never evicts."""
        return self.storage.find(self._code_from(short_code_or_url))

    def create(self, owner_id: str, original_url: str, clicks_limit: int, lifetime_hours: int) -> Link:
        """
        Create and store a link owned by `owner_id`.

        Lifetime is capped at `max_lifetime_hours`; the click limit is raised to
        at least `min_clicks_limit`.

        Raises:
            CodeGenerationError: If `max_code_attempts` codes in a row were taken.
        """
        lifetime = min(lifetime_hours, self.max_lifetime_hours)
        limit = self._clamp_limit(clicks_limit)
        created_at = self.clock()

        for attempt in range(1, self.max_code_attempts + 1):
            code = self.code_strategy.generate(length=self.code_length)
            link = Link(
                short_code=code,
                short_url=f"{self.base_url}{code}",
                original_url=original_url,
                owner_id=owner_id,
                created_at=created_at,
                ttl=timedelta(hours=lifetime),
                click_limit=limit,
            )
            if self.storage.add(link):
                log.info(
                    "Created %s -> %s (owner=%s, limit=%d, lifetime=%dh)",
                    link.short_url, original_url, owner_id, limit, lifetime,
                )
                return link
            log.debug("Short code collision on %r (attempt %d)", code, attempt)

        raise CodeGenerationError(f"No unused short code after {self.max_code_attempts} attempts")

    def redeem(self, short_code_or_url: str) -> Redemption:
        """
        Resolve a short code, consuming one click.

        Returns:
            Redemption: status plus the link as observed by this attempt.
        """
        code = self._code_from(short_code_or_url)
        if self.storage.find(code) is None:
            log.info("Link not found: %s", code)
            return Redemption(RedeemStatus.NOT_FOUND)

        with self.storage.lock(code):
            # Re-read under the lock: a concurrent redemption may have evicted it.
            link = self.storage.find(code)
            if link is None:
                log.info("Link not found: %s", code)
                return Redemption(RedeemStatus.NOT_FOUND)

            if not link.is_usable(self.clock()):
                self._evict(link)
                log.info("Link %s is expired, inactive or over its limit; removed", code)
                return Redemption(RedeemStatus.UNAVAILABLE, dataclasses.replace(link))

            link.increment_clicks()
            status = RedeemStatus.OPENED
            if link.is_limit_reached():
                self._evict(link)
                status = RedeemStatus.OPENED_AND_EXPIRED
                log.info("Link %s reached its click limit (%d); removed", code, link.click_limit)
            observed = dataclasses.replace(link)

        return Redemption(status, observed, self._open(observed.original_url))

    def _open(self, url: str) -> Optional[str]:
        """Run the opener outside any storage lock; return an error text on failure."""
        try:
            opened = self.opener(url)
        except Exception as exc:
            log.warning("Failed to open %s: %s", url, exc)
            return str(exc) or exc.__class__.__name__
        if not opened:
            return NO_BROWSER
        return None

    def change_limit(self, requester_id: str, short_code_or_url: str, new_limit: int) -> OwnerActionStatus:
        """
        Change the click limit of a link owned by `requester_id`.

        The new limit is raised to at least `min_clicks_limit`. Lowering it to or
        below the current click count does not evict the link; the next
        redemption or sweep does.

        Returns:
            OwnerActionStatus: OK, NOT_FOUND or NOT_OWNER, decided under the
            link's lock.
        """
        code = self._code_from(short_code_or_url)
        with self.storage.lock(code):
            link = self.storage.find(code)
            if link is None:
                log.info("Link not found: %s", code)
                return OwnerActionStatus.NOT_FOUND
            if link.owner_id != requester_id:
                log.info("User %s is not the owner of %s", requester_id, code)
                return OwnerActionStatus.NOT_OWNER
            link.click_limit = self._clamp_limit(new_limit)
            log.info("Click limit of %s changed to %d", code, link.click_limit)
        return OwnerActionStatus.OK

    def edit_limit(self, requester_id: str, short_code_or_url: str, new_limit: int) -> bool:
        """`change_limit` reduced to success or refusal."""
        return self.change_limit(requester_id, short_code_or_url, new_limit) is OwnerActionStatus.OK

    def delete(self, requester_id: str, short_code_or_url: str) -> OwnerActionStatus:
        """Remove a link owned by `requester_id`."""
        code = self._code_from(short_code_or_url)
        with self.storage.lock(code):
            link = self.storage.find(code)
            if link is None:
                log.info("Link not found: %s", code)
                return OwnerActionStatus.NOT_FOUND
            if link.owner_id != requester_id:
                log.info("User %s is not the owner of %s", requester_id, code)
                return OwnerActionStatus.NOT_OWNER
            self.storage.remove(code)
        log.info("Link %s removed by its owner", code)
        return OwnerActionStatus.OK

    def remove_link(self, requester_id: str, short_code_or_url: str) -> bool:
        """Remove a link owned by `requester_id`. False if missing or not theirs."""
        return self.delete(requester_id, short_code_or_url) is OwnerActionStatus.OK

    def remove_expired_links(self) -> int:
        """Remove every expired link regardless of owner or state; return the count."""
        now = self.clock()
        removed = self.storage.remove_where(lambda link: link.is_expired(now))
        log.info("Removed %d expired links", removed)
        return removed
