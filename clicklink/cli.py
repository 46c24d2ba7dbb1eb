"""
Interactive command shell for clicklink.

Reads one command per line and maps it onto the link manager and the user
registry. The logged-in user is state of the shell, passed explicitly to
every manager call.

Usage:
    clicklink --config config.properties
"""

import argparse
import logging
import sys
import uuid
from typing import Iterable, List, Optional

from auth.service import UserRegistry
from clicklink.config import load_settings
from clicklink.exceptions import ConfigLoadError
from clicklink.manager.link_manager import LinkManager
from clicklink.manager.opener import NO_BROWSER, open_in_browser
from clicklink.models import OwnerActionStatus, RedeemStatus
from clicklink.storage.storage_factory import get_storage

log = logging.getLogger(__name__)

HELP_TEXT = """\
exit: exit the program
register: create a new user
login UUID: login with an existing user
short url clicksLimit lifetimeHours: shorten a link
open shortUrl: open a shortened link
edit_clicks_limit shortUrl newLimit: change the redirect limit
remove shortUrl: remove a link
clear: remove expired links"""

REFUSALS = {
    OwnerActionStatus.NOT_FOUND: "The link was not found",
    OwnerActionStatus.NOT_OWNER: "You are not the owner of this link",
}


class LinkShell:
    """Dispatches text commands; `handle` returns False once the user exits."""

    def __init__(self, manager: LinkManager, users: UserRegistry):
        self.manager = manager
        self.users = users
        self.user_id: Optional[str] = None

    def run(self, lines: Iterable[str]) -> None:
        print("Welcome to the URL Shortening Service!")
        print("To view the available commands, enter the command help")
        for line in lines:
            if not self.handle(line):
                break

    def handle(self, line: str) -> bool:
        chunks = line.split()
        if not chunks:
            return True
        action = chunks[0].lower()
        if action == "exit":
            return False

        handler = {
            "help": self._help,
            "register": self._register,
            "login": self._login,
            "short": self._short,
            "open": self._open,
            "edit_clicks_limit": self._edit_clicks_limit,
            "remove": self._remove,
            "clear": self._clear,
        }.get(action)
        if handler is None:
            print("Unknown command. Type help for a list of commands")
        else:
            handler(chunks)
        return True

    # ---------------------------------------------------------------------
    # Commands
    # ---------------------------------------------------------------------
    def _help(self, chunks: List[str]) -> None:
        print(HELP_TEXT)

    def _logged_in(self) -> bool:
        if self.user_id is None:
            print("Please register or login")
            return False
        return True

    def _register(self, chunks: List[str]) -> None:
        self.user_id = self.users.create_user_id()
        print(f"A new user has been registered with UUID: {self.user_id}")
        print(f"You have logged in as a user: {self.user_id}")

    def _login(self, chunks: List[str]) -> None:
        if len(chunks) < 2:
            print("Usage: login UUID")
            return
        try:
            uuid.UUID(chunks[1])
        except ValueError:
            print("Invalid UUID")
            return
        if not self.users.is_user_exist(chunks[1]):
            print("A user with this UUID is not registered")
            return
        self.user_id = chunks[1]
        print(f"You have logged in as user: {self.user_id}")

    def _short(self, chunks: List[str]) -> None:
        if not self._logged_in():
            return
        if len(chunks) < 4:
            print("Incorrect input format: short url clicksLimit lifetimeHours")
            return
        try:
            clicks_limit = int(chunks[2])
            lifetime_hours = int(chunks[3])
        except ValueError:
            print("Invalid number format for clicksLimit or lifetimeHours")
            return
        link = self.manager.create(self.user_id, chunks[1], clicks_limit, lifetime_hours)
        print(f"Shortened link: {link.short_url}")

    def _open(self, chunks: List[str]) -> None:
        if len(chunks) < 2:
            print("Incorrect input format: open shortUrl")
            return
        result = self.manager.redeem(chunks[1])
        if result.status is RedeemStatus.NOT_FOUND:
            print("Link not found")
            return
        if result.status is RedeemStatus.UNAVAILABLE:
            print("The expiration date has passed, or the click limit has been reached")
            print("The link has been deleted because it is unavailable")
            return

        if result.open_error == NO_BROWSER:
            print(f"Open the link: {result.link.original_url}")
        elif result.open_error:
            print(f"Failed to open the link in the browser: {result.open_error}")
        if result.status is RedeemStatus.OPENED_AND_EXPIRED:
            print("The click limit has been reached. The link has been disabled")
            print("The link has been deleted")

    def _edit_clicks_limit(self, chunks: List[str]) -> None:
        if not self._logged_in():
            return
        if len(chunks) < 3:
            print("Incorrect input format: edit_clicks_limit shortUrl newLimit")
            return
        try:
            new_limit = int(chunks[2])
        except ValueError:
            print("Invalid number format for newLimit")
            return
        outcome = self.manager.change_limit(self.user_id, chunks[1], new_limit)
        if outcome is OwnerActionStatus.OK:
            print(f"The click limit has been changed to: {max(new_limit, self.manager.min_clicks_limit)}")
        else:
            print(REFUSALS[outcome])

    def _remove(self, chunks: List[str]) -> None:
        if not self._logged_in():
            return
        if len(chunks) < 2:
            print("Incorrect input format: remove shortUrl")
            return
        outcome = self.manager.delete(self.user_id, chunks[1])
        if outcome is OwnerActionStatus.OK:
            print("The link has been deleted")
        else:
            print(REFUSALS[outcome])

    def _clear(self, chunks: List[str]) -> None:
        removed = self.manager.remove_expired_links()
        print(f"Expired links have been removed: {removed}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="clicklink", description="Interactive URL shortener")
    parser.add_argument("--config", default=None, help="path of config.properties")
    parser.add_argument("--log-level", default="WARNING", help="logging level (default WARNING)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=args.log_level.upper())

    try:
        settings = load_settings(args.config)
    except ConfigLoadError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    manager = LinkManager.from_settings(
        settings, get_storage(settings.storage_backend), opener=open_in_browser
    )
    LinkShell(manager, UserRegistry()).run(sys.stdin)
    return 0


if __name__ == "__main__":
    sys.exit(main())
