"""
Best-effort "open the original URL" side effect.

Opening a browser has no bearing on link state: the manager calls an opener
after the click has been counted and only reports what happened.
"""

import logging
import webbrowser
from typing import Callable

log = logging.getLogger(__name__)

# open_error reported when the opener returns False.
NO_BROWSER = "no browser available"

# Returns False (or raises) when the URL could not be opened.
Opener = Callable[[str], bool]


def open_in_browser(url: str) -> bool:
    """Open `url` in the default browser. False when no browser is available."""
    opened = webbrowser.open(url)
    if not opened:
        log.info("No browser available to open %s", url)
    return bool(opened)


def no_op_opener(url: str) -> bool:
    """Opener for contexts where the caller serves the URL itself (HTTP redirects)."""
    return True
