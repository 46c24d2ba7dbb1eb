"""
Configuration for the auth module.

Callers identify themselves with a user handle sent in a request header.
"""

import os

USER_ID_HEADER: str = os.getenv("CLICKLINK_USER_HEADER", "X-User-Id")
