"""
Runtime configuration for clicklink
===================================

Link policy is read from a key-value file (``config.properties`` by default),
everything else from environment variables. Avoid reading either anywhere
else: call `load_settings()` and pass the result down.

Link policy (config file)
-------------------------
- maxLifetimeHours : upper bound for a link's lifetime in hours (default 24)
- clicksLimit      : lower bound for a link's click limit (default 6)

A missing file is fatal (`ConfigLoadError`); a missing key falls back to its
default.

Environment
-----------
- CLICKLINK_CONFIG_FILE     : path of the config file (default "config.properties")
- CLICKLINK_BASE_URL        : prefix of every short URL (default "http://clck.ru/")
- CLICKLINK_CODE_STRATEGY   : "random" (default) or "sequential"
- CLICKLINK_CODE_LENGTH     : code length; default 6; clamped to [4, 32]
- CLICKLINK_STORAGE_BACKEND : "memory" (default)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from dotenv import dotenv_values

from clicklink.exceptions import ConfigLoadError

DEFAULT_CONFIG_FILE = "config.properties"
MAX_LIFETIME_HOURS_KEY = "maxLifetimeHours"
CLICKS_LIMIT_KEY = "clicksLimit"

DEFAULT_MAX_LIFETIME_HOURS = 24
DEFAULT_MIN_CLICKS_LIMIT = 6
DEFAULT_BASE_URL = "http://clck.ru/"
DEFAULT_CODE_LENGTH = 6


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


def _parse_positive(values: Dict[str, Optional[str]], key: str, default: int) -> int:
    raw = values.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigLoadError(f"{key} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ConfigLoadError(f"{key} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    max_lifetime_hours: int = DEFAULT_MAX_LIFETIME_HOURS
    min_clicks_limit: int = DEFAULT_MIN_CLICKS_LIMIT
    base_url: str = DEFAULT_BASE_URL
    code_strategy: str = "random"
    code_length: int = DEFAULT_CODE_LENGTH
    storage_backend: str = "memory"
    config_file: Optional[str] = None


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Build `Settings` from the config file and the environment.

    Args:
        path: Config file location. Defaults to CLICKLINK_CONFIG_FILE, then
            ``config.properties`` in the working directory.

    Raises:
        ConfigLoadError: If the file is missing or a value is not a positive integer.
    """
    config_path = Path(path or os.getenv("CLICKLINK_CONFIG_FILE", DEFAULT_CONFIG_FILE))
    if not config_path.is_file():
        raise ConfigLoadError(f"{config_path} not found")

    try:
        values = dotenv_values(config_path, interpolate=False)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"Failed to load configuration from: {config_path}") from exc

    code_length = max(4, min(32, _get_int("CLICKLINK_CODE_LENGTH", DEFAULT_CODE_LENGTH)))

    return Settings(
        max_lifetime_hours=_parse_positive(values, MAX_LIFETIME_HOURS_KEY, DEFAULT_MAX_LIFETIME_HOURS),
        min_clicks_limit=_parse_positive(values, CLICKS_LIMIT_KEY, DEFAULT_MIN_CLICKS_LIMIT),
        base_url=os.getenv("CLICKLINK_BASE_URL", DEFAULT_BASE_URL),
        code_strategy=os.getenv("CLICKLINK_CODE_STRATEGY", "random").strip().lower(),
        code_length=code_length,
        storage_backend=os.getenv("CLICKLINK_STORAGE_BACKEND", "memory").strip().lower(),
        config_file=str(config_path),
    )
