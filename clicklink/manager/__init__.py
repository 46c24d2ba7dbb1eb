"""Link lifecycle policy and short-code generation."""

from .link_manager import LinkManager
from .strategies import RandomStrategy, SequentialStrategy, get_strategy_from_config

__all__ = ["LinkManager", "RandomStrategy", "SequentialStrategy", "get_strategy_from_config"]
