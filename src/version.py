"""Central version metadata for expiry-board.

Resolution order for get_version():
1. Env override EB_VERSION (e.g., injected by CI)
2. __version__ constant below

Update the __version__ value during release tagging.
"""
from __future__ import annotations

from src.config.env_config import EnvConfig

__version__ = "0.3.0"

def get_version() -> str:
    return EnvConfig.get_str("EB_VERSION", __version__)

__all__ = ["__version__", "get_version"]
