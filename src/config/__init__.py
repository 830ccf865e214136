"""
Configuration package for expiry-board.

Environment access:
    from src.config.env_config import EnvConfig

Feed configuration snapshot:
    from src.config.feed_settings import FeedSettings
    settings = FeedSettings.from_env()
"""
from .env_config import EnvConfig
from .feed_settings import FeedSettings, SheetCredentials


__all__ = [
    'EnvConfig',
    'FeedSettings',
    'SheetCredentials',
]
