from __future__ import annotations

from src.config.env_config import EnvConfig

# Centralized configuration helpers and constants

# Development CORS override flag ("1" enables allow-all)
CORS_ALL: str = EnvConfig.get_str("EB_CORS_ALL", "0").strip()

# Explicit browser origins allowed to read the API (comma separated)
CORS_ORIGINS: list[str] = EnvConfig.get_list(
    "EB_CORS_ORIGINS", ["http://127.0.0.1:5173", "http://localhost:5173", "http://127.0.0.1", "http://localhost"]
)

# Directory for the JSON access log; empty keeps access logs on the console
LOG_DIR: str = EnvConfig.get_path("EB_LOG_DIR", "")

# Start the background refresher with the app (disable for read-only replicas)
AUTOSTART_REFRESHER: bool = EnvConfig.get_bool("EB_AUTOSTART_REFRESHER", True)
