"""Configuration loading for the API client.

Main Functions
--------------

    - load_config(): Load settings from config.yaml (+ env overrides)
    - get_config(): Get or load singleton settings instance
    - set_config(): Replace the singleton (tests)
    - reset_config(): Reset singleton settings instance

Usage Examples
--------------

    >>> from client_config import get_config
    >>> settings = get_config()
    >>> settings.request_timeout_ms
    15000

Configuration Priority
---------------------

1. Environment variables (API_BASE_URL, API_TIMEOUT_MS, API_RETRIES,
   API_RETRY_DELAY_MS, SESSION_TIMEOUT_MINUTES, TOKEN_FILE)
2. Overrides passed to load_config()
3. YAML configuration file
4. Dataclass defaults
"""

from client_config.config import (
    ClientSettings,
    get_config,
    load_config,
    reset_config,
    set_config,
)

__all__ = [
    "load_config",
    "get_config",
    "set_config",
    "reset_config",
    "ClientSettings",
]
