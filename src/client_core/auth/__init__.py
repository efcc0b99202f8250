"""
Authentication state module.

Components:
    - MemoryStorage / JsonFileStorage: session and durable persistence tiers
    - TokenStore: two-tier bearer credential holder
    - LogoutFlag: cooperative "logout in progress" marker
"""

from .storage import JsonFileStorage, MemoryStorage
from .token_store import (
    LOGOUT_FLAG_KEY,
    RETURN_URL_KEY,
    TOKEN_KEY,
    LogoutFlag,
    TokenStore,
)

__all__ = [
    "MemoryStorage",
    "JsonFileStorage",
    "TokenStore",
    "LogoutFlag",
    "TOKEN_KEY",
    "LOGOUT_FLAG_KEY",
    "RETURN_URL_KEY",
]
