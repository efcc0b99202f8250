"""
pytest configuration for client tests.

Adds src directory to Python path for imports and isolates tests from the
host environment's client settings.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

CLIENT_ENV_VARS = (
    "API_BASE_URL",
    "API_TIMEOUT_MS",
    "API_RETRIES",
    "API_RETRY_DELAY_MS",
    "SESSION_TIMEOUT_MINUTES",
    "TOKEN_FILE",
)


@pytest.fixture(autouse=True)
def isolated_client_env(monkeypatch):
    """Drop client env overrides and reset the settings singleton per test."""
    for var in CLIENT_ENV_VARS:
        monkeypatch.delenv(var, raising=False)

    from client_config.config import reset_config

    reset_config()
    yield
    reset_config()

