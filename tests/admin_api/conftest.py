"""Shared fixtures for admin API client tests: a scripted aiohttp session."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from admin_api.client import ApiClient
from admin_api.navigation import InProcessNavigator
from admin_api.policies import SubscriptionRedirectHandler
from client_core.auth.storage import MemoryStorage
from client_core.auth.token_store import LogoutFlag, TokenStore
from client_core.resilience.retry import RetryConfig

BASE_URL = "https://api.example.com"


def make_response(status=200, body=None, text=None, content_type="application/json"):
    """Build a mock aiohttp response usable as an async context manager."""
    if text is None:
        text = "" if body is None else json.dumps(body)
    response = AsyncMock()
    response.status = status
    response.headers = {"Content-Type": content_type}
    response.text = AsyncMock(return_value=text)
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=None)
    return response


def make_hanging_response(seconds=10.0):
    """Response whose exchange never completes within a test deadline."""

    async def hang(*args, **kwargs):
        await asyncio.sleep(seconds)

    response = AsyncMock()
    response.__aenter__ = AsyncMock(side_effect=hang)
    response.__aexit__ = AsyncMock(return_value=None)
    return response


def connection_refused():
    return aiohttp.ClientConnectionError("Cannot connect to host api.example.com:443")


@pytest.fixture
def mock_session():
    session = AsyncMock()
    session.closed = False
    session.request = MagicMock(return_value=make_response(200, {}))
    return session


@pytest.fixture
def session_storage():
    return MemoryStorage()


@pytest.fixture
def token_store(session_storage):
    return TokenStore(durable=MemoryStorage(), session=session_storage)


@pytest.fixture
def logout_flag(session_storage):
    return LogoutFlag(session_storage)


@pytest.fixture
def navigator():
    return InProcessNavigator("/dashboard")


@pytest.fixture
def logout_handler():
    return MagicMock()


@pytest.fixture
def client(mock_session, token_store, navigator, logout_handler):
    return ApiClient(
        BASE_URL,
        token_store,
        redirect_handler=SubscriptionRedirectHandler(navigator, "/plans"),
        logout_handler=logout_handler,
        retry_config=RetryConfig(retries=2, retry_delay_ms=0),
        session=mock_session,
    )


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def hanging_response_factory():
    return make_hanging_response


@pytest.fixture
def refused():
    return connection_refused
