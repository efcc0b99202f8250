"""Tests for SessionRefresher and its logout-flag discipline."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from admin_api.refresh import SessionRefresher
from client_core.errors.exceptions import NetworkError, ResponseValidationError


@pytest.fixture
def stub_client():
    client = MagicMock()
    client.request = AsyncMock(return_value={"token": "tok-new", "expiresIn": 900})
    return client


@pytest.fixture
def refresher(stub_client, token_store, logout_flag):
    return SessionRefresher(stub_client, token_store, logout_flag, "/api/auth/refresh")


class TestSessionRefresher:
    @pytest.mark.asyncio
    async def test_refresh_stores_new_token(self, refresher, stub_client, token_store):
        token_store.write("tok-old")

        assert await refresher.refresh() == "tok-new"
        assert token_store.read() == "tok-new"

        config = stub_client.request.await_args.args[0]
        assert config.path == "/api/auth/refresh"
        assert config.method == "POST"
        assert config.suppress_auto_logout is True

    @pytest.mark.asyncio
    async def test_aborts_when_flag_set_before_call(
        self, refresher, stub_client, token_store, logout_flag
    ):
        logout_flag.set()

        assert await refresher.refresh() is None
        stub_client.request.assert_not_called()
        assert token_store.read() is None

    @pytest.mark.asyncio
    async def test_discards_token_when_logout_starts_mid_flight(
        self, refresher, stub_client, token_store, logout_flag
    ):
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_refresh(config):
            started.set()
            await release.wait()
            return {"token": "tok-late"}

        stub_client.request.side_effect = slow_refresh

        task = asyncio.create_task(refresher.refresh())
        await started.wait()
        # A concurrent 401 elsewhere logs the user out
        logout_flag.set()
        token_store.clear()
        release.set()

        assert await task is None
        assert token_store.read() is None

    @pytest.mark.asyncio
    async def test_errors_propagate(self, refresher, stub_client, token_store):
        token_store.write("tok-old")
        stub_client.request.side_effect = NetworkError("down")

        with pytest.raises(NetworkError):
            await refresher.refresh()

        assert token_store.read() == "tok-old"

    @pytest.mark.asyncio
    async def test_missing_token_in_response(self, refresher, stub_client):
        stub_client.request.return_value = {"expiresIn": 900}

        with pytest.raises(ResponseValidationError):
            await refresher.refresh()
