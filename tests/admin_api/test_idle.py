"""Tests for the inactivity timeout."""

import asyncio
from unittest.mock import MagicMock

import pytest

from admin_api.idle import IdleTimeout


class TestIdleTimeout:
    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError):
            IdleTimeout(MagicMock(), 0)

    def test_timeout_seconds(self):
        assert IdleTimeout(MagicMock(), 30).timeout_seconds == 1800

    @pytest.mark.asyncio
    async def test_fires_after_quiet_period(self):
        on_timeout = MagicMock()
        idle = IdleTimeout(on_timeout, timeout_minutes=0.05 / 60)

        idle.start()
        assert idle.active is True
        await asyncio.sleep(0.1)

        on_timeout.assert_called_once_with()
        assert idle.active is False

    @pytest.mark.asyncio
    async def test_touch_resets_timer(self):
        on_timeout = MagicMock()
        idle = IdleTimeout(on_timeout, timeout_minutes=0.1 / 60)
        idle.start()

        for _ in range(4):
            await asyncio.sleep(0.05)
            idle.touch()
        on_timeout.assert_not_called()

        await asyncio.sleep(0.2)
        on_timeout.assert_called_once()

    @pytest.mark.asyncio
    async def test_stop_cancels(self):
        on_timeout = MagicMock()
        idle = IdleTimeout(on_timeout, timeout_minutes=0.05 / 60)
        idle.start()
        idle.stop()

        await asyncio.sleep(0.1)
        on_timeout.assert_not_called()
        assert idle.active is False

    @pytest.mark.asyncio
    async def test_touch_before_start_is_ignored(self):
        on_timeout = MagicMock()
        idle = IdleTimeout(on_timeout, timeout_minutes=0.05 / 60)
        idle.touch()
        assert idle.active is False

    @pytest.mark.asyncio
    async def test_callback_error_is_logged_not_raised(self):
        on_timeout = MagicMock(side_effect=RuntimeError("boom"))
        idle = IdleTimeout(on_timeout, timeout_minutes=0.01 / 60)
        idle.start()

        await asyncio.sleep(0.05)
        on_timeout.assert_called_once()
        assert idle.active is False
