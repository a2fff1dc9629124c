from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from swagclan.bot.cogs import events_listener


@pytest.mark.asyncio
async def test_on_ready_preloads_once(monkeypatch):
    monkeypatch.setattr(events_listener.app_config, "_data", {"preload_on_ready": True})
    settings_service = SimpleNamespace(load_from_directory=AsyncMock(return_value={}))
    storage_service = SimpleNamespace(load_from_directory=AsyncMock(return_value={}))
    bot = SimpleNamespace(user=SimpleNamespace(id=1))
    cog = events_listener.EventsListenerCog(bot, settings_service, storage_service)

    await events_listener.EventsListenerCog.on_ready(cog)
    await events_listener.EventsListenerCog.on_ready(cog)

    settings_service.load_from_directory.assert_awaited_once()
    storage_service.load_from_directory.assert_awaited_once()


@pytest.mark.asyncio
async def test_on_ready_respects_config(monkeypatch):
    monkeypatch.setattr(events_listener.app_config, "_data", {"preload_on_ready": False})
    settings_service = SimpleNamespace(load_from_directory=AsyncMock(return_value={}))
    storage_service = SimpleNamespace(load_from_directory=AsyncMock(return_value={}))
    cog = events_listener.EventsListenerCog(SimpleNamespace(user=None), settings_service, storage_service)

    await events_listener.EventsListenerCog.on_ready(cog)

    settings_service.load_from_directory.assert_not_awaited()
