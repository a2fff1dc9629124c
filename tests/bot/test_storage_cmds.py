from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from swagclan.bot.cogs import storage_cmds
from swagclan.storage.storage_service import StorageService


@pytest.fixture()
def service(bot, tmp_path):
    return StorageService(bot, tmp_path, max_bytes=400)


@pytest.fixture()
def cog(service):
    return storage_cmds.StorageCog(SimpleNamespace(), service)


def make_ctx(guild_id, manage_guild=True):
    return SimpleNamespace(
        guild_id=guild_id,
        user=SimpleNamespace(id=7, guild_permissions=SimpleNamespace(manage_guild=manage_guild)),
        respond=AsyncMock(),
    )


def test_setup_adds_cog(service):
    captured = {}
    fake_bot = SimpleNamespace(add_cog=lambda cog: captured.setdefault("cog", cog))

    storage_cmds.setup(fake_bot, service)

    assert isinstance(captured["cog"], storage_cmds.StorageCog)


@pytest.mark.asyncio
async def test_view_shows_collections(cog, ids):
    ctx = make_ctx(ids.guild)

    await storage_cmds.StorageCog.view.callback(cog, ctx, None)

    embed = ctx.respond.await_args.kwargs["embed"]
    assert [field.name for field in embed.fields] == ["users", "guild"]


@pytest.mark.asyncio
async def test_set_and_get_item(cog, service, ids):
    ctx = make_ctx(ids.guild)
    await storage_cmds.StorageCog.set_item.callback(cog, ctx, "guild", "motd", "welcome")

    storage = await service.get_storage(ids.guild)
    assert storage.get("guild").get("motd").value == "welcome"
    assert service.file_path(storage.guild_id).exists()

    ctx = make_ctx(ids.guild, manage_guild=False)
    await storage_cmds.StorageCog.get_item.callback(cog, ctx, "guild", "motd")
    ctx.respond.assert_awaited_once_with("`guild/motd`: welcome", ephemeral=True)


@pytest.mark.asyncio
async def test_mutations_require_manage_guild(cog, service, ids):
    ctx = make_ctx(ids.guild, manage_guild=False)

    await storage_cmds.StorageCog.create_collection.callback(cog, ctx, "scores")

    ctx.respond.assert_awaited_once_with("You need Manage Server permission.", ephemeral=True)
    assert (await service.get_storage(ids.guild)).get("scores") is None


@pytest.mark.asyncio
async def test_create_existing_collection(cog, ids):
    ctx = make_ctx(ids.guild)

    await storage_cmds.StorageCog.create_collection.callback(cog, ctx, "users")

    ctx.respond.assert_awaited_once_with("Collection `users` already exists.", ephemeral=True)


@pytest.mark.asyncio
async def test_set_item_reports_full_storage(cog, service, ids):
    ctx = make_ctx(ids.guild)

    await storage_cmds.StorageCog.set_item.callback(cog, ctx, "guild", "motd", "x" * 1000)

    message = ctx.respond.await_args.args[0]
    assert "Max length of storage reached" in message
    assert (await service.get_storage(ids.guild)).get("guild").get("motd") is None


@pytest.mark.asyncio
async def test_remove_and_delete(cog, service, ids):
    storage = await service.get_storage(ids.guild)
    storage.get("users").set("alice", "hi")

    ctx = make_ctx(ids.guild)
    await storage_cmds.StorageCog.remove_item.callback(cog, ctx, "users", "alice")
    ctx.respond.assert_awaited_once_with("Removed `users/alice`.", ephemeral=True)

    ctx = make_ctx(ids.guild)
    await storage_cmds.StorageCog.delete_collection.callback(cog, ctx, "users")
    ctx.respond.assert_awaited_once_with("Deleted collection `users`.", ephemeral=True)
    assert storage.get("users") is None


@pytest.mark.asyncio
async def test_unknown_collection(cog, ids):
    ctx = make_ctx(ids.guild)

    await storage_cmds.StorageCog.clear_collection.callback(cog, ctx, "nope")

    ctx.respond.assert_awaited_once_with("Could not find collection `nope`.", ephemeral=True)


@pytest.mark.asyncio
async def test_change_on_unreadable_file_reports_not_saved(cog, service, tmp_path, ids):
    path = tmp_path / f"{ids.guild}.json"
    path.write_text('{"collections": []}', encoding="utf-8")
    ctx = make_ctx(ids.guild)

    await storage_cmds.StorageCog.set_item.callback(cog, ctx, "guild", "motd", "welcome")

    ctx.respond.assert_awaited_once_with(storage_cmds.NOT_SAVED_MESSAGE, ephemeral=True)
    assert path.read_text(encoding="utf-8") == '{"collections": []}'
    assert (await service.get_storage(ids.guild)).get("guild").get("motd") is None
