from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord
import pytest

from swagclan.bot.cogs import settings_cmds
from swagclan.settings.settings_service import SettingsService


@pytest.fixture()
def service(bot, tmp_path):
    return SettingsService(bot, path=tmp_path)


@pytest.fixture()
def cog(service):
    return settings_cmds.SettingsCog(SimpleNamespace(), service)


def make_ctx(guild_id, permissions=None):
    return SimpleNamespace(
        guild_id=guild_id,
        user=SimpleNamespace(id=7, guild_permissions=permissions or discord.Permissions(manage_guild=True)),
        respond=AsyncMock(),
    )


def test_setup_adds_cog(service):
    captured = {}
    fake_bot = SimpleNamespace(add_cog=lambda cog: captured.setdefault("cog", cog))

    settings_cmds.setup(fake_bot, service)

    assert isinstance(captured["cog"], settings_cmds.SettingsCog)
    assert captured["cog"].settings_service is service


@pytest.mark.asyncio
async def test_commands_require_guild_context(cog):
    ctx = make_ctx(None)

    await settings_cmds.SettingsCog.view.callback(cog, ctx, None)

    ctx.respond.assert_awaited_once_with("This command can only be used in a server.", ephemeral=True)


@pytest.mark.asyncio
async def test_view_all_settings_sends_overview(cog, ids):
    ctx = make_ctx(ids.guild)

    await settings_cmds.SettingsCog.view.callback(cog, ctx, None)

    embed = ctx.respond.await_args.kwargs["embed"]
    assert embed.title == "Server Settings"
    assert len(embed.fields) == 2


@pytest.mark.asyncio
async def test_view_unknown_setting(cog, ids):
    ctx = make_ctx(ids.guild)

    await settings_cmds.SettingsCog.view.callback(cog, ctx, "colour")

    ctx.respond.assert_awaited_once_with("Could not find setting with name `colour`.", ephemeral=True)


@pytest.mark.asyncio
async def test_set_changes_and_saves(cog, service, ids, tmp_path):
    ctx = make_ctx(ids.guild)

    await settings_cmds.SettingsCog.set_setting.callback(cog, ctx, "pre", "!")

    settings = await service.get_settings(ids.guild)
    assert settings["Prefix"].value == "!"
    assert '"Prefix":"!"' in (tmp_path / f"{ids.guild}.json").read_text(encoding="utf-8")
    assert ctx.respond.await_args.kwargs["embed"].title.startswith("Updated")


@pytest.mark.asyncio
async def test_set_rejects_invalid_value(cog, service, ids):
    ctx = make_ctx(ids.guild)

    await settings_cmds.SettingsCog.set_setting.callback(cog, ctx, "Prefix", "a b")

    ctx.respond.assert_awaited_once_with("Invalid value for setting Prefix.", ephemeral=True)
    assert (await service.get_settings(ids.guild))["Prefix"].value == "."


@pytest.mark.asyncio
async def test_set_requires_permission(cog, service, ids):
    ctx = make_ctx(ids.guild, discord.Permissions(send_messages=True))

    await settings_cmds.SettingsCog.set_setting.callback(cog, ctx, "Prefix", "!")

    ctx.respond.assert_awaited_once_with("You do not have permission to change setting Prefix.", ephemeral=True)
    assert (await service.get_settings(ids.guild))["Prefix"].value == "."


@pytest.mark.asyncio
async def test_history_lists_changes(cog, service, ids):
    settings = await service.get_settings(ids.guild)
    settings["Prefix"].set("!")
    ctx = make_ctx(ids.guild)

    await settings_cmds.SettingsCog.history.callback(cog, ctx, "Prefix")

    embed = ctx.respond.await_args.kwargs["embed"]
    assert "`.` -> `!`" in embed.description
    assert embed.footer.text == "1 change(s)"



@pytest.mark.asyncio
async def test_set_on_unreadable_file_reports_change_not_saved(cog, service, tmp_path, ids):
    path = tmp_path / f"{ids.guild}.json"
    path.write_text("{not json", encoding="utf-8")
    ctx = make_ctx(ids.guild)

    await settings_cmds.SettingsCog.set_setting.callback(cog, ctx, "Prefix", "!")

    ctx.respond.assert_awaited_once_with(settings_cmds.NOT_SAVED_MESSAGE, ephemeral=True)
    assert path.read_text(encoding="utf-8") == "{not json"
    assert (await service.get_settings(ids.guild))["Prefix"].value == "."
