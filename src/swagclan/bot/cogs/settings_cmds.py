"""
Settings cog: view and change the typed per-guild settings.

Slash commands (group ``/settings``):
- view [setting]: all settings, or one setting with its recent history
- set <setting> <value>: change a setting (needs the setting's permissions)
- history <setting>: full change history of one setting

Setting names match case-insensitively by prefix, so ``/settings set log #general``
changes "Log Channel".
"""

from typing import Optional

import discord
from discord import Option
from discord.ext import commands

from swagclan.settings.guild_settings import GuildSetting, GuildSettings
from swagclan.settings.settings_service import SettingsService
from swagclan.ui.settings_embeds import build_history_embed, build_setting_embed, build_settings_overview_embed
from swagclan.util.logger import get_logger

logger = get_logger("settings_cmds")

NOT_SAVED_MESSAGE = "The stored data for this server could not be read, so the change was not saved."


class SettingsCog(commands.Cog):
    """Guild settings commands backed by the settings service."""

    settings = discord.SlashCommandGroup("settings", "View and modify server settings.")

    def __init__(self, discord_bot_instance, settings_service: SettingsService):
        self.discord_bot_instance = discord_bot_instance
        self.settings_service = settings_service
        logger.info("[SETTINGS CMDS] Settings cog loaded")

    async def _ensure_guild_context(self, ctx: discord.ApplicationContext) -> bool:
        if not ctx.guild_id:
            await ctx.respond("This command can only be used in a server.", ephemeral=True)
            return False
        return True

    async def _find_setting(
        self,
        ctx: discord.ApplicationContext,
        guild_settings: GuildSettings,
        query: str,
    ) -> Optional[GuildSetting]:
        setting = guild_settings.find(query)
        if setting is None:
            await ctx.respond(f"Could not find setting with name `{query}`.", ephemeral=True)
        return setting

    @settings.command(name="view", description="View the server settings.")
    async def view(
        self,
        ctx: discord.ApplicationContext,
        setting: Option(str, "The setting to view.", required=False, default=None),  # type: ignore
    ):
        if not await self._ensure_guild_context(ctx):
            return

        guild_settings = await self.settings_service.get_settings(ctx.guild_id)

        if not setting:
            await ctx.respond(embed=build_settings_overview_embed(guild_settings), ephemeral=True)
            return

        found = await self._find_setting(ctx, guild_settings, setting)
        if found is not None:
            await ctx.respond(embed=build_setting_embed(found), ephemeral=True)

    @settings.command(name="set", description="Change a server setting.")
    async def set_setting(
        self,
        ctx: discord.ApplicationContext,
        setting: Option(str, "The setting to change."),  # type: ignore
        value: Option(str, "The value to change the setting to."),  # type: ignore
    ):
        if not await self._ensure_guild_context(ctx):
            return

        guild_settings = await self.settings_service.get_settings(ctx.guild_id)
        found = await self._find_setting(ctx, guild_settings, setting)
        if found is None:
            return

        if not found.definition.can_modify(ctx.user):
            await ctx.respond(f"You do not have permission to change setting {found.name}.", ephemeral=True)
            return

        change = found.set(value)
        if change is None:
            await ctx.respond(f"Invalid value for setting {found.name}.", ephemeral=True)
            return

        if not await guild_settings.save():
            logger.warning("[SETTINGS CMDS] Settings of guild %s are not persisted; change discarded", guild_settings.guild_id)
            await ctx.respond(NOT_SAVED_MESSAGE, ephemeral=True)
            return

        logger.info(
            "[SETTINGS CMDS] %s changed %r in guild %s: %r -> %r",
            getattr(ctx.user, "id", "?"),
            found.name,
            guild_settings.guild_id,
            change.before.value,
            change.after.value,
        )
        await ctx.respond(embed=build_setting_embed(found, title="Updated"), ephemeral=True)

    @settings.command(name="history", description="Show the change history of a setting.")
    async def history(
        self,
        ctx: discord.ApplicationContext,
        setting: Option(str, "The setting to show history for."),  # type: ignore
    ):
        if not await self._ensure_guild_context(ctx):
            return

        guild_settings = await self.settings_service.get_settings(ctx.guild_id)
        found = await self._find_setting(ctx, guild_settings, setting)
        if found is not None:
            await ctx.respond(embed=build_history_embed(found), ephemeral=True)


def setup(discord_bot_instance, settings_service: SettingsService):
    discord_bot_instance.add_cog(SettingsCog(discord_bot_instance, settings_service))
