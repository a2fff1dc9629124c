"""Event listener cog: preloads guild data on startup and logs guild membership changes."""

import discord
from discord.ext import commands

from swagclan.configuration.app_configuration import app_config
from swagclan.settings.settings_service import SettingsService
from swagclan.storage.storage_service import StorageService
from swagclan.util.logger import get_logger

logger = get_logger("events_listener_cog")


class EventsListenerCog(commands.Cog):
    """Bot lifecycle events."""

    def __init__(self, discord_bot_instance, settings_service: SettingsService, storage_service: StorageService):
        self.bot = discord_bot_instance
        self.settings_service = settings_service
        self.storage_service = storage_service
        self._preloaded = False
        logger.info("[EVENTS LISTENER] Events listener cog loaded")

    @commands.Cog.listener(name="on_ready")
    async def on_ready(self):
        """Log the connection and, once per process, load every stored guild."""
        if self.bot.user:
            logger.info("[EVENTS LISTENER] Bot connected as %s (ID: %s)", self.bot.user, self.bot.user.id)
        else:
            logger.warning("[EVENTS LISTENER] Bot partially connected, but user information not yet available.")

        # on_ready fires again after every reconnect
        if self._preloaded or not app_config.preload_on_ready:
            return
        self._preloaded = True

        settings = await self.settings_service.load_from_directory()
        storage = await self.storage_service.load_from_directory()
        logger.info("[EVENTS LISTENER] Preloaded settings for %d and storage for %d guild(s)", len(settings), len(storage))

    @commands.Cog.listener(name="on_guild_join")
    async def on_guild_join(self, guild: discord.Guild):
        logger.info("[EVENTS LISTENER] Joined guild %s (ID: %s)", guild.name, guild.id)

    @commands.Cog.listener(name="on_guild_remove")
    async def on_guild_remove(self, guild: discord.Guild):
        logger.info("[EVENTS LISTENER] Removed from guild %s (ID: %s)", guild.name, guild.id)


def setup(discord_bot_instance, settings_service: SettingsService, storage_service: StorageService):
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance, settings_service, storage_service))
