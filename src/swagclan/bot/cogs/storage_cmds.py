"""
Storage cog: manage the free-form key/value storage of a guild.

Slash commands (group ``/storage``):
- view [collection]: space used and collections, or one collection's items
- get <collection> <item>
- create / delete / clear <collection>
- set <collection> <item> <value>, remove <collection> <item>

Reading is open to everyone; changes need the Manage Server permission.
"""

from typing import Optional

import discord
from discord import Option
from discord.ext import commands

from swagclan.storage.guild_storage import GuildStorage, InvalidNameError, StorageCollection, StorageFullError
from swagclan.storage.storage_service import StorageService
from swagclan.ui.settings_embeds import build_collection_embed, build_storage_embed
from swagclan.util.logger import get_logger

logger = get_logger("storage_cmds")

NOT_SAVED_MESSAGE = "The stored data for this server could not be read, so the change was not saved."


class StorageCog(commands.Cog):
    """Guild storage commands backed by the storage service."""

    storage = discord.SlashCommandGroup("storage", "View and modify server storage.")

    def __init__(self, discord_bot_instance, storage_service: StorageService):
        self.discord_bot_instance = discord_bot_instance
        self.storage_service = storage_service
        logger.info("[STORAGE CMDS] Storage cog loaded")

    async def _ensure_guild_context(self, ctx: discord.ApplicationContext) -> bool:
        if not ctx.guild_id:
            await ctx.respond("This command can only be used in a server.", ephemeral=True)
            return False
        return True

    def _has_manage_permission(self, ctx: discord.ApplicationContext) -> bool:
        permissions = getattr(ctx.user, "guild_permissions", None)
        return bool(getattr(permissions, "manage_guild", False))

    async def _check_permissions(self, ctx: discord.ApplicationContext) -> bool:
        if not await self._ensure_guild_context(ctx):
            return False
        if not self._has_manage_permission(ctx):
            await ctx.respond("You need Manage Server permission.", ephemeral=True)
            return False
        return True

    async def _get_collection(
        self,
        ctx: discord.ApplicationContext,
        storage: GuildStorage,
        name: str,
    ) -> Optional[StorageCollection]:
        collection = storage.get(name)
        if collection is None:
            await ctx.respond(f"Could not find collection `{name}`.", ephemeral=True)
        return collection

    async def _save(self, ctx: discord.ApplicationContext, storage: GuildStorage) -> bool:
        """Persist ``storage``; tell the user when its file is unreadable and nothing was written."""
        if await storage.save():
            return True
        logger.warning("[STORAGE CMDS] Storage of guild %s is not persisted; change discarded", storage.guild_id)
        await ctx.respond(NOT_SAVED_MESSAGE, ephemeral=True)
        return False

    @storage.command(name="view", description="Show server storage or one collection.")
    async def view(
        self,
        ctx: discord.ApplicationContext,
        collection: Option(str, "The collection to show.", required=False, default=None),  # type: ignore
    ):
        if not await self._ensure_guild_context(ctx):
            return

        storage = await self.storage_service.get_storage(ctx.guild_id)
        if not collection:
            await ctx.respond(embed=build_storage_embed(storage), ephemeral=True)
            return

        found = await self._get_collection(ctx, storage, collection)
        if found is not None:
            await ctx.respond(embed=build_collection_embed(found), ephemeral=True)

    @storage.command(name="get", description="Get an item from a collection.")
    async def get_item(
        self,
        ctx: discord.ApplicationContext,
        collection: Option(str, "The collection to read from."),  # type: ignore
        item: Option(str, "The item to get."),  # type: ignore
    ):
        if not await self._ensure_guild_context(ctx):
            return

        storage = await self.storage_service.get_storage(ctx.guild_id)
        found = await self._get_collection(ctx, storage, collection)
        if found is None:
            return

        stored = found.get(item)
        if stored is None:
            await ctx.respond(f"Could not find item `{item}` in `{collection}`.", ephemeral=True)
            return
        await ctx.respond(f"`{collection}/{item}`: {stored.value}", ephemeral=True)

    @storage.command(name="create", description="Create a storage collection.")
    async def create_collection(
        self,
        ctx: discord.ApplicationContext,
        collection: Option(str, "Name of the new collection."),  # type: ignore
    ):
        if not await self._check_permissions(ctx):
            return

        storage = await self.storage_service.get_storage(ctx.guild_id)
        try:
            created = storage.create_collection(collection)
        except (InvalidNameError, StorageFullError) as exc:
            await ctx.respond(str(exc), ephemeral=True)
            return

        if created is None:
            await ctx.respond(f"Collection `{collection}` already exists.", ephemeral=True)
            return

        if not await self._save(ctx, storage):
            return
        await ctx.respond(f"Created collection `{collection}`.", ephemeral=True)

    @storage.command(name="delete", description="Delete a storage collection.")
    async def delete_collection(
        self,
        ctx: discord.ApplicationContext,
        collection: Option(str, "The collection to delete."),  # type: ignore
    ):
        if not await self._check_permissions(ctx):
            return

        storage = await self.storage_service.get_storage(ctx.guild_id)
        if not storage.delete_collection(collection):
            await ctx.respond(f"Could not find collection `{collection}`.", ephemeral=True)
            return

        if not await self._save(ctx, storage):
            return
        await ctx.respond(f"Deleted collection `{collection}`.", ephemeral=True)

    @storage.command(name="clear", description="Remove every item from a collection.")
    async def clear_collection(
        self,
        ctx: discord.ApplicationContext,
        collection: Option(str, "The collection to clear."),  # type: ignore
    ):
        if not await self._check_permissions(ctx):
            return

        storage = await self.storage_service.get_storage(ctx.guild_id)
        found = await self._get_collection(ctx, storage, collection)
        if found is None:
            return

        found.clear()
        if not await self._save(ctx, storage):
            return
        await ctx.respond(f"Cleared collection `{collection}`.", ephemeral=True)

    @storage.command(name="set", description="Set an item in a collection.")
    async def set_item(
        self,
        ctx: discord.ApplicationContext,
        collection: Option(str, "The collection to write to."),  # type: ignore
        item: Option(str, "The item to set."),  # type: ignore
        value: Option(str, "The value to store."),  # type: ignore
    ):
        if not await self._check_permissions(ctx):
            return

        storage = await self.storage_service.get_storage(ctx.guild_id)
        found = await self._get_collection(ctx, storage, collection)
        if found is None:
            return

        try:
            stored = found.set(item, value)
        except (InvalidNameError, StorageFullError) as exc:
            await ctx.respond(str(exc), ephemeral=True)
            return

        if not await self._save(ctx, storage):
            return
        await ctx.respond(f"Set `{collection}/{item}` ({stored.size} bytes).", ephemeral=True)

    @storage.command(name="remove", description="Remove an item from a collection.")
    async def remove_item(
        self,
        ctx: discord.ApplicationContext,
        collection: Option(str, "The collection to remove from."),  # type: ignore
        item: Option(str, "The item to remove."),  # type: ignore
    ):
        if not await self._check_permissions(ctx):
            return

        storage = await self.storage_service.get_storage(ctx.guild_id)
        found = await self._get_collection(ctx, storage, collection)
        if found is None:
            return

        if not found.delete_item(item):
            await ctx.respond(f"Could not find item `{item}` in `{collection}`.", ephemeral=True)
            return

        if not await self._save(ctx, storage):
            return
        await ctx.respond(f"Removed `{collection}/{item}`.", ephemeral=True)


def setup(discord_bot_instance, storage_service: StorageService):
    discord_bot_instance.add_cog(StorageCog(discord_bot_instance, storage_service))
