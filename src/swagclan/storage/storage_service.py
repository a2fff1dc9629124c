"""Registry of per-guild storage backed by one JSON file per guild."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from swagclan.configuration.app_configuration import DEFAULT_MAX_NAME_LENGTH, DEFAULT_STORAGE_MAX_BYTES
from swagclan.datatypes.discord_datatypes import GuildID
from swagclan.services.guild_record_service import GuildRecordService, GuildRef
from swagclan.services.observers import GuildRecordObserver
from swagclan.storage.guild_storage import DEFAULT_COLLECTIONS, STORAGE_FILE_SCHEMA, GuildStorage
from swagclan.util.logger import get_logger

logger = get_logger("storage_service")


class StorageService(GuildRecordService[GuildStorage]):
    """
    Service for interacting with guild storage.

    Mirrors :class:`~swagclan.settings.settings_service.SettingsService`
    without a change history. New guilds start with the empty ``users`` and
    ``guild`` collections. Observers that subclass
    :class:`~swagclan.services.observers.StorageObserver` also receive item
    and collection events.
    """

    log_tag = "STORAGE SERVICE"
    file_schema = STORAGE_FILE_SCHEMA

    def __init__(
        self,
        bot: Any,
        path: Union[str, Path] = "data/storage",
        observers: Optional[Iterable[GuildRecordObserver]] = None,
        max_bytes: int = DEFAULT_STORAGE_MAX_BYTES,
        max_name_length: int = DEFAULT_MAX_NAME_LENGTH,
    ) -> None:
        super().__init__(bot, path, observers)
        self.max_bytes = max_bytes
        self.max_name_length = max_name_length
        logger.info("[STORAGE SERVICE] Initialized at %s (limit %d bytes per guild)", self.path, self.max_bytes)

    def build_record(self, guild_id: GuildID, raw: Dict[str, Any]) -> GuildStorage:
        return GuildStorage(self, guild_id, raw)

    def create_record(self, guild_id: GuildID) -> GuildStorage:
        return self.create_storage(guild_id)

    def create_storage(self, guild_ref: GuildRef) -> GuildStorage:
        """Build an uncached storage holding the default empty collections."""
        guild_id = GuildID.resolve(guild_ref)
        return GuildStorage(self, guild_id, {"collections": {name: {"items": {}} for name in DEFAULT_COLLECTIONS}})

    async def get_storage(self, guild_ref: GuildRef) -> GuildStorage:
        """Get a guild's storage, loading it from disk or creating defaults on first use."""
        return await self.get(guild_ref)

    async def load_storage(self, guild_id: Union[GuildID, int, str]) -> GuildStorage:
        """
        Load storage for a guild from its file.

        Raises FileNotFoundError if the guild has no file. An unreadable file
        yields uncached defaults that will not be saved.
        """
        return await self.load(guild_id)
