"""
Observer interfaces for the guild settings and guild storage services.

Services call every registered observer explicitly instead of broadcasting
string-named events. Subclass the observer you need and override only the
hooks you care about; the defaults do nothing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from swagclan.datatypes.discord_datatypes import GuildID
from swagclan.util.logger import get_logger

if TYPE_CHECKING:
    from swagclan.storage.guild_storage import CollectionItem, StorageCollection

logger = get_logger("service_observers")


class GuildRecordObserver:
    """Notified when a per-guild record is loaded from disk or fails to load."""

    def on_load(self, record: Any) -> None:
        pass

    def on_error(self, guild_id: GuildID, error: BaseException) -> None:
        pass


class StorageObserver(GuildRecordObserver):
    """Additionally notified of every mutation made to a guild's storage."""

    def on_collection_create(self, guild_id: GuildID, name: str, collection: "StorageCollection") -> None:
        pass

    def on_collection_delete(self, guild_id: GuildID, name: str) -> None:
        pass

    def on_collection_clear(self, guild_id: GuildID, name: str) -> None:
        pass

    def on_storage_clear(self, guild_id: GuildID) -> None:
        pass

    def on_item_create(self, guild_id: GuildID, collection: str, key: str, item: "CollectionItem") -> None:
        pass

    def on_item_update(
        self,
        guild_id: GuildID,
        collection: str,
        key: str,
        old: "CollectionItem",
        new: "CollectionItem",
    ) -> None:
        pass

    def on_item_delete(self, guild_id: GuildID, collection: str, key: str) -> None:
        pass


class LoggingObserver(StorageObserver):
    """Default observer: writes every notification to the log."""

    def __init__(self, tag: str) -> None:
        self.tag = tag

    def on_load(self, record: Any) -> None:
        logger.info("[%s] Loaded guild %s", self.tag, record.guild_id)

    def on_error(self, guild_id: GuildID, error: BaseException) -> None:
        logger.error(
            "[%s] Could not load guild %s, using unsaved defaults: %s",
            self.tag,
            guild_id,
            error,
            exc_info=error,
        )

    def on_collection_create(self, guild_id, name, collection) -> None:
        logger.debug("[%s] Guild %s created collection %r", self.tag, guild_id, name)

    def on_collection_delete(self, guild_id, name) -> None:
        logger.debug("[%s] Guild %s deleted collection %r", self.tag, guild_id, name)

    def on_collection_clear(self, guild_id, name) -> None:
        logger.debug("[%s] Guild %s cleared collection %r", self.tag, guild_id, name)

    def on_storage_clear(self, guild_id) -> None:
        logger.debug("[%s] Guild %s cleared its storage", self.tag, guild_id)

    def on_item_create(self, guild_id, collection, key, item) -> None:
        logger.debug("[%s] Guild %s created %s/%s (%d bytes)", self.tag, guild_id, collection, key, item.size)

    def on_item_update(self, guild_id, collection, key, old, new) -> None:
        logger.debug(
            "[%s] Guild %s updated %s/%s (%d -> %d bytes)",
            self.tag, guild_id, collection, key, old.size, new.size,
        )

    def on_item_delete(self, guild_id, collection, key) -> None:
        logger.debug("[%s] Guild %s deleted %s/%s", self.tag, guild_id, collection, key)
