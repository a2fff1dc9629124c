"""
Free-form key/value storage for one guild, grouped into named collections.

File shape (``size`` fields are informational and recomputed on load)::

    {
      "collections": {
        "<collection>": {
          "items": {"<item>": {"value": "...", "created": <ms>, "modified": <ms>, "size": <bytes>}},
          "size": <bytes>
        }
      },
      "size": <bytes>
    }
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional

from swagclan.configuration.app_configuration import DEFAULT_MAX_NAME_LENGTH, DEFAULT_STORAGE_MAX_BYTES
from swagclan.datatypes.discord_datatypes import GuildID
from swagclan.util.json_files import obj_size, write_json_atomic_async
from swagclan.util.logger import get_logger

if TYPE_CHECKING:
    from swagclan.storage.storage_service import StorageService

logger = get_logger("guild_storage")


DEFAULT_COLLECTIONS = ("users", "guild")

STORAGE_FILE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["collections"],
    "properties": {
        "collections": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["items"],
                "properties": {
                    "items": {
                        "type": "object",
                        "additionalProperties": {
                            "type": "object",
                            "required": ["value", "created"],
                            "properties": {
                                "value": {"type": "string"},
                                "created": {"type": "number"},
                                "modified": {"type": ["number", "null"]},
                            },
                        },
                    },
                },
            },
        },
    },
}


class StorageFullError(ValueError):
    """Raised when a write would push a guild's storage past its byte limit."""

    def __init__(self, guild_id: GuildID, projected: int, limit: int) -> None:
        super().__init__(f"Max length of storage reached for guild {guild_id} ({projected} > {limit} bytes)")
        self.guild_id = guild_id
        self.projected = projected
        self.limit = limit


class InvalidNameError(ValueError):
    """Raised for empty or over-long collection and item names."""


def now_ms() -> int:
    return int(time.time() * 1000)


class CollectionItem:
    """A single string value in a collection, with creation and modification times."""

    def __init__(self, collection: "StorageCollection", name: str, value: str, created: int, modified: Optional[int] = None) -> None:
        self.collection = collection
        self.name = name
        self.value = value
        self.created = created
        self.modified = modified or created

    def __repr__(self) -> str:
        return f"CollectionItem({self.name!r}, {self.value!r})"

    def core(self) -> Dict[str, Any]:
        return {"value": self.value, "created": self.created, "modified": self.modified}

    @property
    def size(self) -> int:
        return obj_size(self.core())

    def to_dict(self) -> Dict[str, Any]:
        return {**self.core(), "size": self.size}

    def set(self, value: str) -> "CollectionItem":
        return self.collection.set(self.name, value)

    def delete(self) -> bool:
        return self.collection.delete_item(self.name)


class StorageCollection:
    """Named bucket of items inside a guild's storage."""

    def __init__(self, storage: "GuildStorage", name: str, items: Optional[Dict[str, Dict[str, Any]]] = None) -> None:
        self.storage = storage
        self.name = name
        self.items: Dict[str, CollectionItem] = {
            key: CollectionItem(self, key, raw["value"], raw["created"], raw.get("modified"))
            for key, raw in (items or {}).items()
        }

    def __repr__(self) -> str:
        return f"StorageCollection({self.name!r}, {len(self.items)} items)"

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, key: object) -> bool:
        return key in self.items

    def __iter__(self) -> Iterator[CollectionItem]:
        return iter(self.items.values())

    def core(self) -> Dict[str, Any]:
        return {"items": {key: item.core() for key, item in self.items.items()}}

    @property
    def size(self) -> int:
        return obj_size(self.core())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": {key: item.to_dict() for key, item in self.items.items()},
            "size": self.size,
        }

    def get(self, key: str) -> Optional[CollectionItem]:
        return self.items.get(key)

    def set(self, key: str, value: str) -> CollectionItem:
        """
        Create or update an item.

        Raises:
            InvalidNameError: ``key`` is empty or too long.
            TypeError: ``value`` is not a string.
            StorageFullError: the guild's storage would exceed its byte limit.
            LookupError: this collection was deleted from the guild's storage.
        """
        if self.storage.collections.get(self.name) is not self:
            raise LookupError(f"Collection {self.name!r} no longer exists in the storage of guild {self.storage.guild_id}")
        self.storage.check_name(key)
        if not isinstance(value, str):
            raise TypeError(f"Storage values must be strings, not {type(value).__name__}")

        old = self.items.get(key)
        timestamp = now_ms()
        new = CollectionItem(self, key, value, old.created if old else timestamp, timestamp)

        core = self.storage.core()
        core["collections"][self.name]["items"][key] = new.core()
        self.storage.check_capacity(obj_size(core))

        self.items[key] = new
        if old is None:
            self.storage.emit("on_item_create", self.name, key, new)
        else:
            self.storage.emit("on_item_update", self.name, key, old, new)
        return new

    def delete_item(self, key: str) -> bool:
        if self.items.pop(key, None) is None:
            return False
        self.storage.emit("on_item_delete", self.name, key)
        return True

    def clear(self) -> None:
        self.items.clear()
        self.storage.emit("on_collection_clear", self.name)

    def delete(self) -> bool:
        return self.storage.delete_collection(self.name)


class GuildStorage:
    """All storage collections of one guild, limited to ``max_bytes`` in total."""

    def __init__(self, service: Optional["StorageService"], guild_id: GuildID, raw: Optional[Dict[str, Any]] = None) -> None:
        raw = raw or {}
        self.service = service
        self.guild_id = GuildID(guild_id)
        self.max_bytes: int = service.max_bytes if service else DEFAULT_STORAGE_MAX_BYTES
        self.max_name_length: int = service.max_name_length if service else DEFAULT_MAX_NAME_LENGTH

        self.collections: Dict[str, StorageCollection] = {
            name: StorageCollection(self, name, collection.get("items"))
            for name, collection in (raw.get("collections") or {}).items()
        }

        # Set when the backing file could not be read, so it is never clobbered
        self.suppress_persistence = False

    def __repr__(self) -> str:
        return f"GuildStorage({self.guild_id!r}, {len(self.collections)} collections)"

    def emit(self, hook: str, *args: Any) -> None:
        if self.service is not None:
            self.service.notify(hook, self.guild_id, *args)

    def core(self) -> Dict[str, Any]:
        return {"collections": {name: collection.core() for name, collection in self.collections.items()}}

    @property
    def size(self) -> int:
        return obj_size(self.core())

    @property
    def free(self) -> int:
        return max(self.max_bytes - self.size, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collections": {name: collection.to_dict() for name, collection in self.collections.items()},
            "size": self.size,
        }

    def check_name(self, name: str) -> None:
        if not isinstance(name, str) or not name.strip():
            raise InvalidNameError("Names must be non-empty strings.")
        if len(name) > self.max_name_length:
            raise InvalidNameError(f"Name {name[:self.max_name_length]!r}... is longer than {self.max_name_length} characters.")

    def check_capacity(self, projected: int) -> None:
        if projected > self.max_bytes:
            raise StorageFullError(self.guild_id, projected, self.max_bytes)

    def get(self, name: str) -> Optional[StorageCollection]:
        return self.collections.get(name)

    def create_collection(self, name: str) -> Optional[StorageCollection]:
        """Create an empty collection; returns None if one with that name exists."""
        self.check_name(name)
        if name in self.collections:
            return None

        core = self.core()
        core["collections"][name] = {"items": {}}
        self.check_capacity(obj_size(core))

        collection = StorageCollection(self, name)
        self.collections[name] = collection
        self.emit("on_collection_create", name, collection)
        return collection

    def delete_collection(self, name: str) -> bool:
        if self.collections.pop(name, None) is None:
            return False
        self.emit("on_collection_delete", name)
        return True

    def clear(self) -> None:
        self.collections.clear()
        self.emit("on_storage_clear")

    async def save(self) -> bool:
        """Write the whole storage to its file. Returns False when persistence is suppressed."""
        if self.suppress_persistence or self.service is None:
            logger.debug("[GUILD STORAGE] Not saving guild %s: persistence suppressed", self.guild_id)
            return False

        await write_json_atomic_async(self.service.file_path(self.guild_id), self.to_dict())
        return True
