"""
Lazy load-or-create registry shared by the settings and storage services.

State per guild ID: unloaded -> loading -> loaded | defaulted.

- A missing file means first use: a default record is created, written once
  and cached.
- An unreadable file (bad JSON, wrong shape, I/O error) yields a default
  record flagged ``suppress_persistence`` so the damaged file is never
  overwritten. That record is NOT cached; every later lookup retries the read.
- Concurrent lookups of the same unloaded guild share one in-flight load task.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar, Union

import discord
import jsonschema

from swagclan.datatypes.discord_datatypes import GuildID
from swagclan.services.observers import GuildRecordObserver
from swagclan.util.json_files import read_json_async
from swagclan.util.logger import get_logger

logger = get_logger("guild_record_service")

RecordT = TypeVar("RecordT")
GuildRef = Union[discord.Guild, GuildID, int, str]


class GuildRecordService(Generic[RecordT]):
    """
    Base class for services that keep one JSON-backed record per guild.

    Subclasses set ``log_tag`` and ``file_schema`` and implement
    :meth:`build_record` and :meth:`create_record`. Records must expose
    ``guild_id``, ``suppress_persistence`` and an async ``save()``.

    Args:
        bot: Anything with ``get_guild(int)``; normally the ``discord.Bot``.
        path: Directory holding ``<guild id>.json`` files.
        observers: Initial observers for load/error notifications.
    """

    log_tag = "GUILD RECORD SERVICE"
    file_schema: Dict[str, Any] = {"type": "object"}

    def __init__(self, bot: Any, path: Union[str, Path], observers: Optional[Iterable[GuildRecordObserver]] = None) -> None:
        self.bot = bot
        self.path = Path(path)
        self.guilds: Dict[GuildID, RecordT] = {}
        self._observers: List[GuildRecordObserver] = list(observers or [])
        self._inflight: Dict[GuildID, asyncio.Task] = {}

    # --------------------------
    # Hooks for subclasses
    # --------------------------
    def build_record(self, guild_id: GuildID, raw: Dict[str, Any]) -> RecordT:
        raise NotImplementedError

    def create_record(self, guild_id: GuildID) -> RecordT:
        raise NotImplementedError

    # --------------------------
    # Observers
    # --------------------------
    def add_observer(self, observer: GuildRecordObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def remove_observer(self, observer: GuildRecordObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def notify(self, hook: str, *args: Any) -> None:
        """Call ``hook`` on every observer that defines it; observer failures are logged."""
        for observer in list(self._observers):
            callback = getattr(observer, hook, None)
            if callback is None:
                continue
            try:
                callback(*args)
            except Exception:
                logger.exception("[%s] Observer %r failed in %s", self.log_tag, observer, hook)

    # --------------------------
    # Helpers
    # --------------------------
    def file_path(self, guild_id: GuildID) -> Path:
        return self.path / f"{guild_id}.json"

    def resolve_guild(self, guild_id: GuildID) -> Optional[discord.Guild]:
        """Return the live guild object for ``guild_id`` or None if the bot cannot see it."""
        if self.bot is None:
            return None
        return self.bot.get_guild(guild_id.to_int())

    # --------------------------
    # Public API
    # --------------------------
    async def get(self, guild_ref: GuildRef) -> RecordT:
        """Return the cached record for a guild, loading or creating it on first access."""
        guild_id = GuildID.resolve(guild_ref)

        cached = self.guilds.get(guild_id)
        if cached is not None:
            return cached

        task = self._inflight.get(guild_id)
        if task is None:
            task = asyncio.create_task(self._load_or_create(guild_id))
            self._inflight[guild_id] = task

            def _cleanup(completed: asyncio.Task, guild_id: GuildID = guild_id) -> None:
                if self._inflight.get(guild_id) is completed:
                    del self._inflight[guild_id]

            task.add_done_callback(_cleanup)

        # Shielded so one cancelled caller does not cancel the load for the others
        return await asyncio.shield(task)

    async def _load_or_create(self, guild_id: GuildID) -> RecordT:
        try:
            return await self.load(guild_id)
        except FileNotFoundError:
            record = self.create_record(guild_id)
            await record.save()
            self.guilds[guild_id] = record
            logger.info("[%s] Created defaults for guild %s", self.log_tag, guild_id)
            return record

    async def load(self, guild_id: Union[GuildID, int, str]) -> RecordT:
        """
        Read a guild's file and cache the resulting record.

        Raises:
            FileNotFoundError: The guild has no file yet.
        """
        guild_id = GuildID(guild_id)
        path = self.file_path(guild_id)

        try:
            raw = await read_json_async(path)
            jsonschema.validate(instance=raw, schema=self.file_schema)
            record = self.build_record(guild_id, raw)
        except FileNotFoundError:
            raise
        except Exception as exc:
            record = self.create_record(guild_id)
            record.suppress_persistence = True
            self.notify("on_error", guild_id, exc)
            return record

        self.guilds[guild_id] = record
        self.notify("on_load", record)
        return record

    async def load_from_directory(self) -> Dict[GuildID, RecordT]:
        """Load every ``<guild id>.json`` file in the directory and return what was loaded."""
        if not self.path.exists():
            self.path.mkdir(parents=True, exist_ok=True)
            logger.info("[%s] Created empty directory %s", self.log_tag, self.path)
            return {}

        files = await asyncio.to_thread(lambda: sorted(self.path.glob("*.json")))
        loaded: Dict[GuildID, RecordT] = {}

        for file in files:
            try:
                guild_id = GuildID(file.stem)
            except ValueError:
                logger.warning("[%s] Skipping %s: file name is not a guild ID", self.log_tag, file.name)
                continue

            try:
                loaded[guild_id] = await self.load(guild_id)
            except FileNotFoundError:
                logger.warning("[%s] %s disappeared before it could be loaded", self.log_tag, file.name)

        logger.info("[%s] Loaded %d guild file(s) from %s", self.log_tag, len(loaded), self.path)
        return loaded

    async def save_all(self) -> None:
        """Persist every cached record, one after another."""
        for record in list(self.guilds.values()):
            await record.save()
