"""Registry of per-guild settings backed by one JSON file per guild."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from swagclan.datatypes.discord_datatypes import GuildID
from swagclan.services.guild_record_service import GuildRecordService, GuildRef
from swagclan.services.observers import GuildRecordObserver
from swagclan.settings.guild_settings import SETTINGS_FILE_SCHEMA, GuildSettings
from swagclan.settings.setting_definitions import DEFAULT_DEFINITIONS, SettingDefinition
from swagclan.util.logger import get_logger

logger = get_logger("settings_service")


class SettingsService(GuildRecordService[GuildSettings]):
    """
    Service for interacting with guild settings.

    Args:
        bot: Guild resolver (``get_guild(int)``), used to validate new values.
        definitions: Setting definitions keyed by name.
        path: Directory of ``<guild id>.json`` settings files.
        observers: Receive ``on_load`` / ``on_error`` notifications.
    """

    log_tag = "SETTINGS SERVICE"
    file_schema = SETTINGS_FILE_SCHEMA

    def __init__(
        self,
        bot: Any,
        definitions: Optional[Dict[str, SettingDefinition]] = None,
        path: Union[str, Path] = "data/settings",
        observers: Optional[Iterable[GuildRecordObserver]] = None,
    ) -> None:
        super().__init__(bot, path, observers)
        self.definitions: Dict[str, SettingDefinition] = dict(DEFAULT_DEFINITIONS if definitions is None else definitions)
        logger.info("[SETTINGS SERVICE] Initialized with %d definition(s) at %s", len(self.definitions), self.path)

    def build_record(self, guild_id: GuildID, raw: Dict[str, Any]) -> GuildSettings:
        return GuildSettings(self, guild_id, raw)

    def create_record(self, guild_id: GuildID) -> GuildSettings:
        return self.create_settings(guild_id)

    def create_settings(self, guild_ref: GuildRef) -> GuildSettings:
        """Build an uncached settings aggregate holding every definition's default."""
        guild_id = GuildID.resolve(guild_ref)
        return GuildSettings(
            self,
            guild_id,
            {
                "settings": {name: definition.default for name, definition in self.definitions.items()},
                "history": [],
            },
        )

    async def get_settings(self, guild_ref: GuildRef) -> GuildSettings:
        """Get a guild's settings, loading them from disk or creating defaults on first use."""
        return await self.get(guild_ref)

    async def load_settings(self, guild_id: Union[GuildID, int, str]) -> GuildSettings:
        """
        Load settings for a guild from its file.

        Raises FileNotFoundError if the guild has no file. An unreadable file
        yields uncached defaults that will not be saved.
        """
        return await self.load(guild_id)
