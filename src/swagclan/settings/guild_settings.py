"""
Live settings for one guild, with an append-only change history.

File shape::

    {
      "settings": {"<definition name>": <stored value>, ...},
      "history": [
        {"timestamp": <ms>, "setting": "<name>", "before": <value>, "after": <value>},
        ...
      ]
    }
"""

from __future__ import annotations

import datetime
import time
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import discord

from swagclan.datatypes.discord_datatypes import GuildID
from swagclan.settings.setting_definitions import SettingDefinition
from swagclan.util.json_files import write_json_atomic_async
from swagclan.util.logger import get_logger

if TYPE_CHECKING:
    from swagclan.settings.settings_service import SettingsService

logger = get_logger("guild_settings")


SETTINGS_FILE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["settings"],
    "properties": {
        "settings": {"type": "object"},
        "history": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["timestamp", "setting", "before", "after"],
                "properties": {
                    "timestamp": {"type": "number"},
                    "setting": {"type": "string"},
                },
            },
        },
    },
}


def now_ms() -> int:
    return int(time.time() * 1000)


class GuildSetting:
    """One (name, value) pair of a guild, bound to its definition."""

    def __init__(self, guild_settings: "GuildSettings", definition: SettingDefinition, value: Any) -> None:
        self.guild_settings = guild_settings
        self.name = definition.name
        self.definition = definition
        self.value = value

    def __repr__(self) -> str:
        return f"GuildSetting({self.name!r}, {self.value!r})"

    @property
    def format(self) -> str:
        """The value as displayed in embeds."""
        return self.definition.format(self.value)

    @property
    def is_default(self) -> bool:
        return self.value == self.definition.default

    @property
    def history(self) -> List["GuildSettingChange"]:
        """Changes made to this setting, oldest first."""
        return self.guild_settings.history.get_history(self.name)

    def to_json(self) -> Any:
        return self.value

    def set(self, value: str) -> Optional["GuildSettingChange"]:
        """
        Validate a raw user string and, if acceptable, store its parsed form.

        Returns the change record (recorded in history only when the value
        actually changed), or None when the guild cannot be resolved or the
        value is invalid.
        """
        guild = self.guild_settings.resolve_guild()
        if guild is None:
            logger.debug("[GUILD SETTINGS] Guild %s is not available; %s not changed", self.guild_settings.guild_id, self.name)
            return None

        if not self.definition.validate(guild, value):
            return None

        before = self.value
        self.value = self.definition.type.parse(guild, value)
        return self.guild_settings.history.mark(self.name, before, self.value)


class GuildSettingChange:
    """A single recorded change: when, which setting, and the values either side."""

    def __init__(self, guild_settings: "GuildSettings", timestamp: int, setting: GuildSetting, before: Any, after: Any) -> None:
        self.guild_settings = guild_settings
        self.timestamp = timestamp
        self.setting = setting
        self.before = GuildSetting(guild_settings, setting.definition, before)
        self.after = GuildSetting(guild_settings, setting.definition, after)

    def __repr__(self) -> str:
        return f"GuildSettingChange({self.setting.name!r}, {self.before.value!r} -> {self.after.value!r}, {self.timestamp})"

    @property
    def display(self) -> str:
        """``<before> -> <after> (YYYY-MM-DD HH:MM:SS)`` with the time in UTC."""
        when = datetime.datetime.fromtimestamp(self.timestamp / 1000, tz=datetime.timezone.utc)
        return f"{self.before.format} -> {self.after.format} ({when.strftime('%Y-%m-%d %H:%M:%S')})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "setting": self.setting.name,
            "before": self.before.value,
            "after": self.after.value,
        }


class GuildSettingsHistory:
    """Append-only log of setting changes, kept in the order they were marked."""

    def __init__(self, guild_settings: "GuildSettings", history: Optional[List[Dict[str, Any]]] = None) -> None:
        self.guild_settings = guild_settings
        self.history: List[GuildSettingChange] = []

        for entry in history or []:
            setting = guild_settings.settings.get(entry["setting"])
            if setting is None:
                logger.debug(
                    "[GUILD SETTINGS] Dropping history for unknown setting %r in guild %s",
                    entry["setting"],
                    guild_settings.guild_id,
                )
                continue
            self.history.append(
                GuildSettingChange(guild_settings, entry["timestamp"], setting, entry["before"], entry["after"])
            )

    def __len__(self) -> int:
        return len(self.history)

    def __iter__(self):
        return iter(self.history)

    def to_list(self) -> List[Dict[str, Any]]:
        return [change.to_dict() for change in self.history]

    def mark(self, setting: str, before: Any, after: Any) -> GuildSettingChange:
        """
        Build a change record for ``setting`` and append it if the value changed.

        The record is returned either way.
        """
        change = GuildSettingChange(self.guild_settings, now_ms(), self.guild_settings.settings[setting], before, after)

        if before != after:
            self.history.append(change)

        return change

    def get_history(self, setting: str) -> List[GuildSettingChange]:
        """All changes to ``setting``, sorted by timestamp (stable for ties)."""
        changes = [change for change in self.history if change.setting.name == setting]
        return sorted(changes, key=lambda change: change.timestamp)


class GuildSettings:
    """
    Every setting of one guild plus its change history.

    Exactly one :class:`GuildSetting` exists per known definition. Stored keys
    without a definition are dropped, and stored values that are malformed for
    their type fall back to the definition's default.
    """

    def __init__(self, service: "SettingsService", guild_id: GuildID, raw: Optional[Dict[str, Any]] = None) -> None:
        raw = raw or {}
        self.service = service
        self.guild_id = GuildID(guild_id)

        self.settings: Dict[str, GuildSetting] = {
            name: GuildSetting(self, service.definitions[name], value)
            for name, value in self.remove_unused(raw.get("settings") or {}).items()
        }
        self.history = GuildSettingsHistory(self, raw.get("history") or [])

        # Set when the backing file could not be read, so it is never clobbered
        self.suppress_persistence = False

    def __repr__(self) -> str:
        return f"GuildSettings({self.guild_id!r}, {len(self.settings)} settings)"

    def __getitem__(self, name: str) -> GuildSetting:
        return self.settings[name]

    def get(self, name: str) -> Optional[GuildSetting]:
        return self.settings.get(name)

    def find(self, query: str) -> Optional[GuildSetting]:
        """Exact name match first, then the first setting whose name starts with ``query`` (case-insensitive)."""
        if query in self.settings:
            return self.settings[query]
        lowered = query.strip().lower()
        if not lowered:
            return None
        for name, setting in self.settings.items():
            if name.lower().startswith(lowered):
                return setting
        return None

    def resolve_guild(self) -> Optional[discord.Guild]:
        return self.service.resolve_guild(self.guild_id)

    def remove_unused(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        """Return one value per known definition, using defaults for missing or malformed entries."""
        result: Dict[str, Any] = {}

        for name, definition in self.service.definitions.items():
            if name not in settings:
                result[name] = definition.default
            elif definition.type.accepts_stored(settings[name]):
                result[name] = settings[name]
            else:
                logger.warning(
                    "[GUILD SETTINGS] Guild %s has a malformed %r value %r; using the default",
                    self.guild_id,
                    name,
                    settings[name],
                )
                result[name] = definition.default

        for name in settings.keys() - self.service.definitions.keys():
            logger.debug("[GUILD SETTINGS] Dropping unknown setting %r for guild %s", name, self.guild_id)

        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "settings": {name: setting.to_json() for name, setting in self.settings.items()},
            "history": self.history.to_list(),
        }

    async def save(self) -> bool:
        """Write the whole aggregate to its file. Returns False when persistence is suppressed."""
        if self.suppress_persistence:
            logger.debug("[GUILD SETTINGS] Not saving guild %s: persistence suppressed", self.guild_id)
            return False

        await write_json_atomic_async(self.service.file_path(self.guild_id), self.to_dict())
        return True
