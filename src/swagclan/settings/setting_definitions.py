"""Static descriptions of the configurable per-guild settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import discord

from swagclan.settings.setting_types import SettingType


@dataclass(frozen=True, slots=True)
class SettingDefinition:
    """
    Read-only metadata for one guild setting.

    Attributes:
        name: Unique key; also the key in the settings file.
        description: One-line help text.
        emoji: Display hint shown before the name.
        type: How values are validated, parsed and displayed.
        permissions: Permission bitmask a member needs to change the setting.
        default: Value used until the guild changes it.
    """

    name: str
    description: str
    emoji: str
    type: SettingType
    permissions: int
    default: Any = None

    @property
    def display(self) -> str:
        """Name as shown in embeds, e.g. ``❗ Prefix (Prefix)``."""
        prefix = f"{self.emoji} " if self.emoji else ""
        return f"{prefix}{self.name} ({self.type.value})"

    @property
    def required_permissions(self) -> discord.Permissions:
        return discord.Permissions(self.permissions)

    def format(self, value: Any) -> str:
        return self.type.display(value)

    def validate(self, guild: Optional[discord.Guild], value: Any) -> bool:
        return self.type.validate(guild, value)

    def parse(self, guild: Optional[discord.Guild], value: Any) -> Any:
        """Validate then parse; ``None`` when the value is not acceptable."""
        if self.type.validate(guild, value):
            return self.type.parse(guild, value)
        return None

    def can_modify(self, member: Any) -> bool:
        """Return whether ``member`` holds every permission this setting requires."""
        permissions = getattr(member, "guild_permissions", None)
        if not isinstance(permissions, discord.Permissions):
            return False
        if permissions.administrator:
            return True
        return self.required_permissions.is_subset(permissions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "emoji": self.emoji,
            "type": self.type.value,
            "permissions": self.permissions,
            "default": self.default,
        }


MANAGE_GUILD = discord.Permissions(manage_guild=True).value


DEFAULT_DEFINITIONS: Dict[str, SettingDefinition] = {
    "Prefix": SettingDefinition(
        name="Prefix",
        description="The prefix of the server.",
        emoji="❗",
        type=SettingType.PREFIX,
        permissions=MANAGE_GUILD,
        default=".",
    ),
    "Log Channel": SettingDefinition(
        name="Log Channel",
        description="The channel for where logs are sent to.",
        emoji="📜",
        type=SettingType.CHANNEL,
        permissions=MANAGE_GUILD,
        default=None,
    ),
}
