"""
Kinds of guild setting values.

Every setting definition has one :class:`SettingType`. The type decides which
raw strings a user may enter, what typed value is stored, and how that value
is shown back in embeds.

Stored forms:
- PREFIX: ``str`` without whitespace
- BOOLEAN: ``bool``
- CHANNEL: channel ID as ``str``, or ``None`` for "no channel"
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Optional

import discord


PREFIX_PATTERN = re.compile(r"\S+")
CHANNEL_PATTERN = re.compile(r"<#(\d{17,19})>|(\d{17,19})")
SNOWFLAKE_PATTERN = re.compile(r"\d{17,19}")
BOOLEAN_WORDS = {"on": True, "true": True, "off": False, "false": False}
NONE_WORD = "none"


def _extract_channel_id(value: str) -> Optional[str]:
    match = CHANNEL_PATTERN.fullmatch(value.strip())
    if match is None:
        return None
    return match.group(1) or match.group(2)


class SettingType(Enum):
    """Closed set of setting kinds; behaviour is dispatched per member."""

    PREFIX = "Prefix"
    BOOLEAN = "Boolean"
    CHANNEL = "Channel"

    def validate(self, guild: Optional[discord.Guild], value: Any) -> bool:
        """Return whether a raw user string is acceptable. Never raises."""
        if not isinstance(value, str):
            return False

        match self:
            case SettingType.PREFIX:
                return PREFIX_PATTERN.fullmatch(value) is not None
            case SettingType.BOOLEAN:
                return value.strip().lower() in BOOLEAN_WORDS
            case SettingType.CHANNEL:
                if value.strip().lower() == NONE_WORD:
                    return True
                channel_id = _extract_channel_id(value)
                if channel_id is None or guild is None:
                    return False
                return guild.get_channel(int(channel_id)) is not None
        return False

    def parse(self, guild: Optional[discord.Guild], value: Any) -> Any:
        """
        Convert a raw string into the stored form.

        Call :meth:`validate` first; an unusable value parses to ``None``.
        """
        if not isinstance(value, str):
            return None

        match self:
            case SettingType.PREFIX:
                return value if PREFIX_PATTERN.fullmatch(value) else None
            case SettingType.BOOLEAN:
                return BOOLEAN_WORDS.get(value.strip().lower(), False)
            case SettingType.CHANNEL:
                if value.strip().lower() == NONE_WORD:
                    return None
                return _extract_channel_id(value)
        return None

    def display(self, value: Any) -> str:
        """Render a stored value for humans."""
        match self:
            case SettingType.PREFIX:
                return f"`{value}`"
            case SettingType.BOOLEAN:
                return "on" if value else "off"
            case SettingType.CHANNEL:
                return "None" if value is None else f"<#{value}>"
        return str(value)

    def accepts_stored(self, value: Any) -> bool:
        """Return whether ``value`` is a well-formed stored value for this type."""
        match self:
            case SettingType.PREFIX:
                return isinstance(value, str) and PREFIX_PATTERN.fullmatch(value) is not None
            case SettingType.BOOLEAN:
                return isinstance(value, bool)
            case SettingType.CHANNEL:
                return value is None or (isinstance(value, str) and SNOWFLAKE_PATTERN.fullmatch(value) is not None)
        return False
