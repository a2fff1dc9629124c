"""
Type-safe wrappers for Discord snowflake identifiers.

Guild settings and guild storage are keyed by guild ID and persisted as
``<guild id>.json``, so IDs are kept as decimal strings internally and
converted to ``int`` only when talking to the Discord API.
"""

from __future__ import annotations

import re
from typing import Union
import discord


SNOWFLAKE_PATTERN = re.compile(r"\d{17,19}")


class GuildID:
    """
    Type-safe wrapper for Discord guild snowflake IDs.

    Attributes:
        _value (str): The snowflake ID stored as a string for JSON and file-name parity.

    Example:
        >>> gid = GuildID.from_int(123456789012345678)
        >>> gid.to_int()
        123456789012345678
        >>> str(gid)
        '123456789012345678'
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "GuildID"]) -> None:
        """
        Initialize a GuildID from a string, int, or another GuildID.

        Raises:
            ValueError: If the value cannot be converted to a valid snowflake.
        """
        if isinstance(value, GuildID):
            self._value = value._value
        elif isinstance(value, bool):
            raise ValueError(f"Cannot create GuildID from bool: {value}")
        elif isinstance(value, int):
            if value < 0:
                raise ValueError(f"Guild IDs are non-negative: {value}")
            self._value = str(value)
        elif isinstance(value, str):
            stripped = value.strip()
            if not stripped.isdigit():
                raise ValueError(f"Not a guild snowflake: {value!r}")
            self._value = str(int(stripped))
        else:
            raise ValueError(f"Cannot create GuildID from {type(value).__name__}: {value}")

    @classmethod
    def from_int(cls, value: int) -> "GuildID":
        return cls(value)

    @classmethod
    def from_guild(cls, guild: discord.Guild) -> "GuildID":
        """Create a GuildID from a Discord Guild object."""
        return cls(guild.id)

    @classmethod
    def resolve(cls, guild_ref: Union[discord.Guild, "GuildID", int, str]) -> "GuildID":
        """
        Turn anything that identifies a guild into a GuildID.

        Accepts a guild object (anything with an integer ``id``), a GuildID,
        an int or a numeric string.
        """
        if isinstance(guild_ref, (GuildID, int, str)):
            return cls(guild_ref)
        guild_id = getattr(guild_ref, "id", None)
        if guild_id is None:
            raise ValueError(f"Cannot resolve a guild from {type(guild_ref).__name__}")
        return cls(guild_id)

    def to_int(self) -> int:
        return int(self._value)

    def __int__(self) -> int:
        return int(self._value)

    def __str__(self) -> str:
        """Return the string representation for JSON serialization."""
        return self._value

    def __repr__(self) -> str:
        return f"GuildID({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, GuildID):
            return self._value == other._value
        if isinstance(other, str):
            return self._value == other
        if isinstance(other, int):
            return self._value == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)


class ChannelID:
    """
    Type-safe wrapper for Discord channel snowflake IDs.

    Besides plain integers and numeric strings this accepts channel mentions
    (``<#123...>``), which is how users usually type channels in commands.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "ChannelID"]) -> None:
        if isinstance(value, ChannelID):
            self._value = value._value
        elif isinstance(value, bool):
            raise ValueError(f"Cannot create ChannelID from bool: {value}")
        elif isinstance(value, int):
            self._value = str(value)
        elif isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("<#") and stripped.endswith(">"):
                stripped = stripped[2:-1]
            if not stripped.isdigit():
                raise ValueError(f"Not a channel snowflake: {value!r}")
            self._value = str(int(stripped))
        else:
            raise ValueError(f"Cannot create ChannelID from {type(value).__name__}: {value}")

    @classmethod
    def from_int(cls, value: int) -> "ChannelID":
        return cls(value)

    @classmethod
    def from_channel(cls, channel: discord.abc.GuildChannel) -> "ChannelID":
        return cls(channel.id)

    def to_int(self) -> int:
        return int(self._value)

    def __int__(self) -> int:
        return int(self._value)

    @property
    def mention(self) -> str:
        return f"<#{self._value}>"

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"ChannelID({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ChannelID):
            return self._value == other._value
        if isinstance(other, str):
            return self._value == other
        if isinstance(other, int):
            return self._value == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)
