"""Embeds for the /settings and /storage commands."""

import datetime
from typing import Iterable, List

import discord

from swagclan.settings.guild_settings import GuildSetting, GuildSettingChange, GuildSettings
from swagclan.storage.guild_storage import GuildStorage, StorageCollection


HISTORY_PREVIEW = 5
FIELD_LIMIT = 1024
DESCRIPTION_LIMIT = 4096
# Discord rejects embeds with more fields than this
MAX_FIELDS = 25


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _clip(text: str, limit: int = FIELD_LIMIT) -> str:
    return text if len(text) <= limit else text[: limit - 1] + "…"


def _clip_lines_from_start(lines: List[str], limit: int) -> str:
    """Join ``lines`` and drop whole lines from the front until the text fits."""
    text = "\n".join(lines)
    if len(text) <= limit:
        return text

    kept: List[str] = []
    length = 0
    for line in reversed(lines):
        added = len(line) + (1 if kept else 0)
        if length + added > limit - 2:
            return "…\n" + "\n".join(reversed(kept)) if kept else _clip(line, limit)
        kept.append(line)
        length += added
    return "\n".join(reversed(kept))


def format_history(
    changes: Iterable[GuildSettingChange],
    limit: int = HISTORY_PREVIEW,
    max_chars: int = FIELD_LIMIT,
) -> str:
    """Newest ``limit`` changes, one per line, or a placeholder.

    When the lines do not fit in ``max_chars`` the oldest ones are dropped.
    """
    lines: List[str] = [change.display for change in list(changes)[-limit:]]
    return _clip_lines_from_start(lines, max_chars) if lines else "No setting history."


def build_settings_overview_embed(guild_settings: GuildSettings) -> discord.Embed:
    """Every setting with its current value, and the default where it differs."""
    count = len(guild_settings.settings)
    embed = discord.Embed(
        title="Server Settings",
        description=f"There {'is' if count == 1 else 'are'} currently {count} setting{'' if count == 1 else 's'}.",
        color=discord.Color.blurple(),
        timestamp=_now(),
    )

    for setting in guild_settings.settings.values():
        definition = setting.definition
        body = f"{definition.description}\n**Value**: {setting.format}"
        if not setting.is_default:
            body += f"\n**Default**: {definition.format(definition.default)}"
        embed.add_field(name=definition.display, value=_clip(body), inline=False)

    embed.set_footer(text="Use /settings set to change a setting.")
    return embed


def build_setting_embed(setting: GuildSetting, *, title: str = "Setting") -> discord.Embed:
    """One setting: description, value, default and recent history."""
    definition = setting.definition
    embed = discord.Embed(
        title=f"{title}: {definition.display}",
        description=definition.description,
        color=discord.Color.green(),
        timestamp=_now(),
    )
    embed.add_field(name="Value", value=setting.format, inline=True)
    embed.add_field(name="Default", value=definition.format(definition.default), inline=True)
    embed.add_field(name="History", value=format_history(setting.history), inline=False)
    return embed


def build_history_embed(setting: GuildSetting) -> discord.Embed:
    history = setting.history
    embed = discord.Embed(
        title=f"History: {setting.definition.display}",
        description=format_history(history, limit=len(history) or 1, max_chars=DESCRIPTION_LIMIT),
        color=discord.Color.blurple(),
        timestamp=_now(),
    )
    embed.set_footer(text=f"{len(history)} change(s)")
    return embed


def build_storage_embed(storage: GuildStorage) -> discord.Embed:
    """Collections with their item counts and the space used.

    At most ``MAX_FIELDS`` fields are sent; past that the last field lists
    the names of the remaining collections.
    """
    embed = discord.Embed(
        title="Server Storage",
        description=f"Using {storage.size} of {storage.max_bytes} bytes.",
        color=discord.Color.blurple(),
        timestamp=_now(),
    )
    collections = list(storage.collections.values())
    shown = collections if len(collections) <= MAX_FIELDS else collections[: MAX_FIELDS - 1]
    for collection in shown:
        embed.add_field(name=collection.name, value=f"{len(collection)} item(s), {collection.size} bytes", inline=True)

    rest = collections[len(shown):]
    if rest:
        names = ", ".join(f"`{collection.name}`" for collection in rest)
        embed.add_field(name=f"{len(rest)} more", value=_clip(names), inline=False)
    if not collections:
        embed.add_field(name="Collections", value="No collections.", inline=False)
    return embed


def build_collection_embed(collection: StorageCollection) -> discord.Embed:
    lines = [f"`{item.name}`: {item.value}" for item in collection]
    embed = discord.Embed(
        title=f"Collection: {collection.name}",
        description=_clip("\n".join(lines), 4096) if lines else "This collection is empty.",
        color=discord.Color.blurple(),
        timestamp=_now(),
    )
    embed.set_footer(text=f"{len(collection)} item(s), {collection.size} bytes")
    return embed
