"""
SwagClan Discord Bot
====================

A Discord bot with typed per-guild settings (with change history) and free-form
per-guild key/value storage, both kept as one JSON file per guild.
"""

import os
import sys
from pathlib import Path


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. SWAGCLAN_HOME environment variable, if set.
    2. If running in a frozen/compiled context, the executable's directory.
    3. Otherwise the project root (two levels above this package).
    """
    if env_home := os.getenv("SWAGCLAN_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
from dataclasses import dataclass

import discord
from dotenv import load_dotenv

from swagclan.configuration.app_configuration import app_config
from swagclan.services.observers import LoggingObserver
from swagclan.settings.settings_service import SettingsService
from swagclan.storage.storage_service import StorageService
from swagclan.util.logger import configure_logging, get_logger


logger = get_logger("main")


@dataclass(slots=True)
class Runtime:
    """The bot plus the services its cogs share."""

    bot: discord.Bot
    settings_service: SettingsService
    storage_service: StorageService


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Intents for guild, channel and member lookups used by the settings commands."""
    intents = discord.Intents.default()
    intents.guilds = True
    intents.members = True
    return intents


def create_services(bot: discord.Bot) -> tuple[SettingsService, StorageService]:
    settings_service = SettingsService(
        bot,
        path=app_config.settings_path,
        observers=[LoggingObserver("SETTINGS SERVICE")],
    )
    storage_service = StorageService(
        bot,
        path=app_config.storage_path,
        observers=[LoggingObserver("STORAGE SERVICE")],
        max_bytes=app_config.storage_max_bytes,
        max_name_length=app_config.max_name_length,
    )
    return settings_service, storage_service


def load_cogs(runtime: Runtime) -> None:
    """Register all cogs with the bot."""
    from swagclan.bot.cogs import events_listener, settings_cmds, storage_cmds

    events_listener.setup(runtime.bot, runtime.settings_service, runtime.storage_service)
    settings_cmds.setup(runtime.bot, runtime.settings_service)
    storage_cmds.setup(runtime.bot, runtime.storage_service)

    logger.info("All cogs loaded successfully.")


def create_runtime() -> Runtime:
    """Instantiate the bot, its services and cogs."""
    bot = discord.Bot(intents=build_intents())
    settings_service, storage_service = create_services(bot)
    runtime = Runtime(bot=bot, settings_service=settings_service, storage_service=storage_service)
    load_cogs(runtime)
    return runtime


async def shutdown_runtime(runtime: Runtime) -> None:
    """Persist every cached guild and close the Discord connection."""
    for name, service in (("settings", runtime.settings_service), ("storage", runtime.storage_service)):
        try:
            await service.save_all()
        except Exception:
            logger.exception("Error while saving guild %s during shutdown", name)

    if not runtime.bot.is_closed():
        await runtime.bot.close()

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap and run the bot, returning an exit code."""
    configure_logging(app_config.console_log_level)
    token = load_environment()

    try:
        runtime = create_runtime()
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        return 1

    exit_code = 0
    logger.info("Attempting to connect to Discord…")
    try:
        await runtime.bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(runtime)

    return exit_code


def main() -> None:
    """Synchronous entry point used by the ``swagclan`` console script."""
    try:
        exit_code = asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
