from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict
import yaml

from swagclan.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()

DEFAULT_SETTINGS_PATH = "data/settings"
DEFAULT_STORAGE_PATH = "data/storage"
DEFAULT_STORAGE_MAX_BYTES = 65536  # 64 KiB
DEFAULT_MAX_NAME_LENGTH = 20
DEFAULT_CONSOLE_LOG_LEVEL = "INFO"


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The class caches the contents of ``./config/app_config.yml`` and exposes
    typed shortcuts for the data directories and storage limits. Uses fcntl
    shared locks so a concurrent writer never hands us a half-written file.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    data = yaml.safe_load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
            return {}
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            logger.error("[APP CONFIGURATION] Config %s is not a mapping; ignoring it.", self.config_path)
            return {}
        return data

    def _section(self, name: str) -> Dict[str, Any]:
        section = self._data.get(name, {})
        return section if isinstance(section, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns an empty dict when the file is missing or malformed.
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the current cached configuration mapping.

        The returned dict is the internal cache; callers should not mutate it.
        """
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def settings_path(self) -> Path:
        """Directory holding one ``<guild id>.json`` settings file per guild."""
        return Path(self._section("data").get("settings_path") or DEFAULT_SETTINGS_PATH).resolve()

    @property
    def storage_path(self) -> Path:
        """Directory holding one ``<guild id>.json`` storage file per guild."""
        return Path(self._section("data").get("storage_path") or DEFAULT_STORAGE_PATH).resolve()

    @property
    def storage_max_bytes(self) -> int:
        """Upper bound on the serialized size of a single guild's storage."""
        return int(self._section("storage").get("max_bytes", DEFAULT_STORAGE_MAX_BYTES))

    @property
    def max_name_length(self) -> int:
        """Longest collection or item name accepted by guild storage."""
        return int(self._section("storage").get("max_name_length", DEFAULT_MAX_NAME_LENGTH))

    @property
    def console_log_level(self) -> str:
        """Threshold for console log output; the log file always records DEBUG."""
        return str(self._section("logging").get("console_level") or DEFAULT_CONSOLE_LOG_LEVEL)

    @property
    def preload_on_ready(self) -> bool:
        """Whether every stored guild is loaded once the bot is ready."""
        return bool(self._data.get("preload_on_ready", True))


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
