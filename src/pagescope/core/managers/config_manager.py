# src/pagescope/core/managers/config_manager.py
import json
import logging
from typing import Any, Dict, Optional

from pagescope.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    A singleton holding the parsed settings.json. Each pipeline stage reads
    its own top-level section ('scraper', 'parser', 'analyzer', 'logging').
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._config = {}
            cls._instance.reset()
        return cls._instance

    def section(self, name: str) -> Dict[str, Any]:
        """
        Returns one stage's settings, or an empty dict when the section is
        missing or is not a mapping.
        """
        value = self._config.get(name)
        if value is None:
            return {}
        if not isinstance(value, dict):
            logger.warning("Ignoring settings section '%s': expected an object, got %s.",
                           name, type(value).__name__)
            return {}
        return value

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """e.g. 'user_agent.chrome_version'."""
        value = self._config
        for key in key_path.split('.'):
            if not isinstance(value, dict):
                return default
            value = value.get(key)
        return value if value is not None else default

    def reset(self):
        """(Re)loads settings.json; a missing or broken file gives an empty configuration."""
        config_path = PathUtils.get_settings_file()
        if not config_path.exists():
            logger.warning("settings.json not found at %s. Using empty config.", config_path)
            self._config = {}
            return
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load settings.json: %s", e, exc_info=True)
            self._config = {}
            return
        if not isinstance(loaded, dict):
            logger.error("settings.json must hold a JSON object, got %s.", type(loaded).__name__)
            loaded = {}
        self._config = loaded
        logger.debug("Configuration loaded from %s.", config_path)


# The global singleton instance that the entire library uses.
config_manager = ConfigManager()
