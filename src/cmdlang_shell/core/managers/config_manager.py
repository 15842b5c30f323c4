# src/cmdlang_shell/core/managers/config_manager.py
import json
import logging
from typing import Any, Dict, Optional

from cmdlang_shell.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

# Used when settings.json does not define the key
DEFAULTS: Dict[str, Any] = {
    "debug": {"level": "WARNING"},
    "engine": {"command_timeout": 30, "foreground_wait": 0.5, "strip_comments": True},
    "assistant": {"max_items": 20, "history_items": 5},
    "aliases": {"file": None},
}


class ConfigManager:
    """
    A singleton holding the shell configuration.
    Settings are loaded from settings.json and can be changed in memory.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        self._config: Dict[str, Any] = {}
        self.reset()
        logger.debug("ConfigManager initialized.")

    def get_all(self) -> Dict[str, Any]:
        """Returns the entire current configuration dictionary."""
        return self._config

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """
        Safely retrieves a nested value, e.g. 'engine.command_timeout'.
        Falls back to DEFAULTS, then to `default`.
        """
        for source in (self._config, DEFAULTS):
            value: Any = source
            for key in key_path.split('.'):
                if not isinstance(value, dict):
                    value = None
                    break
                value = value.get(key)
            if value is not None:
                return value
        return default

    def set_nested(self, key_path: str, value: Any) -> bool:
        """
        Sets a nested value in the in-memory configuration, casting it to the
        type of the current value when possible ('engine.command_timeout', '60').
        """
        keys = key_path.split('.')
        d = self._config
        for key in keys[:-1]:
            d = d.setdefault(key, {})
            if not isinstance(d, dict):
                logger.error("Cannot set value: '%s' is not a dictionary.", key)
                return False

        original_value = d.get(keys[-1])
        if original_value is None:
            original_value = self.get_nested(key_path)
        if original_value is not None and not isinstance(value, type(original_value)):
            value = self._cast(key_path, value, original_value)

        d[keys[-1]] = value
        logger.info("Configuration updated: %s = %s", key_path, value)
        return True

    @staticmethod
    def _cast(key_path: str, value: Any, original_value: Any) -> Any:
        if isinstance(original_value, bool):
            return str(value).strip().lower() in ("1", "true", "yes", "on")
        try:
            return type(original_value)(value)
        except (ValueError, TypeError):
            logger.warning(
                "Could not cast new value for '%s' to type %s. Storing as string.",
                key_path, type(original_value).__name__
            )
            return value

    def reset(self):
        """Resets the in-memory configuration from the settings.json file."""
        config_path = PathUtils.get_shell_package_root() / "settings.json"
        if not config_path.exists():
            logger.warning("settings.json not found at %s. Using empty config.", config_path)
            self._config = {}
            return
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                self._config = json.load(f)
            logger.info("Configuration has been (re)loaded from settings.json.")
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load settings.json: %s", e, exc_info=True)
            self._config = {}


# The global singleton instance that the entire application will use.
config_manager = ConfigManager()
