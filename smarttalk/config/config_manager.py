import logging
import copy
from typing import Dict, Any, Optional
from .default_config import CONFIG

logger = logging.getLogger("SmartTalkAI")


def deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merges two dictionaries.
    Overrides merge into base.
    """
    result = copy.deepcopy(base)
    for key, value in overrides.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


class ConfigManager:
    """
    Holds the active configuration: the environment-driven defaults,
    optionally patched with overrides at construction time.
    """

    def __init__(self, overrides: Optional[Dict[str, Any]] = None):
        self._config = copy.deepcopy(CONFIG)
        if overrides:
            self._config = deep_merge(self._config, overrides)
            logger.info("ConfigManager initialized with configuration overrides.")
        else:
            logger.info("ConfigManager initialized with default Python configuration.")

    def get_active_config(self) -> Dict[str, Any]:
        return self._config

    def get_section(self, name: str) -> Dict[str, Any]:
        return self._config.get(name, {})
