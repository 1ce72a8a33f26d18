"""Configuration management for the RTM bot.

Provides a ConfigManager class that loads bot settings from a YAML file,
filling in defaults. The bot token is read from the environment only.
"""
import copy
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from core.client import DEFAULT_API_URL, DEFAULT_ORIGIN
from core.dispatcher import DEFAULT_PREFIX
from storage.file_store import YAMLFileStore

logger = logging.getLogger(__name__)

TOKEN_ENV_VAR = "RTM_BOT_TOKEN"
CONFIG_ENV_VAR = "RTM_BOT_CONFIG"


DEFAULT_CONFIG: Dict[str, Any] = {
    "bot": {
        "prefix": DEFAULT_PREFIX,
        "api_url": DEFAULT_API_URL,
        "origin": DEFAULT_ORIGIN,
    },
    "logging": {
        "level": "INFO",
    },
}


class ConfigError(Exception):
    """Required configuration is missing."""


def read_token(environ: Optional[Dict[str, str]] = None) -> str:
    """Return the bot token from the environment.

    Raises:
        ConfigError: if the variable is unset or empty
    """
    env = os.environ if environ is None else environ
    token = env.get(TOKEN_ENV_VAR, "").strip()
    if not token:
        raise ConfigError(f"{TOKEN_ENV_VAR} is not set")
    return token


@dataclass
class ConfigManager:
    """Loads bot configuration from a YAML file.

    Attributes:
        path: Path to the YAML configuration file
    """
    path: str
    _store: YAMLFileStore = field(init=False)
    _config: Dict[str, Any] = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        self._store = YAMLFileStore(self.path)

    @classmethod
    def from_env(cls) -> "ConfigManager":
        return cls(os.environ.get(CONFIG_ENV_VAR, "config.yaml"))

    def load(self) -> Dict[str, Any]:
        """Load configuration from file, creating defaults if needed."""
        if not self._store.exists():
            logger.info("Config file %s not found, creating default config", self.path)
            self._store.write(DEFAULT_CONFIG)
            self._config = copy.deepcopy(DEFAULT_CONFIG)
            return self._config

        data = self._store.read()
        if not isinstance(data, dict):
            logger.warning("Config file malformed, resetting to defaults")
            self._store.write(DEFAULT_CONFIG)
            self._config = copy.deepcopy(DEFAULT_CONFIG)
            return self._config

        # Merge each section over its defaults (shallow per section)
        merged = copy.deepcopy(DEFAULT_CONFIG)
        for k, v in data.items():
            if isinstance(v, dict) and isinstance(merged.get(k), dict):
                merged[k].update(v)
            else:
                merged[k] = v
        self._config = merged
        return self._config

    def get(self) -> Dict[str, Any]:
        return self._config

    @property
    def bot(self) -> Dict[str, Any]:
        return self._config.get("bot", DEFAULT_CONFIG["bot"])

    @property
    def log_level(self) -> str:
        return str(self._config.get("logging", {}).get("level", "INFO")).upper()
