"""Configuration manager: YAML file merged over defaults, then env overrides."""

import copy
import logging
import os

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


# env var -> (section, key, converter)
_ENV_OVERRIDES = {
    "SERVER_HOST": ("server", "host", str),
    "SERVER_PORT": ("server", "port", int),
    "DATA_DIR": ("storage", "data_dir", str),
    "PERSIST_ACROSS_RESTARTS": ("storage", "persist_across_restarts", _parse_bool),
    "LOG_LEVEL": ("logging", "level", str.upper),
}


class Config:
    """Configuration manager that loads from YAML and merges with defaults."""

    DEFAULTS = {
        "server": {
            "host": "0.0.0.0",
            "port": 5000,
            "debug": False,
            "cors_origin": "*",
        },
        "storage": {
            "data_dir": "data",
            "records_file": "records.jsonl",
            "words_file": "words.jsonl",
            "persist_across_restarts": False,
            "fsync": True,
        },
        "logging": {
            "level": "INFO",
        },
    }

    def __init__(self, config_path=None, environ=None):
        self._config = copy.deepcopy(self.DEFAULTS)

        if config_path is not None:
            try:
                with open(config_path, "r") as f:
                    user_config = yaml.safe_load(f)

                if user_config and isinstance(user_config, dict):
                    self._config = self._deep_merge(self._config, user_config)
                logger.info("Loaded config from %s", config_path)
            except FileNotFoundError:
                logger.info("Config file %s not found, using defaults", config_path)
            except yaml.YAMLError:
                logger.warning("Invalid YAML in %s, using defaults", config_path)

        if environ is not None:
            self._apply_env(environ)

    @classmethod
    def load(cls, config_path=None):
        """Build a Config from ``config_path`` (or $CONFIG_PATH) and os.environ."""
        path = config_path or os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)
        return cls(path, environ=os.environ)

    def _apply_env(self, environ):
        for var, (section, key, convert) in _ENV_OVERRIDES.items():
            if var in environ:
                try:
                    self._config[section][key] = convert(environ[var])
                except ValueError:
                    logger.warning("Ignoring invalid %s=%r", var, environ[var])

    @staticmethod
    def _deep_merge(base, override):
        """Recursively merge override dict into base dict."""
        result = copy.deepcopy(base)
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = Config._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)
        return result

    def set(self, section, key, value):
        """Override a single value (used for CLI flags)."""
        self._config.setdefault(section, {})[key] = value

    @property
    def records_path(self):
        storage = self._config["storage"]
        return os.path.join(storage["data_dir"], storage["records_file"])

    @property
    def words_path(self):
        storage = self._config["storage"]
        return os.path.join(storage["data_dir"], storage["words_file"])

    def __getitem__(self, key):
        return self._config[key]
