"""Spock - Configuration Manager for SearchLens.

Spock manages configuration from dicts, JSON files and environment
variables, providing a unified interface for the settings query execution
depends on.

Configuration hierarchy:
- searchlens: Core settings
  - display_errors: Whether query diagnostics are shown to the caller
  - parse_mode: Parse mode forwarded to the backend for fulltext keys
  - bypass_access: Ask the backend to skip access checks
  - skip_result_count: Let the backend skip counting when no count is needed
- indexes: Per-index overrides
  - <index_id>: Same keys as the core section

Environment variables follow the naming convention:
SEARCHLENS__<section>__<key> for nested values
Example: SEARCHLENS__SEARCHLENS__DISPLAY_ERRORS=true
         SEARCHLENS__INDEXES__ARTICLES__PARSE_MODE="phrase"

Section and key names are lower-cased. Index ids keep the case they are
written in and are matched case-insensitively when no exact id exists, so
SEARCHLENS__INDEXES__ARTICLES__... applies to the index "articles" and
SEARCHLENS__INDEXES__NewsFeed__... to the index "NewsFeed".
"""

import json
import logging
import os
from copy import deepcopy
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_SECTIONS = ("searchlens", "indexes")


def _merge(target: dict[str, Any], source: dict[str, Any]) -> None:
    """Recursively merge source into target."""
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = deepcopy(value)


class Spock:
    """Configuration manager for SearchLens instances.

    Each SearchLens instance has its own Spock instance to maintain
    isolated configuration state.

    Famous quote from Spock in Star Trek:
    "Logic is the beginning of wisdom, not the end."
    """

    ENV_PREFIX = "SEARCHLENS"
    ENV_SEPARATOR = "__"

    def __init__(self, config_path: str | None = None):
        """Initialize Spock configuration manager.

        Args:
            config_path: Path to JSON configuration file. If None, only
                        provided dicts and environment variables are used.
        """
        self._config_path = config_path
        self._config = self.default_config()
        self._loaded = False
        logger.debug("Spock instance created with config_path=%s", config_path)

    @staticmethod
    def default_config() -> dict[str, Any]:
        """Return a new default config dict each time."""
        return {
            "searchlens": {
                "display_errors": False,
                "parse_mode": "terms",
                "bypass_access": False,
                "skip_result_count": True,
            },
            "indexes": {},
        }

    def load(self, config: dict[str, Any] | None = None) -> None:
        """Load configuration.

        Args:
            config: Optional config dict layered over the defaults.

        Priority (highest to lowest):
        1. Environment variables
        2. JSON file
        3. Provided config (if any)
        4. Default values
        """
        if self._loaded:
            logger.debug("Configuration already loaded, skipping reload")
            return

        self._config = self.default_config()

        if config is not None:
            self._merge_sections(config, source="config")

        if self._config_path:
            self._load_from_json()

        self._load_from_env()

        self._loaded = True
        logger.info("Configuration loaded successfully")
        logger.debug(
            "Final config structure: searchlens keys=%s, indexes=%s",
            list(self._config.get("searchlens", {}).keys()),
            list(self._config.get("indexes", {}).keys()),
        )

    def _merge_sections(self, config: Any, *, source: str) -> None:
        """Validate a config mapping and merge its known sections."""
        if not isinstance(config, dict):
            raise ValueError(f"Configuration from {source} must be an object")

        for section in _SECTIONS:
            if section not in config:
                continue
            if not isinstance(config[section], dict):
                raise ValueError(f"'{section}' section must be an object")
            _merge(self._config[section], config[section])

    def _load_from_json(self) -> None:
        """Load configuration from JSON file."""
        config_file = Path(self._config_path)
        if not config_file.exists():
            logger.warning("Config file not found: %s", self._config_path)
            return

        try:
            with open(config_file, encoding="utf-8") as f:
                json_config = json.load(f)
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in config file %s: %s", self._config_path, e)
            raise ValueError(f"Invalid JSON configuration file: {e}") from e

        self._merge_sections(json_config, source=str(config_file))
        logger.info("Loaded configuration from JSON: %s", self._config_path)

    def _load_from_env(self) -> None:
        """Load configuration from environment variables.

        Environment variables follow the pattern:
        SEARCHLENS__<SECTION>__<KEY>__<SUBKEY>...

        Examples:
        - SEARCHLENS__SEARCHLENS__DISPLAY_ERRORS=true
        - SEARCHLENS__INDEXES__ARTICLES__BYPASS_ACCESS=true
        """
        prefix = f"{self.ENV_PREFIX}{self.ENV_SEPARATOR}"

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(prefix):
                continue

            key_path = env_key[len(prefix) :].split(self.ENV_SEPARATOR)

            if len(key_path) < 2:
                logger.warning("Invalid env var format (too short): %s", env_key)
                continue

            section = key_path[0].lower()
            if section not in _SECTIONS:
                logger.warning("Invalid section in env var %s: %s", env_key, section)
                continue
            if section == "indexes" and len(key_path) < 3:
                logger.warning("Index env var too short: %s", env_key)
                continue

            target = self._config[section]
            nested = key_path[1:-1]
            if section == "indexes":
                target = target.setdefault(self._index_key(nested[0]), {})
                nested = nested[1:]
            for key in nested:
                target = target.setdefault(key.lower(), {})
            value = self._parse_env_value(env_value)
            target[key_path[-1].lower()] = value
            logger.debug("Set from env: %s = %s", env_key, value)

    def _index_key(self, index_id: str) -> str:
        """Return the configured key for an index id, ignoring case if needed."""
        indexes = self._config["indexes"]
        if index_id in indexes:
            return index_id
        folded = index_id.casefold()
        for key in indexes:
            if key.casefold() == folded:
                return key
        return index_id

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value, trying JSON first."""
        try:
            return json.loads(value)
        except (json.JSONDecodeError, ValueError):
            return value

    def get_core_config(self, key: str | None = None, default: Any = None) -> Any:
        """Get core configuration.

        Args:
            key: Specific configuration key. If None, returns the whole section.
            default: Default value if key not found.
        """
        if not self._loaded:
            self.load()

        if key is None:
            return deepcopy(self._config.get("searchlens", {}))

        return self._config.get("searchlens", {}).get(key, default)

    def get_index_config(self, index_id: str, key: str | None = None, default: Any = None) -> Any:
        """Get the override configuration of one index.

        Args:
            index_id: Index identifier.
            key: Specific configuration key. If None, returns the whole section.
            default: Default value if key not found.
        """
        if not self._loaded:
            self.load()

        index_config = self._config["indexes"].get(self._index_key(index_id), {})

        if key is None:
            return deepcopy(index_config)

        return index_config.get(key, default)

    def get_setting(self, key: str, index_id: str | None = None, default: Any = None) -> Any:
        """Return a setting, preferring the index override over the core value."""
        if index_id is not None:
            index_config = self.get_index_config(index_id)
            if key in index_config:
                return index_config[key]
        return self.get_core_config(key, default)

    def set_core_config(self, key: str, value: Any) -> None:
        """Set core configuration (runtime only, not persisted)."""
        if not self._loaded:
            self.load()

        self._config["searchlens"][key] = value
        logger.debug("Set core config: %s = %s", key, value)

    def set_index_config(self, index_id: str, key: str, value: Any) -> None:
        """Set an index override (runtime only, not persisted)."""
        if not self._loaded:
            self.load()

        self._config["indexes"].setdefault(self._index_key(index_id), {})[key] = value
        logger.debug("Set index config: %s.%s = %s", index_id, key, value)

    def get_all_config(self) -> dict[str, Any]:
        """Get a deep copy of the complete configuration."""
        if not self._loaded:
            self.load()

        return deepcopy(self._config)

    def reload(self) -> None:
        """Reload configuration from file and environment."""
        self._loaded = False
        self.load()
        logger.info("Configuration reloaded")

    @property
    def config_path(self) -> str | None:
        """Get the configuration file path."""
        return self._config_path

    @property
    def is_loaded(self) -> bool:
        """Check if configuration has been loaded."""
        return self._loaded


ConfigManager = Spock
