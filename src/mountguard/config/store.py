"""
Config storage for mountguard.

The ConfigStore owns the current PolicyConfig snapshot and the YAML file it
is persisted to.

Design Principles:
    - Snapshots: readers take one PolicyConfig reference per evaluation;
      reload replaces the reference, never the fields
    - Recover locally: an invalid document is logged and replaced with
      defaults instead of failing the host
    - Surface writes: a failed save raises ConfigPersistError, no retries

File format (YAML, camelCase keys):
    version: 1.0.3
    monitoredVehicleTypes: [minicopter.entity, rowboat]
    blockedItems: [heavy.plate.helmet]
    requireAllItems: false
"""

import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from mountguard.errors import ConfigInvalidError, ConfigPersistError
from mountguard.logger import logger
from mountguard.schema import PolicyConfig


def parse_config(raw: Any, path: Path | str | None = None) -> PolicyConfig:
    """
    Parse a raw config document into a PolicyConfig.

    Args:
        raw: A mapping, YAML text, or an existing PolicyConfig
        path: Source file, used only for error context

    Returns:
        Validated PolicyConfig (missing fields take defaults)

    Raises:
        ConfigInvalidError: If the document is not a mapping or fails validation
    """
    source = str(path) if path is not None else None

    if isinstance(raw, PolicyConfig):
        return raw

    if isinstance(raw, str):
        try:
            raw = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigInvalidError(validation_error=str(e), path=source) from e

    if not isinstance(raw, Mapping):
        raise ConfigInvalidError(
            validation_error=f"expected a mapping, got {type(raw).__name__}",
            path=source,
        )

    try:
        return PolicyConfig.model_validate(dict(raw))
    except ValidationError as e:
        raise ConfigInvalidError(validation_error=str(e), path=source) from e


class ConfigStore:
    """
    Holds the active PolicyConfig and persists it as YAML.

    Usage:
        store = ConfigStore("mountguard.yaml")
        store.load_file()
        config = store.current

    Attributes:
        path: YAML file backing this store (None = in-memory only)
    """

    def __init__(
        self,
        path: Path | str | None = None,
        config: PolicyConfig | None = None,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self._lock = threading.Lock()
        self._config = config if config is not None else PolicyConfig()

    @property
    def current(self) -> PolicyConfig:
        """The active config snapshot."""
        return self._config

    def _install(self, config: PolicyConfig) -> None:
        with self._lock:
            self._config = config

    def load(self, raw: Any) -> PolicyConfig:
        """
        Parse a raw document and make it the active config.

        Invalid documents are logged and replaced by the built-in defaults.

        Args:
            raw: A mapping, YAML text, or PolicyConfig

        Returns:
            The config that is now active
        """
        try:
            config = parse_config(raw, self.path)
        except ConfigInvalidError as e:
            logger.warning(
                "Configuration is invalid, using defaults",
                path=e.path,
                error=e.validation_error,
            )
            config = PolicyConfig()

        self._install(config)
        return config

    def load_file(self, write_defaults: bool = True) -> PolicyConfig:
        """
        Load the config file into the store.

        A missing, unreadable or invalid file is replaced by defaults; with
        write_defaults the defaults are also saved back to the file. A valid
        file is never rewritten.

        Raises:
            ConfigPersistError: If defaults had to be written and saving failed
        """
        if self.path is None:
            logger.debug("No config path set, keeping in-memory config")
            return self._config

        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("Config file missing, using defaults", path=str(self.path))
            return self._install_defaults(write_defaults)
        except OSError as e:
            logger.warning("Config file unreadable, using defaults", path=str(self.path), error=str(e))
            return self._install_defaults(write_defaults)

        try:
            config = parse_config(text, self.path)
        except ConfigInvalidError as e:
            logger.warning(
                "Configuration file is invalid, using defaults",
                path=e.path,
                error=e.validation_error,
            )
            return self._install_defaults(write_defaults)

        self._install(config)
        return config

    def reload(self) -> PolicyConfig:
        """
        Re-read the config file and swap in the new snapshot.

        Unlike load_file, a broken file is not overwritten with defaults,
        so an edit in progress is never clobbered.
        """
        config = self.load_file(write_defaults=False)
        logger.info(
            "Configuration reloaded",
            vehicles=len(config.monitored_vehicle_types),
            items=len(config.blocked_items),
            require_all=config.require_all_items,
        )
        return config

    def save(self, config: PolicyConfig | None = None) -> None:
        """
        Write a config to the store's file and make it active.

        The config becomes active only once the file has been replaced, so a
        failed save leaves both the file and the active snapshot unchanged.

        Args:
            config: Config to save (defaults to the current snapshot)

        Raises:
            ConfigPersistError: If there is no path or the write fails
        """
        if config is None:
            config = self._config

        if self.path is None:
            raise ConfigPersistError(underlying_error="no config path configured")

        try:
            text = yaml.safe_dump(config.to_document(), sort_keys=False, allow_unicode=True)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            tmp_path.write_text(text, encoding="utf-8")
            tmp_path.replace(self.path)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigPersistError(underlying_error=str(e), path=str(self.path)) from e

        self._install(config)
        logger.debug("Configuration saved", path=str(self.path))

    def _install_defaults(self, write: bool) -> PolicyConfig:
        config = PolicyConfig()
        self._install(config)
        if write:
            self.save(config)
        return config
