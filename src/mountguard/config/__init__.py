"""
Configuration for mountguard.

Loads, validates and persists the gear-restriction PolicyConfig.
Invalid documents fall back to the built-in defaults; save failures are
raised as ConfigPersistError.
"""

from mountguard.config.store import ConfigStore, parse_config

__all__ = [
    "ConfigStore",
    "parse_config",
]
