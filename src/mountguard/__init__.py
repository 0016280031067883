"""
mountguard - Gear restrictions for vehicle mounting.

Blocks actors wearing configured items (heavy armor by default) from
mounting monitored vehicles, and blocks equipping those items while
mounted. It provides:
- A validated, hot-reloadable YAML configuration (ALL/ANY item policy)
- A policy engine returning allow/deny decisions with message payloads
- Per-actor rate limiting for repeated equip-denial messages
- A host adapter with lifecycle hooks and a diagnostic CLI

Example usage:
    $ mountguard init-config mountguard.yaml
    $ mountguard check-mount minicopter.entity -w heavy.plate.helmet
"""

__version__ = "1.0.3"
__author__ = "mountguard Contributors"

__all__ = [
    "__version__",
    "__author__",
]
