"""
Host integration for mountguard.

Provides:
- PermissionChecker / MessageSink: interfaces the host implements
- StaticPermissions / CatalogMessageSink: ready-made implementations
- GearGuard: lifecycle and hook adapter around the PolicyEngine
"""

from mountguard.host.base import (
    PERMISSION_BYPASS,
    CatalogMessageSink,
    MessageSink,
    PermissionChecker,
    StaticPermissions,
)
from mountguard.host.guard import GearGuard

__all__ = [
    "CatalogMessageSink",
    "GearGuard",
    "MessageSink",
    "PERMISSION_BYPASS",
    "PermissionChecker",
    "StaticPermissions",
]
