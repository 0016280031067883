"""
Policy Engine module for mountguard.

Key concepts:
    - PolicyDecision: The result of evaluating an attempt (ALLOW/DENY + reason)
    - PolicyEngine: Evaluates mount and equip attempts against the config
    - NotificationThrottle: Rate-limits equip-denial messages per actor

The engine is a convenience restriction, not a security boundary, so it
is permissive on missing data and never raises to its caller.
"""

from mountguard.policy.engine import PolicyEngine
from mountguard.policy.throttle import COOLDOWN_SECONDS, NotificationThrottle

__all__ = [
    "COOLDOWN_SECONDS",
    "NotificationThrottle",
    "PolicyEngine",
]
