"""
Schema definitions for mountguard.

This module defines the Pydantic models used throughout mountguard:
- PolicyConfig: Which vehicles are monitored and which items are blocked
- ItemRef/ActorSnapshot/VehicleDescriptor: Per-evaluation facts from the host
- PolicyDecision/DenialMessage: The result of policy evaluation

Design Decisions:
    - Models are immutable (frozen=True) so a config snapshot can be shared
      between threads without copying
    - Config fields carry camelCase aliases matching the config document
    - Lists from the config document are deduplicated, order preserved
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


# =============================================================================
# Defaults
# =============================================================================

CONFIG_VERSION = "1.0.3"

DEFAULT_MONITORED_VEHICLE_TYPES: tuple[str, ...] = (
    "minicopter.entity",
    "scraptransporthelicopter",
    "attackhelicopter.entity",
    "rowboat",
    "submarine.solo.entity",
    "submarine.duo.entity",
)

DEFAULT_BLOCKED_ITEMS: tuple[str, ...] = (
    "heavy.plate.helmet",
    "heavy.plate.jacket",
    "heavy.plate.pants",
)


def _dedupe(values: tuple[str, ...], field_name: str) -> tuple[str, ...]:
    """Drop repeated entries, keeping first occurrence order."""
    seen: dict[str, None] = {}
    for value in values:
        if not value.strip():
            msg = f"{field_name} entries must not be blank"
            raise ValueError(msg)
        seen.setdefault(value, None)
    return tuple(seen)


# =============================================================================
# Config Models
# =============================================================================


class PolicyConfig(BaseModel):
    """
    Validated gear-restriction configuration.

    A loaded PolicyConfig is never mutated; reloading produces a new
    instance that replaces the old one wholesale.

    Attributes:
        version: Config document version
        monitored_vehicle_types: Vehicle identifiers subject to the policy,
            matched by substring containment
        blocked_items: Item short names that trigger denials
        require_all_items: True = deny only when every blocked item is worn;
            False = any single blocked item is enough
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    version: str = Field(
        default=CONFIG_VERSION,
        description="Config document version",
    )
    monitored_vehicle_types: tuple[str, ...] = Field(
        default=DEFAULT_MONITORED_VEHICLE_TYPES,
        alias="monitoredVehicleTypes",
        description="Vehicle short prefab names affected by the gear check",
    )
    blocked_items: tuple[str, ...] = Field(
        default=DEFAULT_BLOCKED_ITEMS,
        alias="blockedItems",
        description="Blocked wear item short names",
    )
    require_all_items: bool = Field(
        default=False,
        alias="requireAllItems",
        description="Require all listed wear items to block (false = any listed item blocks)",
    )

    @field_validator("monitored_vehicle_types")
    @classmethod
    def dedupe_vehicle_types(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return _dedupe(v, "monitoredVehicleTypes")

    @field_validator("blocked_items")
    @classmethod
    def dedupe_blocked_items(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return _dedupe(v, "blockedItems")

    @property
    def blocked_item_set(self) -> frozenset[str]:
        """Blocked items as a set for membership checks."""
        return frozenset(self.blocked_items)

    def is_monitored_vehicle(self, type_identifier: str | None) -> bool:
        """
        Check whether a vehicle identifier falls under the policy.

        A vehicle is monitored when any configured type is a substring of
        its identifier, so "rowboat" also covers "rowboat_skin2".
        Matching is case-sensitive.
        """
        if not type_identifier:
            return False
        return any(monitored in type_identifier for monitored in self.monitored_vehicle_types)

    def to_document(self) -> dict[str, Any]:
        """Serialize using the config document's key names."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Host Snapshot Models
# =============================================================================


class ItemRef(BaseModel):
    """
    An item as seen by the policy: its short name plus a display name.

    Attributes:
        short_name: Canonical item identifier (e.g. "heavy.plate.helmet")
        display_name: Human-readable name; falls back to short_name
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    short_name: str = Field(..., min_length=1)
    display_name: str | None = None

    @property
    def label(self) -> str:
        return self.display_name or self.short_name


def _usable_items(values: Any) -> tuple[ItemRef, ...]:
    """
    Keep the worn entries that can name an item.

    Empty slots, blank names and entries of unknown shape can never match a
    blocked item, so they are dropped instead of failing the snapshot.
    """
    items: list[ItemRef] = []
    for value in values:
        if isinstance(value, ItemRef):
            items.append(value)
        elif isinstance(value, str):
            if value.strip():
                items.append(ItemRef(short_name=value))
        elif isinstance(value, Mapping):
            try:
                items.append(ItemRef.model_validate(value))
            except ValidationError:
                continue
    return tuple(items)


class ActorSnapshot(BaseModel):
    """
    Live facts about an actor, built by the host for one evaluation.

    Attributes:
        actor_id: Opaque unique actor identifier
        worn_items: Wear-slot contents in slot order
        has_bypass_capability: Whether the actor is exempt from all rules
        mounted_vehicle_type: Type identifier of the vehicle the actor is
            mounted on, or None when not mounted
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    actor_id: str = Field(..., min_length=1)
    worn_items: tuple[ItemRef, ...] = ()
    has_bypass_capability: bool = False
    mounted_vehicle_type: str | None = None

    @field_validator("actor_id", mode="before")
    @classmethod
    def coerce_actor_id(cls, v: Any) -> Any:
        """Hosts may key actors by number; the id is opaque either way."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("worn_items", mode="before")
    @classmethod
    def coerce_worn_items(cls, v: Any) -> Any:
        """Accept bare short names alongside ItemRef values, dropping unusable slots."""
        if v is None:
            return ()
        if isinstance(v, (list, tuple)):
            return _usable_items(v)
        return v

    @property
    def is_mounted(self) -> bool:
        return self.mounted_vehicle_type is not None


class VehicleDescriptor(BaseModel):
    """The vehicle targeted by a mount attempt."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type_identifier: str


# =============================================================================
# Decision Models
# =============================================================================


class DenialMessage(BaseModel):
    """
    A message the host should deliver to the actor.

    Attributes:
        template_key: Message template identifier (see mountguard.messages)
        args: Positional template arguments
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    template_key: str
    args: tuple[str, ...] = ()


class PolicyDecision(BaseModel):
    """
    Result of evaluating a mount or equip attempt.

    Attributes:
        allowed: Whether the action is permitted
        reason: Human-readable explanation of the decision
        rule_matched: Which rule produced this decision
        message: Feedback for the actor, if any should be shown
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allowed: bool = Field(
        ...,
        description="Whether the action is permitted",
    )
    reason: str = Field(
        ...,
        description="Human-readable explanation of the decision",
    )
    rule_matched: str | None = Field(
        default=None,
        description="Which rule caused this decision",
    )
    message: DenialMessage | None = Field(
        default=None,
        description="Message to deliver to the actor",
    )

    @classmethod
    def allow(cls, reason: str, rule: str | None = None) -> "PolicyDecision":
        """Create an ALLOW decision."""
        return cls(allowed=True, reason=reason, rule_matched=rule)

    @classmethod
    def deny(
        cls,
        reason: str,
        rule: str | None = None,
        message: DenialMessage | None = None,
    ) -> "PolicyDecision":
        """Create a DENY decision."""
        return cls(allowed=False, reason=reason, rule_matched=rule, message=message)
