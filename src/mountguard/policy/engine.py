"""
Policy Engine for mountguard.

Evaluates the two gear-restriction rules against a snapshot of the actor:

    Mount rule: deny mounting a monitored vehicle while wearing blocked
    items (any of them, or all of them when require_all_items is set).

    Equip rule: deny equipping a blocked item while mounted on a monitored
    vehicle.

Design Principles:
    - Permissive on missing data: no actor, vehicle or item means no rule
      applies, so the action is allowed
    - Total: every call returns a PolicyDecision; unexpected errors are
      logged and turned into ALLOW
    - Snapshot reads: one PolicyConfig reference is taken per evaluation,
      so a concurrent reload never produces a mixed decision

Mount denials always carry a message. Equip denials carry one only when
the NotificationThrottle lets it through.
"""

from mountguard.config import ConfigStore
from mountguard.logger import logger
from mountguard.messages import MSG_EQUIP_RESTRICTED, MSG_MOUNT_RESTRICTED
from mountguard.policy.throttle import NotificationThrottle
from mountguard.schema import (
    ActorSnapshot,
    DenialMessage,
    ItemRef,
    PolicyConfig,
    PolicyDecision,
    VehicleDescriptor,
)


class PolicyEngine:
    """
    Central evaluator for mount and equip attempts.

    Usage:
        engine = PolicyEngine(ConfigStore(config=PolicyConfig()))
        decision = engine.evaluate_mount_attempt(actor, vehicle)
        if not decision.allowed and decision.message:
            # deliver decision.message to the actor

    Attributes:
        config_store: Source of the active PolicyConfig
        throttle: Rate limiter for equip-denial messages
    """

    def __init__(
        self,
        config_store: ConfigStore,
        throttle: NotificationThrottle | None = None,
    ) -> None:
        """
        Initialize the policy engine.

        Args:
            config_store: Store holding the config to enforce
            throttle: Notification throttle (a fresh one if not provided)
        """
        self.config_store = config_store
        self.throttle = throttle if throttle is not None else NotificationThrottle()

    @property
    def config(self) -> PolicyConfig:
        return self.config_store.current

    # =========================================================================
    # Mount Attempts
    # =========================================================================

    def evaluate_mount_attempt(
        self,
        actor: ActorSnapshot | None,
        vehicle: VehicleDescriptor | None,
    ) -> PolicyDecision:
        """
        Evaluate an actor trying to mount a vehicle.

        Checks, in order:
        1. Bypass capability allows everything
        2. Unmonitored vehicles are allowed
        3. Actors wearing no blocked items are allowed
        4. In require-all mode, wearing only part of the set is allowed
        5. Otherwise deny, listing the blocked items being worn

        Args:
            actor: Snapshot of the mounting actor
            vehicle: The vehicle being mounted

        Returns:
            PolicyDecision; denials always include a message
        """
        if actor is None or vehicle is None:
            return PolicyDecision.allow("No actor or vehicle", rule="missing_input")

        try:
            decision = self._evaluate_mount(actor, vehicle, self.config)
        except Exception:
            logger.exception(
                "Mount evaluation failed, allowing",
                actor_id=actor.actor_id,
                vehicle=vehicle.type_identifier,
            )
            return PolicyDecision.allow("Evaluation error", rule="evaluation_error")

        self._log_decision("mount", actor.actor_id, decision)
        return decision

    def _evaluate_mount(
        self,
        actor: ActorSnapshot,
        vehicle: VehicleDescriptor,
        config: PolicyConfig,
    ) -> PolicyDecision:
        if actor.has_bypass_capability:
            return PolicyDecision.allow("Actor has bypass capability", rule="bypass")

        if not config.is_monitored_vehicle(vehicle.type_identifier):
            return PolicyDecision.allow(
                f"Vehicle not monitored: {vehicle.type_identifier}",
                rule="monitored_vehicle_types",
            )

        worn = self._worn_blocked_items(actor, config)
        if not worn:
            return PolicyDecision.allow("No blocked items worn", rule="blocked_items")

        if config.require_all_items and len(worn) < len(config.blocked_items):
            return PolicyDecision.allow(
                f"Wearing {len(worn)} of {len(config.blocked_items)} blocked items",
                rule="require_all_items",
            )

        names = [item.label for item in worn]
        return PolicyDecision.deny(
            f"Wearing blocked items: {', '.join(item.short_name for item in worn)}",
            rule="require_all_items" if config.require_all_items else "blocked_items",
            message=DenialMessage(
                template_key=MSG_MOUNT_RESTRICTED,
                args=("\n".join(names),),
            ),
        )

    def _worn_blocked_items(
        self,
        actor: ActorSnapshot,
        config: PolicyConfig,
    ) -> list[ItemRef]:
        """
        Blocked items the actor is wearing, in wear-slot order.

        Matching is by short name; each short name is reported once so the
        require-all count compares distinct items.
        """
        blocked = config.blocked_item_set
        seen: set[str] = set()
        worn: list[ItemRef] = []
        for item in actor.worn_items:
            if item.short_name in blocked and item.short_name not in seen:
                seen.add(item.short_name)
                worn.append(item)
        return worn

    # =========================================================================
    # Equip Attempts
    # =========================================================================

    def evaluate_equip_attempt(
        self,
        actor: ActorSnapshot | None,
        candidate_item: ItemRef | str | None,
        now: float,
    ) -> PolicyDecision:
        """
        Evaluate an actor trying to equip an item.

        Checks, in order:
        1. Bypass capability allows everything
        2. Items outside the blocked set are allowed
        3. Actors that are not mounted are allowed
        4. Actors mounted on unmonitored vehicles are allowed
        5. Otherwise deny; a message is attached only if the actor is
           outside the notification cooldown

        Args:
            actor: Snapshot of the equipping actor
            candidate_item: Item being equipped (bare short names accepted)
            now: Current time on the caller's clock, for throttling

        Returns:
            PolicyDecision; denials may or may not include a message
        """
        if actor is None or not candidate_item:
            return PolicyDecision.allow("No actor or item", rule="missing_input")

        if isinstance(candidate_item, str):
            candidate_item = ItemRef(short_name=candidate_item)

        try:
            decision = self._evaluate_equip(actor, candidate_item, now, self.config)
        except Exception:
            logger.exception(
                "Equip evaluation failed, allowing",
                actor_id=actor.actor_id,
                item=candidate_item.short_name,
            )
            return PolicyDecision.allow("Evaluation error", rule="evaluation_error")

        self._log_decision("equip", actor.actor_id, decision)
        return decision

    def _evaluate_equip(
        self,
        actor: ActorSnapshot,
        item: ItemRef,
        now: float,
        config: PolicyConfig,
    ) -> PolicyDecision:
        if actor.has_bypass_capability:
            return PolicyDecision.allow("Actor has bypass capability", rule="bypass")

        if item.short_name not in config.blocked_item_set:
            return PolicyDecision.allow(
                f"Item not blocked: {item.short_name}",
                rule="blocked_items",
            )

        if not actor.is_mounted:
            return PolicyDecision.allow("Actor is not mounted", rule="not_mounted")

        if not config.is_monitored_vehicle(actor.mounted_vehicle_type):
            return PolicyDecision.allow(
                f"Vehicle not monitored: {actor.mounted_vehicle_type}",
                rule="monitored_vehicle_types",
            )

        reason = f"Cannot equip {item.short_name} while mounted on {actor.mounted_vehicle_type}"
        if not self.throttle.should_notify(actor.actor_id, now):
            return PolicyDecision.deny(reason, rule="blocked_while_mounted")

        return PolicyDecision.deny(
            reason,
            rule="blocked_while_mounted",
            message=DenialMessage(template_key=MSG_EQUIP_RESTRICTED, args=(item.label,)),
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def reset(self) -> None:
        """Clear notification state (engine teardown)."""
        self.throttle.clear()

    def _log_decision(self, attempt: str, actor_id: str, decision: PolicyDecision) -> None:
        if decision.allowed:
            logger.debug(
                "Attempt allowed",
                attempt=attempt,
                actor_id=actor_id,
                rule=decision.rule_matched,
            )
        else:
            logger.info(
                "Attempt denied",
                attempt=attempt,
                actor_id=actor_id,
                rule=decision.rule_matched,
                reason=decision.reason,
                notified=decision.message is not None,
            )
