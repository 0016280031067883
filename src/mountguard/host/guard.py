"""
Host adapter for mountguard.

GearGuard is the piece a host plugin instantiates. It turns raw hook
arguments into snapshots, asks the PolicyEngine for a decision, delivers
any denial message and hands the decision back so the host can block the
action.

Lifecycle:
    guard = GearGuard(ConfigStore("mountguard.yaml"), permissions, sink)
    guard.on_start()       # load config, log summary
    ...                    # can_mount / can_wear from host hooks
    guard.on_stop()        # clear throttle state

Collaborator failures (permission lookups, message delivery) are logged and
absorbed here; they never block or break the host's event handling.
"""

import time
from collections.abc import Callable, Iterable
from typing import Any

from mountguard.config import ConfigStore
from mountguard.host.base import PERMISSION_BYPASS, MessageSink, PermissionChecker
from mountguard.logger import logger
from mountguard.policy import NotificationThrottle, PolicyEngine
from mountguard.schema import (
    ActorSnapshot,
    ItemRef,
    PolicyConfig,
    PolicyDecision,
    VehicleDescriptor,
)


class GearGuard:
    """
    Wires host events to the PolicyEngine.

    Attributes:
        store: ConfigStore holding the active policy config
        engine: The PolicyEngine making decisions
        permissions: Bypass permission lookup
        sink: Message delivery for denials
    """

    def __init__(
        self,
        store: ConfigStore,
        permissions: PermissionChecker,
        sink: MessageSink,
        clock: Callable[[], float] = time.monotonic,
        throttle: NotificationThrottle | None = None,
    ) -> None:
        """
        Initialize the guard.

        Args:
            store: Config store (its file, if any, is read in on_start)
            permissions: Permission lookup for the bypass permission
            sink: Where denial messages go
            clock: Time source for equip-denial throttling
            throttle: Notification throttle (a fresh one if not provided)
        """
        self.store = store
        self.permissions = permissions
        self.sink = sink
        self.clock = clock
        self.engine = PolicyEngine(store, throttle)

    def __enter__(self) -> "GearGuard":
        """Start the guard as a context manager."""
        self.on_start()
        return self

    def __exit__(self, *args: Any) -> None:
        """Stop the guard."""
        self.on_stop()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def on_start(self) -> PolicyConfig:
        """
        Load the config and report what is being enforced.

        Raises:
            ConfigPersistError: If defaults had to be written and that failed
        """
        config = self.store.load_file()
        logger.info(
            "Loaded configuration",
            vehicles=len(config.monitored_vehicle_types),
            items=len(config.blocked_items),
            require_all=config.require_all_items,
        )
        return config

    def on_stop(self) -> None:
        """Drop all notification state."""
        self.engine.reset()

    # =========================================================================
    # Host Hooks
    # =========================================================================

    def can_mount(
        self,
        actor_id: str | int | None,
        worn_items: Iterable[ItemRef | str] | None,
        vehicle_type: str | None,
    ) -> PolicyDecision:
        """
        Handle a mount attempt.

        Args:
            actor_id: The mounting actor
            worn_items: Contents of the actor's wear slots
            vehicle_type: Short identifier of the vehicle (None if the
                mountable is not part of a vehicle)

        Returns:
            The decision; a denial message has already been delivered
        """
        if vehicle_type is None:
            return PolicyDecision.allow("Mountable is not a vehicle", rule="missing_input")

        actor = self._snapshot(actor_id, worn_items, None)
        decision = self.engine.evaluate_mount_attempt(
            actor,
            VehicleDescriptor(type_identifier=vehicle_type),
        )
        self._deliver(actor, decision)
        return decision

    def can_wear(
        self,
        actor_id: str | int | None,
        item: ItemRef | str | None,
        mounted_vehicle_type: str | None,
    ) -> PolicyDecision:
        """
        Handle an equip attempt.

        Args:
            actor_id: The equipping actor
            item: The item going into a wear slot
            mounted_vehicle_type: Type of the vehicle the actor is mounted
                on, or None when not mounted

        Returns:
            The decision; a denial message may have been delivered
        """
        actor = self._snapshot(actor_id, (), mounted_vehicle_type)
        decision = self.engine.evaluate_equip_attempt(actor, item, self.clock())
        self._deliver(actor, decision)
        return decision

    # =========================================================================
    # Helpers
    # =========================================================================

    def has_bypass(self, actor_id: str) -> bool:
        """Bypass lookup; an unavailable permission system means no bypass."""
        try:
            return bool(self.permissions.has_permission(actor_id, PERMISSION_BYPASS))
        except Exception as e:
            logger.warning("Permission lookup failed, assuming no bypass", actor_id=actor_id, error=str(e))
            return False

    def _snapshot(
        self,
        actor_id: str | int | None,
        worn_items: Iterable[ItemRef | str] | None,
        mounted_vehicle_type: str | None,
    ) -> ActorSnapshot | None:
        if actor_id is None or actor_id == "":
            return None

        actor_id = str(actor_id)
        return ActorSnapshot(
            actor_id=actor_id,
            worn_items=tuple(worn_items or ()),
            has_bypass_capability=self.has_bypass(actor_id),
            mounted_vehicle_type=mounted_vehicle_type,
        )

    def _deliver(self, actor: ActorSnapshot | None, decision: PolicyDecision) -> None:
        if actor is None or decision.message is None:
            return
        try:
            self.sink.deliver(actor.actor_id, decision.message.template_key, decision.message.args)
        except Exception as e:
            logger.warning(
                "Message delivery failed",
                actor_id=actor.actor_id,
                template=decision.message.template_key,
                error=str(e),
            )
