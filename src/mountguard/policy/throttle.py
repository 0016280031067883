"""
Per-actor notification throttle.

Equip attempts can arrive rapid-fire (repeated key presses), so denial
feedback for them is rate-limited per actor. The throttle only decides
whether to *message*; the deny itself is never throttled.
"""

import threading

from mountguard.logger import logger

# Seconds between two equip-denial messages to the same actor
COOLDOWN_SECONDS = 2.0


class NotificationThrottle:
    """
    Cooldown tracker keyed by actor id.

    Timestamps are whatever clock the caller uses (the host adapter passes
    time.monotonic()); only differences are compared.

    Attributes:
        cooldown: Minimum seconds between two notifications to one actor
    """

    def __init__(self, cooldown: float = COOLDOWN_SECONDS) -> None:
        self.cooldown = cooldown
        self._last_notified: dict[str, float] = {}
        self._lock = threading.Lock()

    def should_notify(self, actor_id: str, now: float) -> bool:
        """
        Decide whether the actor should get a message, recording it if so.

        Returns True and stores `now` when the actor has no entry or the
        cooldown has elapsed since the stored time. Otherwise returns False
        and leaves the entry untouched, so calls inside the window never
        push the timer forward.
        """
        with self._lock:
            last = self._last_notified.get(actor_id)
            # A clock reading behind `last` gives a negative delta and is refused
            if last is not None and now - last < self.cooldown:
                return False
            self._last_notified[actor_id] = now
            return True

    def last_notified_at(self, actor_id: str) -> float | None:
        """Timestamp of the last notification sent to an actor."""
        with self._lock:
            return self._last_notified.get(actor_id)

    def clear(self) -> None:
        """Forget all actors (engine teardown)."""
        with self._lock:
            count = len(self._last_notified)
            self._last_notified.clear()
        logger.debug("Notification throttle cleared", actors=count)

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_notified)
