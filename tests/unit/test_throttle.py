"""
Unit tests for the notification throttle.

Tests cover:
- First notification and cooldown window
- Timer is not extended by refused calls
- Per-actor isolation
- Clock going backwards
- Concurrent access for a single actor
"""

import threading

from mountguard.policy import COOLDOWN_SECONDS, NotificationThrottle


class TestShouldNotify:
    """Tests for should_notify."""

    def test_default_cooldown(self) -> None:
        assert NotificationThrottle().cooldown == COOLDOWN_SECONDS == 2.0

    def test_first_call_notifies(self) -> None:
        throttle = NotificationThrottle()
        assert throttle.should_notify("a", 5.0) is True
        assert throttle.last_notified_at("a") == 5.0

    def test_within_window_refused(self) -> None:
        """true, then false inside the window, then true after it."""
        throttle = NotificationThrottle(cooldown=2.0)
        assert throttle.should_notify("a", 0.0) is True
        assert throttle.should_notify("a", 1.0) is False
        assert throttle.should_notify("a", 2.0) is True

    def test_refused_call_does_not_move_timer(self) -> None:
        throttle = NotificationThrottle(cooldown=2.0)
        throttle.should_notify("a", 0.0)
        throttle.should_notify("a", 1.9)
        assert throttle.last_notified_at("a") == 0.0
        assert throttle.should_notify("a", 2.0) is True

    def test_actors_are_independent(self) -> None:
        throttle = NotificationThrottle()
        assert throttle.should_notify("a", 0.0) is True
        assert throttle.should_notify("b", 0.5) is True
        assert len(throttle) == 2

    def test_clock_going_backwards_never_rewinds(self) -> None:
        throttle = NotificationThrottle(cooldown=2.0)
        throttle.should_notify("a", 10.0)
        assert throttle.should_notify("a", 3.0) is False
        assert throttle.last_notified_at("a") == 10.0

    def test_unknown_actor_has_no_entry(self) -> None:
        assert NotificationThrottle().last_notified_at("nobody") is None


class TestClear:
    """Tests for clear()."""

    def test_clear_resets_state(self) -> None:
        throttle = NotificationThrottle()
        throttle.should_notify("a", 0.0)
        throttle.clear()
        assert len(throttle) == 0
        assert throttle.should_notify("a", 0.1) is True


class TestConcurrency:
    """The check-then-record sequence is atomic per call."""

    def test_only_one_thread_wins(self) -> None:
        throttle = NotificationThrottle(cooldown=2.0)
        results: list[bool] = []
        results_lock = threading.Lock()
        barrier = threading.Barrier(16)

        def worker() -> None:
            barrier.wait()
            outcome = throttle.should_notify("a", 0.0)
            with results_lock:
                results.append(outcome)

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1
        assert results.count(False) == 15
