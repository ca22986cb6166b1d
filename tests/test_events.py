"""Unit tests for the change notifier.

Tests cover:
- Listener registration and removal
- Synchronous dispatch in registration order
- Listener exception isolation
- Changing subscriptions during dispatch
- Disposal
"""

import logging

import pytest

from schemaform.events import ChangeNotifier


class TestChangeNotifierSubscriptions:
    """Test listener registration."""

    def test_add_listener(self):
        """Registered listeners are invoked on notify."""
        notifier = ChangeNotifier()
        calls = []
        notifier.add_listener(lambda: calls.append(1))
        notifier.notify_listeners()
        assert calls == [1]

    def test_listeners_called_in_registration_order(self):
        """Dispatch follows registration order."""
        notifier = ChangeNotifier()
        order = []
        notifier.add_listener(lambda: order.append("first"))
        notifier.add_listener(lambda: order.append("second"))
        notifier.add_listener(lambda: order.append("third"))
        notifier.notify_listeners()
        assert order == ["first", "second", "third"]

    def test_remove_listener(self):
        """Removed listeners are no longer invoked."""
        notifier = ChangeNotifier()
        calls = []

        def listener():
            calls.append(1)

        notifier.add_listener(listener)
        notifier.remove_listener(listener)
        notifier.notify_listeners()
        assert calls == []
        assert notifier.has_listeners is False

    def test_remove_unknown_listener_is_ignored(self):
        """Removing an unregistered listener does nothing."""
        notifier = ChangeNotifier()
        notifier.remove_listener(lambda: None)
        assert notifier.listener_count() == 0

    def test_listener_registered_twice(self):
        """A listener registered twice fires twice until removed once."""
        notifier = ChangeNotifier()
        calls = []

        def listener():
            calls.append(1)

        notifier.add_listener(listener)
        notifier.add_listener(listener)
        notifier.notify_listeners()
        assert len(calls) == 2

        notifier.remove_listener(listener)
        notifier.notify_listeners()
        assert len(calls) == 3

    def test_listener_count(self):
        """listener_count reflects registrations."""
        notifier = ChangeNotifier()
        assert notifier.listener_count() == 0
        notifier.add_listener(lambda: None)
        notifier.add_listener(lambda: None)
        assert notifier.listener_count() == 2
        assert notifier.has_listeners is True


class TestChangeNotifierDispatch:
    """Test dispatch behavior."""

    def test_listener_exceptions_are_isolated(self, caplog):
        """A failing listener is logged and does not stop the others."""
        notifier = ChangeNotifier()
        calls = []

        def broken():
            raise RuntimeError("boom")

        notifier.add_listener(broken)
        notifier.add_listener(lambda: calls.append("ok"))

        with caplog.at_level(logging.ERROR, logger="schemaform.events"):
            notifier.notify_listeners()

        assert calls == ["ok"]
        assert "Change listener" in caplog.text

    def test_listener_removing_itself_during_dispatch(self):
        """Unsubscribing during dispatch does not skip other listeners."""
        notifier = ChangeNotifier()
        calls = []

        def once():
            calls.append("once")
            notifier.remove_listener(once)

        notifier.add_listener(once)
        notifier.add_listener(lambda: calls.append("always"))

        notifier.notify_listeners()
        notifier.notify_listeners()
        assert calls == ["once", "always", "always"]

    def test_listener_added_during_dispatch_fires_next_time(self):
        """Listeners added during dispatch start with the next notification."""
        notifier = ChangeNotifier()
        calls = []

        def late():
            calls.append("late")

        def adder():
            calls.append("adder")
            if late not in notifier._listeners:
                notifier.add_listener(late)

        notifier.add_listener(adder)
        notifier.notify_listeners()
        assert calls == ["adder"]
        notifier.notify_listeners()
        assert calls == ["adder", "adder", "late"]


class TestChangeNotifierDispose:
    """Test disposal."""

    def test_dispose_drops_listeners(self):
        """Disposed notifiers no longer notify."""
        notifier = ChangeNotifier()
        calls = []
        notifier.add_listener(lambda: calls.append(1))
        notifier.dispose()
        notifier.notify_listeners()
        assert calls == []

    def test_add_after_dispose_raises(self):
        """Registering on a disposed notifier is an error."""
        notifier = ChangeNotifier()
        notifier.dispose()
        with pytest.raises(RuntimeError):
            notifier.add_listener(lambda: None)
