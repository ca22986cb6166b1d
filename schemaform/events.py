"""Change notification for form value controllers.

ChangeNotifier follows the observer pattern: owners register zero-argument
callbacks and the notifier invokes them synchronously, in registration order,
after every notifying mutation. There is no queuing and no reordering: by the
time a listener runs, the mutation that triggered it has completed.
"""

import logging
from typing import Callable, List

from typing_extensions import TypeAlias

logger = logging.getLogger(__name__)

Listener: TypeAlias = Callable[[], None]
"""Type alias for change listener callbacks.

Listeners take no arguments; they read the new state from the notifier.
"""


class ChangeNotifier:
    """Listener registry with synchronous dispatch.

    Features:
    - Dispatch in registration order
    - Listeners may add or remove listeners while being notified (the change
      takes effect from the next notification)
    - Error isolation (a failing listener is logged and does not prevent the
      others from running, nor does it reach the mutating caller)

    Examples:
        >>> notifier = ChangeNotifier()
        >>> calls = []
        >>> notifier.add_listener(lambda: calls.append("changed"))
        >>> notifier.notify_listeners()
        >>> calls
        ['changed']
    """

    def __init__(self):
        """Initialize with an empty listener registry."""
        self._listeners: List[Listener] = []
        self._disposed = False

    def add_listener(self, listener: Listener) -> None:
        """Register ``listener``; registering it twice makes it fire twice.

        Raises:
            RuntimeError: If the notifier has been disposed
        """
        if self._disposed:
            raise RuntimeError(f"{type(self).__name__} was used after being disposed")
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        """Unregister one registration of ``listener``.

        Removing a listener that was never registered is ignored.
        """
        try:
            self._listeners.remove(listener)
        except ValueError:
            logger.debug("Ignoring removal of unregistered listener %r", listener)

    @property
    def has_listeners(self) -> bool:
        return bool(self._listeners)

    def listener_count(self) -> int:
        return len(self._listeners)

    def notify_listeners(self) -> None:
        """Invoke every registered listener synchronously."""
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Change listener %r raised", listener)

    def dispose(self) -> None:
        """Drop all listeners; further registrations raise RuntimeError."""
        self._listeners.clear()
        self._disposed = True


__all__ = [
    "ChangeNotifier",
    "Listener",
]
