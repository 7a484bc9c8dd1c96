"""Listener registry shared by the observable components.

`JobStore`, `TelemetryRecorder` and `HealthMonitor` each own a
`ChangeNotifier` and forward `subscribe` to it. Notification is synchronous,
in registration order, exactly once per change and carries no payload.
"""

import logging
from typing import List

from jobwatch.core.interfaces.observers import ChangeListener, Unsubscribe


logger = logging.getLogger(__name__)


class ChangeNotifier:
    """Registry of payload-less change listeners."""

    def __init__(self, name: str = "state"):
        self._name = name
        self._listeners: List["_Registration"] = []

    def subscribe(self, listener: ChangeListener) -> Unsubscribe:
        """Register listener; the returned callable removes this registration.

        The same callable may be subscribed twice; each registration is
        notified and removed independently.
        """
        token = _Registration(listener)
        self._listeners.append(token)

        def unsubscribe() -> None:
            # Identity comparison so one registration is removed, not every equal callable
            self._listeners = [entry for entry in self._listeners if entry is not token]

        return unsubscribe

    def notify(self) -> None:
        """Invoke every current listener once, in registration order.

        A failing listener is logged and does not stop the remaining ones.
        """
        # Iterate over a copy: listeners may unsubscribe while being notified
        for entry in list(self._listeners):
            try:
                entry()
            except Exception:
                logger.exception(f"[observer:{self._name}] listener raised during notification")

    def clear(self) -> None:
        self._listeners = []

    def __len__(self) -> int:
        return len(self._listeners)


class _Registration:
    """Wraps a listener so each subscription has its own identity."""

    __slots__ = ("listener",)

    def __init__(self, listener: ChangeListener):
        self.listener = listener

    def __call__(self) -> None:
        self.listener()
