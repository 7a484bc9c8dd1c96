"""Observer protocols for client-side state changes.

Notifications are payload-less: a listener is told that something changed
and re-reads the current state from its source (`JobStore.list()`,
`TelemetryRecorder.snapshot()`, `HealthMonitor.health`). Listeners therefore
never hold a stale copy of data captured at subscription time.
"""

from typing import Callable, Protocol


class ChangeListener(Protocol):
    """Callback invoked synchronously after every state change."""

    def __call__(self) -> None:
        ...


# Returned by subscribe(); calling it removes the listener
Unsubscribe = Callable[[], None]

