"""TelemetryRecorder: bounded log of outbound scheduler calls.

The recorder is an explicitly constructed service (one per engine) rather
than module state. Subscribers are notified after every append without a
payload and pull the current view through `snapshot()`.

Snapshot order: oldest first, most recent last. Consumers that display
newest-first reverse it themselves.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, Tuple

from jobwatch.core.interfaces.observers import ChangeListener, Unsubscribe
from jobwatch.core.managers.observers import ChangeNotifier
from jobwatch.core.models.api_call import ApiCallRecord

DEFAULT_LOG_SIZE = 20
DEFAULT_SNAPSHOT_SIZE = 10


class TelemetryRecorder:
    def __init__(
        self,
        log_size: int = DEFAULT_LOG_SIZE,
        snapshot_size: int = DEFAULT_SNAPSHOT_SIZE,
    ) -> None:
        if snapshot_size > log_size:
            raise ValueError("snapshot_size must not exceed log_size")
        self._log: Deque[ApiCallRecord] = deque(maxlen=log_size)
        self._snapshot_size = snapshot_size
        self._snapshot: Tuple[ApiCallRecord, ...] = ()
        self._notifier = ChangeNotifier("telemetry")

    def record(self, call: ApiCallRecord) -> None:
        """Append call (evicting the oldest past capacity) and notify subscribers."""
        self._log.append(call)
        # Rebuilt eagerly so readers always get the same immutable object between appends
        self._snapshot = tuple(self._log)[-self._snapshot_size:]
        self._notifier.notify()

    def snapshot(self) -> Tuple[ApiCallRecord, ...]:
        """The most recent calls, oldest first."""
        return self._snapshot

    def entries(self) -> Tuple[ApiCallRecord, ...]:
        """The whole retained log, oldest first."""
        return tuple(self._log)

    def subscribe(self, listener: ChangeListener) -> Unsubscribe:
        return self._notifier.subscribe(listener)

    def clear_listeners(self) -> None:
        self._notifier.clear()
