"""Change subscription handles."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable

from guarantee_tracker.models import ChangeEvent

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[ChangeEvent], None]


class Subscription(ABC):
    """Handle on a live change subscription.

    Events are delivered to the callback only from ``poll()``, on the
    caller's thread and in arrival order. The owner must call ``release()``
    when it is torn down; the handle also works as a context manager.
    """

    def __init__(self, callback: ChangeCallback) -> None:
        self._callback = callback
        self._released = False

    @property
    def active(self) -> bool:
        return not self._released

    def poll(self, timeout: float = 0.0) -> int:
        """Deliver pending events.

        Parameters
        ----------
        timeout : float
            Seconds to wait for the first event (0 returns immediately).

        Returns
        -------
        int
            Number of events delivered.
        """
        if self._released:
            return 0
        events = self._fetch(timeout)
        for event in events:
            if self._released:
                break
            self._callback(event)
        return len(events)

    def release(self) -> None:
        """Stop the subscription and free its resources. Idempotent."""
        if self._released:
            return
        self._released = True
        self._close()
        logger.debug("Released %s", type(self).__name__)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    @abstractmethod
    def _fetch(self, timeout: float) -> list[ChangeEvent]:
        """Collect events that arrived since the last poll."""

    @abstractmethod
    def _close(self) -> None:
        """Free the underlying channel."""


class QueueSubscription(Subscription):
    """Subscription fed by in-process publishers."""

    def __init__(
        self,
        callback: ChangeCallback,
        on_release: Callable[[QueueSubscription], None] | None = None,
    ) -> None:
        super().__init__(callback)
        self._pending: deque[ChangeEvent] = deque()
        self._on_release = on_release

    def push(self, event: ChangeEvent) -> None:
        if self.active:
            self._pending.append(event)

    def _fetch(self, timeout: float) -> list[ChangeEvent]:
        events = list(self._pending)
        self._pending.clear()
        return events

    def _close(self) -> None:
        self._pending.clear()
        if self._on_release is not None:
            self._on_release(self)
