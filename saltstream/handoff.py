"""
Handoff queue between the ingestion thread and the polling thread.

Single producer, single consumer, unbounded and first-in-first-out. The
consumer side never blocks. Capacity is unbounded: a consumer that polls
slower than events arrive makes memory grow without limit, so the queue logs
a warning once the backlog crosses ``backlog_warning``.
"""
import logging
import queue
import threading
from typing import Optional

from .errors import ChannelClosed
from .models import StreamOutcome

logger = logging.getLogger(__name__)


class HandoffQueue:
    """
    Ordered channel of StreamOutcome values.

    The producer calls ``send()`` and finally ``close()``. The consumer calls
    ``poll()`` and, if it goes away early, ``detach()``.
    """

    def __init__(self, backlog_warning: int = 1000):
        self._queue: "queue.SimpleQueue[StreamOutcome]" = queue.SimpleQueue()
        self._closed = threading.Event()
        self._detached = threading.Event()
        self._backlog_warning = backlog_warning
        self._backlog_warned = False

    # =========================================================================
    # Producer side
    # =========================================================================

    def send(self, outcome: StreamOutcome) -> None:
        """
        Enqueue an outcome for the consumer.

        Raises:
            ChannelClosed: If the consumer has detached or the queue was closed
        """
        if self._detached.is_set():
            raise ChannelClosed("Consumer has detached from the handoff queue")
        if self._closed.is_set():
            raise ChannelClosed("Handoff queue is already closed")

        self._queue.put(outcome)

        if self._backlog_warning and not self._backlog_warned:
            backlog = self._queue.qsize()
            if backlog >= self._backlog_warning:
                self._backlog_warned = True
                logger.warning(
                    f"Consumer is falling behind: {backlog} outcomes queued, "
                    "memory will keep growing until it catches up"
                )

    def close(self) -> None:
        """Mark that no further outcomes will be sent. Idempotent."""
        self._closed.set()

    # =========================================================================
    # Consumer side
    # =========================================================================

    def poll(self) -> Optional[StreamOutcome]:
        """
        Take the next outcome without blocking.

        Returns:
            The next outcome, or None if nothing is queued yet

        Raises:
            ChannelClosed: If the producer has closed and nothing is left
        """
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            pass

        if not self._closed.is_set():
            return None

        # The final send happens before close(), so look once more.
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            raise ChannelClosed("Event stream has ended and all outcomes were consumed")

    def detach(self) -> None:
        """Signal that the consumer is gone; later sends fail. Idempotent."""
        self._detached.set()

    @property
    def closed(self) -> bool:
        """True once the producer has closed, even if outcomes remain buffered."""
        return self._closed.is_set()

    @property
    def detached(self) -> bool:
        return self._detached.is_set()

    @property
    def pending(self) -> int:
        """Approximate number of buffered outcomes."""
        return self._queue.qsize()
