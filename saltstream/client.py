"""
Event streamer handle for per-frame consumers.

Usage:
    from saltstream import start

    streamer = start()

    # once per frame
    payload = streamer.next()
    if payload is not None:
        draw(payload)

    # on shutdown
    streamer.stop(wait=True)

The handle owns a cancellation flag and a background thread running
EventStreamLoop. ``poll()`` and ``next()`` never block. ``stop()`` only asks
the loop to finish; pass ``wait=True`` to join the thread as well. Dropping
the handle stops the loop without joining it, so the thread may outlive the
handle until its current network read returns. The thread is a daemon and
never holds the process open.
"""
import logging
import threading
from typing import Any, Optional

import httpx

from .config import Settings, get_settings
from .handoff import HandoffQueue
from .models import StreamOutcome
from .stream import EventStreamLoop

logger = logging.getLogger(__name__)


class EventStreamer:
    """
    Lifecycle controller for one event stream.

    Attributes:
        settings: Configuration the stream was started with
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the streamer without starting it.

        Args:
            settings: Streamer configuration (loaded from the environment if omitted)
            client: HTTP client for the loop to use instead of creating its own
        """
        self.settings = settings or get_settings()
        self._cancel = threading.Event()
        self._handoff = HandoffQueue(backlog_warning=self.settings.backlog_warning)
        self._loop = EventStreamLoop.from_settings(self.settings, self._handoff, client=client)
        self._thread: Optional[threading.Thread] = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> "EventStreamer":
        """
        Spawn the ingestion thread.

        Returns:
            self, so construction and start can be chained

        Raises:
            RuntimeError: If the streamer was already started
        """
        if self._thread is not None:
            raise RuntimeError("EventStreamer has already been started")

        self._thread = threading.Thread(
            target=self._loop.run,
            args=(self._cancel,),
            name="saltstream-ingest",
            daemon=True,
        )
        self._thread.start()
        logger.info("Event streamer started")
        return self

    def stop(self, wait: bool = False, timeout: Optional[float] = None) -> bool:
        """
        Ask the ingestion loop to finish. Safe to call more than once.

        Args:
            wait: Join the ingestion thread before returning
            timeout: Maximum seconds to wait when ``wait`` is True

        Returns:
            True if the ingestion thread is known to have exited
        """
        if not self._cancel.is_set():
            logger.info("Stopping event streamer")
            self._cancel.set()

        if wait:
            return self.join(timeout)
        return not self.is_running

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the ingestion thread to exit.

        Returns:
            True if the thread has exited (or was never started)
        """
        if self._thread is None:
            return True
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning(f"Event stream thread still running after {timeout}s")
            return False
        return True

    def close(self) -> None:
        """Stop the loop and drop the consumer end of the queue. Does not block."""
        self.stop()
        self._handoff.detach()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    # =========================================================================
    # Consumer API
    # =========================================================================

    def poll(self) -> Optional[StreamOutcome]:
        """
        Take the next outcome without blocking.

        Returns:
            The next outcome, or None if nothing has arrived yet

        Raises:
            ChannelClosed: If the stream has ended and every outcome was consumed
        """
        return self._handoff.poll()

    def next(self) -> Optional[Any]:
        """
        Take the next payload without blocking.

        Returns:
            The decoded payload, or None if nothing has arrived yet

        Raises:
            StreamError: The failure carried by the next outcome
            ChannelClosed: If the stream has ended and every outcome was consumed
        """
        outcome = self._handoff.poll()
        if outcome is None:
            return None
        return outcome.unwrap()

    @property
    def pending(self) -> int:
        """Approximate number of outcomes waiting to be polled."""
        return self._handoff.pending

    # =========================================================================
    # Context Manager Support
    # =========================================================================

    def __enter__(self) -> "EventStreamer":
        if self._thread is None:
            self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop(wait=True, timeout=self.settings.join_timeout)
        self.close()

    def __del__(self):
        # No join here: the thread finishes on its own once it sees the flag.
        cancel = getattr(self, "_cancel", None)
        handoff = getattr(self, "_handoff", None)
        if cancel is not None:
            cancel.set()
        if handoff is not None:
            handoff.detach()


def start(
    settings: Optional[Settings] = None,
    client: Optional[httpx.Client] = None,
) -> EventStreamer:
    """Create an EventStreamer and start its ingestion thread."""
    return EventStreamer(settings=settings, client=client).start()
