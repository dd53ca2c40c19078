"""
Ingestion loop for the Salt API event stream.

The loop runs on its own thread. It logs in once, opens GET /events with the
session token, and turns every pushed message into a StreamOutcome on the
handoff queue. No exception leaves ``run()``: failures become outcomes and the
queue is always closed on the way out.

Cancellation is cooperative. The flag is checked after each message has been
read and before it is forwarded, so a stop request takes effect when the next
message arrives or when the idle read timeout fires, whichever comes first.
A login request or a read already in progress cannot be interrupted.
"""
import logging
import threading
from typing import Optional

import httpx

from .auth import SessionAuthenticator
from .config import Settings
from .decoder import decode_event, iter_sse_events
from .errors import AuthError, ChannelClosed, DecodeError, StreamConnectionError
from .handoff import HandoffQueue
from .models import Credentials, ServerSentEvent, StreamOutcome

logger = logging.getLogger(__name__)


class EventStreamLoop:
    """
    Owns the live connection for one stream lifetime.

    Attributes:
        credentials: Salt API endpoint and login credentials
        handoff: Queue receiving one outcome per message or fatal condition
    """

    def __init__(
        self,
        credentials: Credentials,
        handoff: HandoffQueue,
        client: Optional[httpx.Client] = None,
        verify_ssl: bool = False,
        connect_timeout: float = 10.0,
        read_timeout: Optional[float] = 300.0,
    ):
        """
        Initialize the loop.

        Args:
            credentials: Salt API endpoint and login credentials
            handoff: Queue to forward outcomes to
            client: HTTP client to use (created, and closed on exit, if omitted)
            verify_ssl: Verify the server certificate
            connect_timeout: Connection timeout in seconds
            read_timeout: Idle timeout on stream reads in seconds (None = unbounded)
        """
        self.credentials = credentials
        self.handoff = handoff
        self._verify_ssl = verify_ssl
        self._connect_timeout = connect_timeout
        self._read_timeout = read_timeout

        self._http_client = client
        self._owns_client = client is None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        handoff: HandoffQueue,
        client: Optional[httpx.Client] = None,
    ) -> "EventStreamLoop":
        return cls(
            credentials=settings.credentials(),
            handoff=handoff,
            client=client,
            verify_ssl=settings.verify_ssl,
            connect_timeout=settings.connect_timeout,
            read_timeout=settings.read_timeout,
        )

    @property
    def events_url(self) -> str:
        return f"{self.credentials.base_url}/events"

    # =========================================================================
    # Main loop
    # =========================================================================

    def run(self, cancel: threading.Event) -> None:
        """
        Log in, stream events until stopped or failed, then close the queue.

        Args:
            cancel: Set by the owner to request shutdown
        """
        try:
            self._run(cancel)
        except ChannelClosed:
            logger.info("Consumer went away, stopping event stream")
        except Exception as e:
            logger.exception("Unexpected error in event stream loop")
            error = StreamConnectionError(f"Unexpected error in event stream: {e}")
            error.__cause__ = e
            try:
                self.handoff.send(StreamOutcome.failure(error))
            except ChannelClosed:
                pass
        finally:
            self.handoff.close()
            self._close_http_client()
            logger.info("Event stream loop finished")

    def _run(self, cancel: threading.Event) -> None:
        client = self._ensure_http_client()

        try:
            token = SessionAuthenticator(self.credentials, client).login()
        except AuthError as e:
            logger.error(f"Authentication failed: {e}")
            self.handoff.send(StreamOutcome.failure(e))
            return

        if cancel.is_set():
            logger.info("Stop requested before the event stream was opened")
            return

        try:
            self._stream_events(client, token, cancel)
        except StreamConnectionError as e:
            self._report_connection_error(e, cancel)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            error = StreamConnectionError(f"Event stream failed: {e}")
            error.__cause__ = e
            self._report_connection_error(error, cancel)

    def _stream_events(self, client: httpx.Client, token: str, cancel: threading.Event) -> None:
        logger.info(f"Connecting to event stream: {self.events_url}")

        with client.stream(
            "GET",
            self.events_url,
            params={"token": token},
            headers={"Accept": "text/event-stream", "Cache-Control": "no-cache"},
        ) as response:
            if not response.is_success:
                raise StreamConnectionError(
                    f"Event stream connection failed: {response.status_code}",
                    details={"status_code": response.status_code},
                )

            logger.info("Connected to event stream")

            for sse in iter_sse_events(response.iter_lines()):
                if cancel.is_set():
                    logger.info("Stop requested, closing event stream")
                    return
                self.handoff.send(self._decode(sse))

        if not cancel.is_set():
            raise StreamConnectionError("Event stream closed by server")

    def _decode(self, sse: ServerSentEvent) -> StreamOutcome:
        try:
            payload = decode_event(sse.data)
        except DecodeError as e:
            logger.warning(f"Failed to parse event data: {e}")
            return StreamOutcome.failure(e, event=sse.event)

        logger.debug(f"Received {sse.event} event")
        return StreamOutcome.success(payload, event=sse.event)

    def _report_connection_error(self, error: StreamConnectionError, cancel: threading.Event) -> None:
        if cancel.is_set():
            # Shutting down anyway, the failure is not worth reporting.
            logger.debug(f"Ignoring stream error during shutdown: {error}")
            return
        logger.error(str(error))
        self.handoff.send(StreamOutcome.failure(error))

    # =========================================================================
    # HTTP Client Management
    # =========================================================================

    def _ensure_http_client(self) -> httpx.Client:
        """Ensure HTTP client is initialized."""
        if self._http_client is None:
            # - connect: bounded, the login and stream handshake should be quick
            # - read: idle timeout between pushed messages
            # - pool: None, there is only ever one connection in use
            timeout = httpx.Timeout(
                connect=self._connect_timeout,
                read=self._read_timeout,
                write=30.0,
                pool=None,
            )
            self._http_client = httpx.Client(verify=self._verify_ssl, timeout=timeout)
            self._owns_client = True
        return self._http_client

    def _close_http_client(self) -> None:
        if self._http_client is not None and self._owns_client:
            self._http_client.close()
            self._http_client = None
