"""
Error types raised and reported by the event streamer.

Fatal errors (AuthError, StreamConnectionError) end the ingestion loop and are
delivered once to the consumer as the final outcome. DecodeError is reported
per message and the stream carries on. ChannelClosed marks the handoff queue
as finished, from either end.
"""
from typing import Any, Dict, Optional


class StreamError(Exception):
    """Base exception for the event streamer."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class AuthError(StreamError):
    """Login request failed or the response carried no usable token."""


class StreamConnectionError(StreamError, ConnectionError):
    """The event stream failed at the transport level or was closed by the server."""


class DecodeError(StreamError, ValueError):
    """A single pushed message could not be parsed as JSON."""


class ChannelClosed(StreamError):
    """The handoff queue is closed and drained, or its consumer has gone away."""

    def __init__(self, message: str = "Channel closed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
