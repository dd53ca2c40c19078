"""
saltstream - Salt API event stream client.

A background thread logs in to the Salt API, follows its /events stream and
hands every decoded event to a consumer that polls once per frame.
"""

__version__ = "0.1.0"

from .client import EventStreamer, start
from .config import Settings, get_settings
from .errors import AuthError, ChannelClosed, DecodeError, StreamConnectionError, StreamError
from .models import Credentials, OutcomeKind, StreamOutcome

__all__ = [
    "EventStreamer",
    "start",
    "Settings",
    "get_settings",
    "Credentials",
    "OutcomeKind",
    "StreamOutcome",
    "StreamError",
    "AuthError",
    "StreamConnectionError",
    "DecodeError",
    "ChannelClosed",
]
