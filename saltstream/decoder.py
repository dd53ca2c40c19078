"""
Decoding of the Salt API event stream.

``iter_sse_events`` frames a text/event-stream body into ServerSentEvent
objects and ``decode_event`` parses one event's data as JSON.

Salt's rest_cherrypy backend writes each event as::

    tag: salt/job/20240101000000000000/new
    data: {"tag": "salt/job/...", "data": {...}}

The non-standard ``tag`` field is ignored; the tag is repeated in the data.
"""
import json
import logging
from typing import Any, Iterable, Iterator, List, Optional

from .errors import DecodeError
from .models import ServerSentEvent

logger = logging.getLogger(__name__)


def decode_event(text: str) -> Any:
    """
    Parse the data of one pushed message.

    Args:
        text: Raw data field of the event

    Returns:
        The decoded JSON value (dict, list or scalar)

    Raises:
        DecodeError: If the text is not well-formed JSON or nests too deeply
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(
            f"Malformed event payload: {e.msg} at position {e.pos}",
            details={"data": text[:200]},
        ) from e
    except RecursionError as e:
        raise DecodeError(
            "Event payload is nested too deeply to decode",
            details={"data": text[:200]},
        ) from e


def iter_sse_events(lines: Iterable[str]) -> Iterator[ServerSentEvent]:
    """
    Frame server-sent events out of a stream of text lines.

    A blank line dispatches the pending event. Events without any data line
    are dropped, as is an unterminated event at the end of the stream.
    """
    event_type: Optional[str] = None
    event_id: Optional[str] = None
    retry: Optional[int] = None
    data_lines: List[str] = []

    for line in lines:
        line = line.rstrip("\r\n")

        if not line:
            # Empty line = end of event
            if data_lines:
                yield ServerSentEvent(
                    event=event_type or "message",
                    data="\n".join(data_lines),
                    id=event_id,
                    retry=retry,
                )
            event_type = None
            retry = None
            data_lines = []
            continue

        if line.startswith(":"):
            continue

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if field == "data":
            data_lines.append(value)
        elif field == "event":
            event_type = value
        elif field == "id":
            event_id = value
        elif field == "retry":
            if value.isdigit():
                retry = int(value)
        else:
            logger.debug(f"Ignoring SSE field: {field}")
