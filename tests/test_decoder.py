"""
Tests for event payload decoding and SSE framing.
"""
import pytest

from saltstream.decoder import decode_event, iter_sse_events
from saltstream.errors import DecodeError


class TestDecodeEvent:
    """Tests for decode_event()."""

    def test_decodes_object(self):
        """A JSON object should decode to a dict."""
        payload = decode_event('{"tag": "salt/job/1/new", "data": {"fun": "test.ping"}}')
        assert payload == {"tag": "salt/job/1/new", "data": {"fun": "test.ping"}}

    def test_decodes_scalars_and_arrays(self):
        """Any well-formed JSON value is accepted."""
        assert decode_event("[1, 2, 3]") == [1, 2, 3]
        assert decode_event("42") == 42
        assert decode_event("null") is None

    def test_malformed_raises_decode_error(self):
        """Malformed text should raise DecodeError chained to the JSON error."""
        with pytest.raises(DecodeError) as exc_info:
            decode_event('{"id": 1')
        assert isinstance(exc_info.value, ValueError)
        assert exc_info.value.__cause__ is not None
        assert exc_info.value.details["data"] == '{"id": 1'

    def test_too_deeply_nested_raises_decode_error(self):
        """Nesting past the interpreter recursion limit is a DecodeError."""
        with pytest.raises(DecodeError) as exc_info:
            decode_event("[" * 200000 + "]" * 200000)
        assert isinstance(exc_info.value.__cause__, RecursionError)

    def test_empty_text_is_malformed(self):
        with pytest.raises(DecodeError):
            decode_event("")


class TestIterSseEvents:
    """Tests for iter_sse_events()."""

    def test_blank_line_dispatches_event(self):
        """Each blank-line-terminated block becomes one event."""
        lines = ['data: {"id":1}', "", 'data: {"id":2}', ""]
        events = list(iter_sse_events(lines))
        assert [e.data for e in events] == ['{"id":1}', '{"id":2}']
        assert all(e.event == "message" for e in events)

    def test_salt_tag_field_is_ignored(self):
        """Salt's non-standard tag: field should not end up in the data."""
        lines = ["tag: salt/auth", 'data: {"tag": "salt/auth"}', ""]
        (event,) = list(iter_sse_events(lines))
        assert event.data == '{"tag": "salt/auth"}'

    def test_multiline_data_joined_with_newline(self):
        lines = ["data: {", 'data: "id": 1', "data: }", ""]
        (event,) = list(iter_sse_events(lines))
        assert event.data == '{\n"id": 1\n}'

    def test_event_id_and_retry_fields(self):
        lines = ["event: update", "id: 7", "retry: 400", "data: {}", ""]
        (event,) = list(iter_sse_events(lines))
        assert event.event == "update"
        assert event.id == "7"
        assert event.retry == 400

    def test_retry_only_block_is_not_dispatched(self):
        """salt-api opens the stream with a bare retry: block."""
        lines = ["retry: 400", "", "data: 1", ""]
        events = list(iter_sse_events(lines))
        assert len(events) == 1
        assert events[0].data == "1"
        assert events[0].retry is None

    def test_comments_are_skipped(self):
        lines = [": keep-alive", "data: 1", ""]
        assert [e.data for e in iter_sse_events(lines)] == ["1"]

    def test_only_one_leading_space_stripped(self):
        lines = ["data:  padded", "data:tight", ""]
        (event,) = list(iter_sse_events(lines))
        assert event.data == " padded\ntight"

    def test_unterminated_trailing_event_dropped(self):
        """An event cut off by the end of the stream is never dispatched."""
        lines = ["data: 1", "", "data: 2"]
        assert [e.data for e in iter_sse_events(lines)] == ["1"]

    def test_crlf_line_endings(self):
        lines = ["data: 1\r\n", "\r\n"]
        assert [e.data for e in iter_sse_events(lines)] == ["1"]
