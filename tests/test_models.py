"""
Tests for stream models and the tagged outcome type.
"""
import pytest
from pydantic import ValidationError

from saltstream.errors import AuthError, ChannelClosed, DecodeError, StreamConnectionError
from saltstream.models import Credentials, LoginResponse, OutcomeKind, StreamOutcome


class TestStreamOutcome:
    """Tests for StreamOutcome."""

    def test_success(self):
        outcome = StreamOutcome.success({"id": 1}, event="message")
        assert outcome.kind is OutcomeKind.EVENT
        assert outcome.ok
        assert not outcome.fatal
        assert outcome.unwrap() == {"id": 1}

    @pytest.mark.parametrize(
        "error, kind, fatal",
        [
            (AuthError("no token"), OutcomeKind.AUTH_ERROR, True),
            (StreamConnectionError("dropped"), OutcomeKind.CONNECTION_ERROR, True),
            (DecodeError("bad json"), OutcomeKind.DECODE_ERROR, False),
        ],
    )
    def test_failure_kind_follows_error_type(self, error, kind, fatal):
        outcome = StreamOutcome.failure(error)
        assert outcome.kind is kind
        assert not outcome.ok
        assert outcome.fatal is fatal
        with pytest.raises(type(error)):
            outcome.unwrap()

    def test_other_errors_are_connection_failures(self):
        outcome = StreamOutcome.failure(ChannelClosed())
        assert outcome.kind is OutcomeKind.CONNECTION_ERROR

    def test_outcome_is_immutable(self):
        outcome = StreamOutcome.success(1)
        with pytest.raises(ValidationError):
            outcome.payload = 2


class TestCredentials:
    """Tests for Credentials."""

    def test_base_url_strips_trailing_slash(self):
        creds = Credentials(url="https://salt:8000/", username="u", password="p")
        assert creds.base_url == "https://salt:8000"
        assert creds.eauth == "pam"

    def test_frozen(self):
        creds = Credentials(url="https://salt:8000", username="u", password="p")
        with pytest.raises(ValidationError):
            creds.username = "other"

    def test_password_not_in_repr(self):
        creds = Credentials(url="https://salt:8000", username="u", password="hunter2")
        assert "hunter2" not in repr(creds)


class TestLoginResponse:
    """Tests for LoginResponse."""

    def test_token_from_first_entry(self):
        response = LoginResponse.model_validate({"return": [{"token": "abc"}, {"token": "def"}]})
        assert response.token == "abc"

    def test_non_string_token(self):
        response = LoginResponse.model_validate({"return": [{"token": 1}]})
        with pytest.raises(AuthError):
            response.token
