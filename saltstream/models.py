"""
Pydantic models for the Salt API handshake, the event stream wire format and
the outcomes handed to the consumer.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .errors import AuthError, DecodeError, StreamConnectionError, StreamError


class BaseDTO(BaseModel):
    """
    Base configuration for all DTOs.

    - Aliases are generated in camelCase for JSON serialization.
    - Allows population by field name (snake_case) in Python code.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# Login handshake
# =============================================================================


class Credentials(BaseDTO):
    """Salt API endpoint and login credentials. Immutable for the process lifetime."""
    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Base URL of the Salt API, e.g. https://salt:8000")
    username: str = Field(..., description="Login user name.")
    password: str = Field(..., repr=False, description="Login password.")
    eauth: str = Field(default="pam", description="External authentication backend.")

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")

    def login_request(self) -> "LoginRequest":
        return LoginRequest(username=self.username, password=self.password, eauth=self.eauth)


class LoginRequest(BaseDTO):
    """Body of POST /login."""
    username: str
    password: str = Field(..., repr=False)
    eauth: str


class LoginResponse(BaseDTO):
    """Body returned by POST /login: {"return": [{"token": "...", ...}]}."""
    returned: List[Dict[str, Any]] = Field(..., alias="return")

    @property
    def token(self) -> str:
        """
        Extract the session token from the first entry.

        Raises:
            AuthError: If the first entry is missing or has no string token
        """
        if not self.returned:
            raise AuthError("Login response has an empty 'return' list")
        token = self.returned[0].get("token")
        if not isinstance(token, str):
            raise AuthError(
                "No auth token in login response",
                details={"token_type": type(token).__name__},
            )
        return token


# =============================================================================
# Event stream
# =============================================================================


class ServerSentEvent(BaseDTO):
    """One framed message from a text/event-stream response."""
    event: str = "message"
    data: str = ""
    id: Optional[str] = None
    retry: Optional[int] = None


class OutcomeKind(str, Enum):
    """Tag of a StreamOutcome."""
    EVENT = "event"
    DECODE_ERROR = "decode_error"
    CONNECTION_ERROR = "connection_error"
    AUTH_ERROR = "auth_error"


_ERROR_KINDS = {
    AuthError: OutcomeKind.AUTH_ERROR,
    DecodeError: OutcomeKind.DECODE_ERROR,
    StreamConnectionError: OutcomeKind.CONNECTION_ERROR,
}


class StreamOutcome(BaseModel):
    """
    One decoded payload or one named failure.

    Exactly one outcome is produced per pushed message or per fatal condition.
    Success outcomes carry ``payload``; failure outcomes carry ``error``.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    kind: OutcomeKind
    payload: Any = None
    error: Optional[StreamError] = None
    event: Optional[str] = None

    @classmethod
    def success(cls, payload: Any, event: Optional[str] = None) -> "StreamOutcome":
        return cls(kind=OutcomeKind.EVENT, payload=payload, event=event)

    @classmethod
    def failure(cls, error: StreamError, event: Optional[str] = None) -> "StreamOutcome":
        for error_type, kind in _ERROR_KINDS.items():
            if isinstance(error, error_type):
                return cls(kind=kind, error=error, event=event)
        # Anything else ends the stream like a transport failure would.
        return cls(kind=OutcomeKind.CONNECTION_ERROR, error=error, event=event)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.EVENT

    @property
    def fatal(self) -> bool:
        """True for failures that end the stream."""
        return self.kind in (OutcomeKind.AUTH_ERROR, OutcomeKind.CONNECTION_ERROR)

    def unwrap(self) -> Any:
        """Return the payload, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.payload
