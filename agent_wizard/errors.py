"""Wizard error taxonomy; every class carries a stable ``code`` for the HTTP layer and logs."""

from __future__ import annotations

from typing import Optional


class WizardError(Exception):
    """Base class for every failure the wizard surfaces to its callers."""

    code: str = "WizardError"

    def __init__(self, message: str = "") -> None:
        self.detail = message
        super().__init__(message or self.code)


class ConfigurationError(WizardError):
    """A required secret or configuration value is missing or malformed."""

    code: str = "ConfigurationError"


class LLMError(WizardError):
    """Base for failures talking to the remote completion service."""

    code: str = "LLMError"


class TransportError(LLMError):
    """Network/IO failure, or a response body that could not be decoded."""

    code: str = "TransportError"

    def __init__(self, message: str = "", status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message or "Transport error")


class RequestCancelledError(TransportError):
    """The call was aborted while waiting out a retry delay."""

    code: str = "Cancelled"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or "Request interrupted during retry delay")


class ApiError(LLMError):
    """The remote service answered with a structured ``error`` object."""

    code: str = "ApiError"

    def __init__(self, message: str, error_type: Optional[str], status_code: int) -> None:
        self.message = message
        self.error_type = error_type
        self.status_code = status_code
        super().__init__(message or f"API call failed with status {status_code}")


class RateLimitError(ApiError):
    """Throttled by the remote service; retried locally until the attempt budget runs out."""

    code: str = "RateLimited"

    def __init__(
        self,
        message: str,
        error_type: Optional[str],
        status_code: int,
        retry_after_ms: Optional[int] = None,
    ) -> None:
        self.retry_after_ms = retry_after_ms
        super().__init__(message, error_type, status_code)


class ParseError(WizardError):
    """Model output could not be decoded into the expected JSON shape.

    ``raw_text`` keeps exactly what the model returned so callers can inspect it.
    """

    code: str = "ParseError"

    def __init__(self, message: str, raw_text: str = "") -> None:
        self.raw_text = raw_text
        super().__init__(message)


class StateError(WizardError):
    """Operation requested on a missing session or on a session in the wrong state."""

    code: str = "StateError"


class SessionNotFoundError(StateError):
    code: str = "SessionNotFound"

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"No session found with ID: {session_id}")


class IllegalTransitionError(StateError):
    code: str = "IllegalTransition"

    def __init__(self, session_id: str, current: str, target: str, action: str = "") -> None:
        self.session_id = session_id
        self.current = current
        self.target = target
        what = f" for {action}" if action else ""
        super().__init__(
            f"Session is not in the correct state{what}. Current state: {current}"
        )
