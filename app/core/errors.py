"""Error kinds raised by the completion relay.

Every kind ends up as the same ``500 {"error": ...}`` envelope; the class only
decides the message text and what gets logged.
"""
from typing import Optional


class RelayError(Exception):
    """Base class for expected relay failures."""

    default_message = "Relay error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class InvalidRequest(RelayError):
    default_message = "Invalid request body"


class Unauthorized(RelayError):
    default_message = "Unauthorized"


class ConfigurationError(RelayError):
    default_message = "Provider key not configured"


class ProviderError(RelayError):
    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        super().__init__(message or f"OpenRouter API error: {status_code}")


class EmptyResponse(RelayError):
    default_message = "No response from AI"


class PersistenceError(RelayError):
    default_message = "Failed to save message"
