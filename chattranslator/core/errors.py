"""
Exception taxonomy shared by clients, services and handlers.

Handlers never build error responses for these directly; the FastAPI
exception handlers in ``chattranslator.main`` map each family to a terse
status code and keep diagnostics in the server log.
"""

from __future__ import annotations


class ChatTranslatorError(Exception):
    """Base class for every error raised by this service."""


class ConfigurationError(ChatTranslatorError):
    """A required environment value or pre-provisioned record is missing."""


class RequestValidationFailure(ChatTranslatorError):
    """A query parameter is missing or has the wrong shape."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthError(ChatTranslatorError):
    """The caller could not be authenticated."""


class MalformedAssertionError(ChatTranslatorError):
    """The perimeter-supplied identity assertion could not be decoded."""


class UpstreamError(ChatTranslatorError):
    """An external service failed or answered with an unusable payload."""


class InvalidResponseError(UpstreamError):
    """An upstream response did not match the expected schema."""


class SecretNotFoundError(UpstreamError):
    """The secret vault returned no payload for the requested version."""


class TokenAcquisitionError(UpstreamError):
    """The identity provider rejected a grant request."""


class ChatDeliveryError(UpstreamError):
    """A chat message could not be delivered over IRC."""


class StorageError(ChatTranslatorError):
    """The credential store could not be read or written."""


class MalformedRecordError(StorageError):
    """A persisted record exists but cannot be deserialized."""


class WriteConflictError(StorageError):
    """A version-checked write lost against a concurrent writer."""


__all__ = [
    "AuthError",
    "ChatDeliveryError",
    "ChatTranslatorError",
    "ConfigurationError",
    "InvalidResponseError",
    "MalformedAssertionError",
    "MalformedRecordError",
    "RequestValidationFailure",
    "SecretNotFoundError",
    "StorageError",
    "TokenAcquisitionError",
    "UpstreamError",
    "WriteConflictError",
]
