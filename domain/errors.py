from __future__ import annotations

from types import MappingProxyType
from typing import Mapping


class MalformedPayload(ValueError):
    """Raised when a service payload cannot be turned into a domain model."""


class SubmitError(Exception):
    """Base class for every way a form submission can fail."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailed(SubmitError):
    """Client-side validation rejected the form; nothing was sent."""

    def __init__(self, field_errors: Mapping[str, str]) -> None:
        super().__init__("Please fix the highlighted fields")
        self.field_errors = MappingProxyType(dict(field_errors))


class ServerRejected(SubmitError):
    """The service answered with ``success: false``."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class TransportFailure(SubmitError):
    """Network error, timeout, or a response that is not a valid envelope."""


class DuplicateSubmission(SubmitError):
    """A submission for the same draft is already in flight."""

    def __init__(self, form_name: str) -> None:
        super().__init__(f"{form_name} submission already in progress")
        self.form_name = form_name


__all__ = [
    "MalformedPayload",
    "SubmitError",
    "ValidationFailed",
    "ServerRejected",
    "TransportFailure",
    "DuplicateSubmission",
]
