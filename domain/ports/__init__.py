from __future__ import annotations

from abc import abstractmethod
from typing import Any, Mapping, Protocol, Sequence, Union, runtime_checkable

from domain.models import ApiResponse, AppConfig, UploadedFile, User

FormPart = tuple[str, Union[str, UploadedFile]]


@runtime_checkable
class ApiClientPort(Protocol):
    """
    Transport to the portal REST service.

    Implementations attach session credentials (cookies) to every call and
    return the decoded JSON envelope for both 2xx and error statuses. Network
    failures, timeouts and non-JSON bodies raise ``TransportFailure``.
    """

    async def send(
        self,
        method: str,
        path: str,
        *,
        json_body: Mapping[str, Any] | None = None,
        form_parts: Sequence[FormPart] | None = None,
        query: Mapping[str, str] | None = None,
    ) -> ApiResponse:
        ...


@runtime_checkable
class NotifierPort(Protocol):
    """Transient user-visible notifications (toasts)."""

    def success(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


@runtime_checkable
class NavigatorPort(Protocol):
    """Screen navigation. ``navigate`` returns the path actually shown."""

    @property
    def current_path(self) -> str:
        ...

    def navigate(self, path: str) -> str:
        ...


@runtime_checkable
class SessionRepositoryPort(Protocol):
    """Optional persistence used to rehydrate the session after a restart."""

    @abstractmethod
    def load_identity(self) -> User | None:
        ...

    @abstractmethod
    def save_identity(self, user: User) -> None:
        ...

    @abstractmethod
    def clear_identity(self) -> None:
        ...


@runtime_checkable
class ConfigProviderPort(Protocol):
    """Read access to application configuration."""

    def get_config(self) -> AppConfig:
        ...

    def validate(self) -> list[str]:
        ...


@runtime_checkable
class LoggerPort(Protocol):
    """Structured, testable logging abstraction."""

    def info(self, message: str, **fields: Any) -> None:
        ...

    def warning(self, message: str, **fields: Any) -> None:
        ...

    def error(self, message: str, **fields: Any) -> None:
        ...


__all__ = [
    "FormPart",
    "ApiClientPort",
    "NotifierPort",
    "NavigatorPort",
    "SessionRepositoryPort",
    "ConfigProviderPort",
    "LoggerPort",
]
