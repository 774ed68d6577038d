"""
Domain layer package.

This package contains the client-side state, validation and submission
logic of the job portal, independent of any transport or front end.
"""

from .errors import (  # noqa: F401
    DuplicateSubmission,
    MalformedPayload,
    ServerRejected,
    SubmitError,
    TransportFailure,
    ValidationFailed,
)
from .models import (  # noqa: F401
    ApiResponse,
    AppConfig,
    CacheState,
    Company,
    JobApplication,
    JobPosting,
    Profile,
    Role,
    Session,
    UploadedFile,
    User,
)
from .ports import (  # noqa: F401
    ApiClientPort,
    ConfigProviderPort,
    FormPart,
    LoggerPort,
    NavigatorPort,
    NotifierPort,
    SessionRepositoryPort,
)

__all__ = [
    # Models
    "Role",
    "Profile",
    "User",
    "Session",
    "Company",
    "JobPosting",
    "JobApplication",
    "UploadedFile",
    "CacheState",
    "ApiResponse",
    "AppConfig",
    # Errors
    "MalformedPayload",
    "SubmitError",
    "ValidationFailed",
    "ServerRejected",
    "TransportFailure",
    "DuplicateSubmission",
    # Ports
    "FormPart",
    "ApiClientPort",
    "NotifierPort",
    "NavigatorPort",
    "SessionRepositoryPort",
    "ConfigProviderPort",
    "LoggerPort",
]
