"""
Reusable fakes and in-memory implementations for tests.
"""

from .fake_api_client import FakeApiClient, RecordedCall
from .fake_config_provider import InMemoryConfigProvider
from .fake_runtime import InMemoryLogger, RecordingNavigator, RecordingNotifier
from .fake_session_repository import InMemorySessionRepository
from .payloads import company_payload, job_payload, ok, rejected, user_payload

__all__ = [
    "FakeApiClient",
    "RecordedCall",
    "InMemoryConfigProvider",
    "InMemoryLogger",
    "RecordingNavigator",
    "RecordingNotifier",
    "InMemorySessionRepository",
    "user_payload",
    "company_payload",
    "job_payload",
    "ok",
    "rejected",
]
