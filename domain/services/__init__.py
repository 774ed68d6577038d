"""
Domain services.

These services hold and mutate client state while depending only on domain
models and ports so that infrastructure and front-end layers can remain thin.
"""

from .actions import PortalActions
from .entity_caches import EntityCaches
from .entity_fetcher import EntityFetcher
from .route_guard import (
    ADMIN_HOME_PATH,
    LANDING_PATH,
    RouteGuard,
    RouteRule,
    normalize_path,
)
from .session_store import SessionStore
from .submission import FormDraft, FormSubmissionPipeline, SubmitOutcome

__all__ = [
    "SessionStore",
    "EntityCaches",
    "EntityFetcher",
    "FormDraft",
    "FormSubmissionPipeline",
    "SubmitOutcome",
    "RouteGuard",
    "RouteRule",
    "normalize_path",
    "LANDING_PATH",
    "ADMIN_HOME_PATH",
    "PortalActions",
]
