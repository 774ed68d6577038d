from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from domain.models import Role
from domain.ports import LoggerPort
from domain.services.session_store import SessionStore

LANDING_PATH = "/"
LOGIN_PATH = "/login"
ADMIN_HOME_PATH = "/admin/companies"
GUEST_ONLY_PATHS = ("/login", "/signup")


@dataclass(frozen=True)
class RouteRule:
    """Role requirement for every path under ``prefix``."""

    prefix: str
    required_role: Role
    redirect_when_absent: str
    redirect_when_mismatched: str

    def matches(self, path: str) -> bool:
        return path == self.prefix or path.startswith(self.prefix + "/")


DEFAULT_RULES: Sequence[RouteRule] = (
    RouteRule("/admin", Role.ADMIN, LANDING_PATH, LANDING_PATH),
    RouteRule("/profile", Role.CANDIDATE, LOGIN_PATH, LANDING_PATH),
)


def normalize_path(path: str) -> str:
    path = path.split("?", 1)[0].split("#", 1)[0].strip() or LANDING_PATH
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or LANDING_PATH
    return path


class RouteGuard:
    """
    Decides, from the current session, whether a screen may render.

    ``check`` gives the single redirect for a path, or ``None`` when the path
    is allowed. ``resolve`` follows redirects until a path is allowed. An
    admin landing on ``/`` is always sent to the company list.
    """

    def __init__(
        self,
        session_store: SessionStore,
        *,
        rules: Sequence[RouteRule] = DEFAULT_RULES,
        logger: LoggerPort | None = None,
        max_redirects: int = 5,
    ) -> None:
        self._session = session_store
        self._rules = tuple(rules)
        self._logger = logger
        self._max_redirects = max_redirects

    def check(self, path: str) -> str | None:
        path = normalize_path(path)
        role = self._session.role

        if path == LANDING_PATH:
            return ADMIN_HOME_PATH if role is Role.ADMIN else None

        if role is not None and path in GUEST_ONLY_PATHS:
            return LANDING_PATH

        for rule in self._rules:
            if not rule.matches(path):
                continue
            if role is None:
                return rule.redirect_when_absent
            if role is not rule.required_role:
                return rule.redirect_when_mismatched
            return None
        return None

    def resolve(self, path: str) -> str:
        current = normalize_path(path)
        for _ in range(self._max_redirects):
            target = self.check(current)
            if target is None or target == current:
                return current
            if self._logger is not None:
                self._logger.info("route_redirected", source=current, target=target)
            current = normalize_path(target)
        raise RuntimeError(f"Redirect loop while resolving {path!r}")

    def can_render(self, path: str) -> bool:
        return self.check(path) is None
