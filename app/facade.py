from __future__ import annotations

import re
from typing import Any, Awaitable, Callable, Mapping

from domain.models import AppConfig, User
from domain.ports import ApiClientPort, LoggerPort, NotifierPort, SessionRepositoryPort
from domain.services import (
    EntityCaches,
    EntityFetcher,
    FormDraft,
    FormSubmissionPipeline,
    PortalActions,
    RouteGuard,
    SessionStore,
    SubmitOutcome,
)

from .navigation import HistoryNavigator

ScreenLoader = Callable[["PortalFacade", "re.Match[str]"], Awaitable[Any]]

# Screen path -> fetch hooks run when the screen opens. First match wins.
_SCREEN_LOADERS: tuple[tuple[re.Pattern[str], ScreenLoader], ...] = (
    (re.compile(r"^/(browse|jobs)?$"), lambda f, m: f.fetcher.fetch_jobs()),
    (re.compile(r"^/description/(?P<id>[^/]+)$"), lambda f, m: f.fetcher.fetch_job(m["id"])),
    (re.compile(r"^/profile$"), lambda f, m: f.fetcher.fetch_applied_jobs()),
    (re.compile(r"^/admin/companies(/create)?$"), lambda f, m: f.fetcher.fetch_companies()),
    (
        re.compile(r"^/admin/companies/(?P<id>[^/]+)$"),
        lambda f, m: f.fetcher.fetch_company(m["id"]),
    ),
    (re.compile(r"^/admin/jobs$"), lambda f, m: f.fetcher.fetch_admin_jobs()),
    (re.compile(r"^/admin/jobs/create$"), lambda f, m: f.fetcher.fetch_companies()),
)


class PortalFacade:
    """
    UI-facing facade: one object a front end talks to.

    Owns the session store, the entity caches and the navigator, and routes
    form submissions, screen loads and button actions to the domain services.
    """

    def __init__(
        self,
        *,
        api: ApiClientPort,
        notifier: NotifierPort,
        logger: LoggerPort,
        repository: SessionRepositoryPort | None = None,
    ) -> None:
        self._repository = repository
        self.session = SessionStore(repository=repository, logger=logger)
        self.caches = EntityCaches()
        self.guard = RouteGuard(self.session, logger=logger)
        self.navigator = HistoryNavigator(self.guard)
        self.pipeline = FormSubmissionPipeline(
            api=api,
            session_store=self.session,
            caches=self.caches,
            notifier=notifier,
            navigator=self.navigator,
            logger=logger,
        )
        self.fetcher = EntityFetcher(api=api, caches=self.caches, logger=logger)
        self.actions = PortalActions(
            api=api,
            session_store=self.session,
            caches=self.caches,
            notifier=notifier,
            navigator=self.navigator,
            logger=logger,
        )

    @classmethod
    def build(
        cls,
        config: AppConfig,
        *,
        notifier: NotifierPort,
        logger: LoggerPort,
        api: ApiClientPort | None = None,
    ) -> "PortalFacade":
        from infra.http import UrllibApiClient
        from infra.persistence import SQLiteSessionRepository

        if api is None:
            api = UrllibApiClient(
                config.api_base_url,
                timeout_seconds=config.request_timeout_seconds,
                cookie_jar_path=config.cookie_jar_path,
            )
        repository = (
            SQLiteSessionRepository(db_path=config.session_db_path)
            if config.persist_session
            else None
        )
        return cls(api=api, notifier=notifier, logger=logger, repository=repository)

    @property
    def identity(self) -> User | None:
        return self.session.identity

    @property
    def current_path(self) -> str:
        return self.navigator.current_path

    def start(self) -> str:
        """Restore a persisted session and re-check the current screen."""
        self.session.rehydrate()
        return self.navigator.refresh()

    async def open_screen(self, path: str) -> str:
        """Navigate to ``path`` (guarded) and run the fetch hooks of the shown screen."""
        shown = self.navigator.navigate(path)
        for pattern, loader in _SCREEN_LOADERS:
            match = pattern.match(shown)
            if match:
                await loader(self, match)
                break
        return shown

    def draft(
        self,
        form_name: str,
        *,
        initial: Mapping[str, Any] | None = None,
        path_params: Mapping[str, str] | None = None,
    ) -> FormDraft:
        return self.pipeline.create_draft(form_name, initial=initial, path_params=path_params)

    async def submit(self, draft: FormDraft) -> SubmitOutcome:
        return await self.pipeline.submit(draft)

    async def submit_form(
        self,
        form_name: str,
        values: Mapping[str, Any],
        *,
        path_params: Mapping[str, str] | None = None,
    ) -> SubmitOutcome:
        return await self.pipeline.submit_form(form_name, values, path_params=path_params)

    def search(self, query: str) -> str:
        return self.actions.search(query)

    async def logout(self) -> bool:
        return await self.actions.logout()

    async def apply_to_job(self, job_id: str) -> bool:
        return await self.actions.apply_to_job(job_id)

    def close(self) -> None:
        close = getattr(self._repository, "close", None)
        if close is not None:
            close()
