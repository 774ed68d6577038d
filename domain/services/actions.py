from __future__ import annotations

from dataclasses import replace

from domain.errors import TransportFailure
from domain.forms import DEFAULT_ERROR_MESSAGE
from domain.models import Role
from domain.ports import ApiClientPort, LoggerPort, NavigatorPort, NotifierPort
from domain.services.entity_caches import EntityCaches
from domain.services.session_store import SessionStore
from domain.utils import path_segment

BROWSE_PATH = "/browse"


class PortalActions:
    """Store writes that are triggered by a button rather than a form."""

    def __init__(
        self,
        *,
        api: ApiClientPort,
        session_store: SessionStore,
        caches: EntityCaches,
        notifier: NotifierPort,
        navigator: NavigatorPort,
        logger: LoggerPort,
    ) -> None:
        self._api = api
        self._session = session_store
        self._caches = caches
        self._notifier = notifier
        self._navigator = navigator
        self._logger = logger

    def search(self, query: str) -> str:
        self._caches.set_search_query(query.strip())
        return self._navigator.navigate(BROWSE_PATH)

    async def logout(self) -> bool:
        try:
            response = await self._api.send("GET", "/user/logout")
        except TransportFailure as exc:
            self._logger.error("logout_failed", error=exc.message)
            self._notifier.error(DEFAULT_ERROR_MESSAGE)
            return False
        if not response.success:
            self._logger.warning("logout_rejected", status=response.status)
            self._notifier.error(response.message or DEFAULT_ERROR_MESSAGE)
            return False

        self._session.clear_identity()
        self._caches.clear_user_data()
        self._notifier.success(response.message or "Logged out")
        self._navigator.navigate("/")
        return True

    async def apply_to_job(self, job_id: str) -> bool:
        identity = self._session.identity
        if identity is None or identity.role is not Role.CANDIDATE:
            self._notifier.error("Please log in as a candidate to apply")
            return False

        try:
            response = await self._api.send("GET", f"/application/apply/{path_segment(job_id)}")
        except TransportFailure as exc:
            self._logger.error("apply_failed", job_id=job_id, error=exc.message)
            self._notifier.error(DEFAULT_ERROR_MESSAGE)
            return False
        if not response.success:
            self._logger.warning("apply_rejected", job_id=job_id, status=response.status)
            self._notifier.error(response.message or DEFAULT_ERROR_MESSAGE)
            return False

        job = self._caches.single_job
        if job is not None and job.id == job_id and not job.has_applicant(identity.id):
            self._caches.upsert_job(
                replace(job, applicant_ids=(*job.applicant_ids, identity.id)),
            )
        self._notifier.success(response.message or "Job applied successfully")
        self._logger.info("job_applied", job_id=job_id, user_id=identity.id)
        return True
