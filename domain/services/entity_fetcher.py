from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence, TypeVar

from domain.errors import MalformedPayload, TransportFailure
from domain.models import Company, JobApplication, JobPosting
from domain.ports import ApiClientPort, LoggerPort
from domain.services.entity_caches import EntityCaches
from domain.utils import path_segment

_T = TypeVar("_T")


class EntityFetcher:
    """
    Background fetch hooks that keep ``EntityCaches`` in sync with the service.

    Reads never raise: a transport failure, a ``success: false`` answer or an
    unparseable payload degrades to an empty collection (or a cleared single
    lookup) and a logged warning. A collection response is dropped when a
    newer fetch of the same collection was started after it.
    """

    def __init__(
        self,
        *,
        api: ApiClientPort,
        caches: EntityCaches,
        logger: LoggerPort,
    ) -> None:
        self._api = api
        self._caches = caches
        self._logger = logger
        self._generations: dict[str, int] = {}

    async def fetch_jobs(self) -> Sequence[JobPosting]:
        query = self._caches.search_query.strip()
        params = {"keyword": query} if query else None
        return await self._fetch_collection(
            "jobs",
            "/job/get",
            "jobs",
            JobPosting.from_payload,
            self._caches.replace_jobs,
            query=params,
        )

    async def fetch_admin_jobs(self) -> Sequence[JobPosting]:
        return await self._fetch_collection(
            "admin_jobs",
            "/job/getadminjobs",
            "jobs",
            JobPosting.from_payload,
            self._caches.replace_admin_jobs,
        )

    async def fetch_companies(self) -> Sequence[Company]:
        return await self._fetch_collection(
            "companies",
            "/company/get",
            "companies",
            Company.from_payload,
            self._caches.replace_companies,
        )

    async def fetch_applied_jobs(self) -> Sequence[JobApplication]:
        return await self._fetch_collection(
            "applied_jobs",
            "/application/get",
            "application",
            JobApplication.from_payload,
            self._caches.replace_applied_jobs,
        )

    async def fetch_job(self, job_id: str) -> JobPosting | None:
        job = await self._fetch_single(f"/job/get/{path_segment(job_id)}", "job", JobPosting.from_payload)
        if job is None:
            self._caches.clear_single_job()
        else:
            self._caches.upsert_job(job)
        return job

    async def fetch_company(self, company_id: str) -> Company | None:
        company = await self._fetch_single(
            f"/company/get/{path_segment(company_id)}",
            "company",
            Company.from_payload,
        )
        if company is None:
            self._caches.clear_single_company()
        else:
            self._caches.upsert_company(company)
        return company

    # -- internal helpers ---------------------------------------------------

    async def _fetch_collection(
        self,
        name: str,
        path: str,
        key: str,
        parse: Callable[[Any], _T],
        write: Callable[[Sequence[_T]], None],
        *,
        query: Mapping[str, str] | None = None,
    ) -> Sequence[_T]:
        generation = self._generations.get(name, 0) + 1
        self._generations[name] = generation

        items: tuple[_T, ...] = ()
        body = await self._get(path, query=query)
        if body is not None:
            raw_items = body.get(key)
            if isinstance(raw_items, list):
                try:
                    items = tuple(parse(item) for item in raw_items)
                except MalformedPayload as exc:
                    self._logger.warning("fetch_failed", path=path, error=str(exc))
            else:
                self._logger.warning("fetch_failed", path=path, error=f"missing {key!r}")

        if self._generations.get(name) != generation:
            self._logger.info("fetch_superseded", path=path, collection=name)
            return items
        write(items)
        return items

    async def _fetch_single(
        self,
        path: str,
        key: str,
        parse: Callable[[Any], _T],
    ) -> _T | None:
        body = await self._get(path)
        if body is None:
            return None
        try:
            return parse(body.get(key))
        except MalformedPayload as exc:
            self._logger.warning("fetch_failed", path=path, error=str(exc))
            return None

    async def _get(
        self,
        path: str,
        *,
        query: Mapping[str, str] | None = None,
    ) -> Mapping[str, Any] | None:
        try:
            response = await self._api.send("GET", path, query=query)
        except TransportFailure as exc:
            self._logger.warning("fetch_failed", path=path, error=exc.message)
            return None
        if not response.success:
            self._logger.warning(
                "fetch_failed",
                path=path,
                status=response.status,
                error=response.message or "unsuccessful response",
            )
            return None
        return response.body
