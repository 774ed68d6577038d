from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterable, Sequence, TypeVar

from domain.models import CacheState, Company, JobApplication, JobPosting

CacheListener = Callable[[CacheState], None]

_Entity = TypeVar("_Entity", Company, JobPosting)


def _upsert(items: Sequence[_Entity], entity: _Entity) -> tuple[_Entity, ...]:
    updated = []
    found = False
    for item in items:
        if item.id == entity.id:
            updated.append(entity)
            found = True
        else:
            updated.append(item)
    if not found:
        updated.append(entity)
    return tuple(updated)


def with_jobs(state: CacheState, jobs: Iterable[JobPosting]) -> CacheState:
    return replace(state, jobs=tuple(jobs))


def with_admin_jobs(state: CacheState, jobs: Iterable[JobPosting]) -> CacheState:
    return replace(state, admin_jobs=tuple(jobs))


def with_companies(state: CacheState, companies: Iterable[Company]) -> CacheState:
    return replace(state, companies=tuple(companies))


def with_applied_jobs(state: CacheState, applications: Iterable[JobApplication]) -> CacheState:
    return replace(state, applied_jobs=tuple(applications))


def with_job(state: CacheState, job: JobPosting) -> CacheState:
    admin_jobs = state.admin_jobs
    if any(item.id == job.id for item in admin_jobs):
        admin_jobs = _upsert(admin_jobs, job)
    return replace(
        state,
        jobs=_upsert(state.jobs, job),
        admin_jobs=admin_jobs,
        single_job=job,
    )


def with_company(state: CacheState, company: Company) -> CacheState:
    return replace(
        state,
        companies=_upsert(state.companies, company),
        single_company=company,
    )


class EntityCaches:
    """
    Client-side mirror of the collections owned by the portal service.

    Fetch-all writers replace a whole collection. Fetch-by-id writers upsert
    one entry and point the matching single-entity lookup at it.
    """

    def __init__(self) -> None:
        self._state = CacheState()
        self._listeners: list[CacheListener] = []

    @property
    def state(self) -> CacheState:
        return self._state

    @property
    def jobs(self) -> Sequence[JobPosting]:
        return self._state.jobs

    @property
    def admin_jobs(self) -> Sequence[JobPosting]:
        return self._state.admin_jobs

    @property
    def companies(self) -> Sequence[Company]:
        return self._state.companies

    @property
    def applied_jobs(self) -> Sequence[JobApplication]:
        return self._state.applied_jobs

    @property
    def single_job(self) -> JobPosting | None:
        return self._state.single_job

    @property
    def single_company(self) -> Company | None:
        return self._state.single_company

    @property
    def search_query(self) -> str:
        return self._state.search_query

    # Collections ----------------------------------------------------------
    def replace_jobs(self, jobs: Iterable[JobPosting]) -> None:
        self._replace(with_jobs(self._state, jobs))

    def replace_admin_jobs(self, jobs: Iterable[JobPosting]) -> None:
        self._replace(with_admin_jobs(self._state, jobs))

    def replace_companies(self, companies: Iterable[Company]) -> None:
        self._replace(with_companies(self._state, companies))

    def replace_applied_jobs(self, applications: Iterable[JobApplication]) -> None:
        self._replace(with_applied_jobs(self._state, applications))

    # Single entities ------------------------------------------------------
    def upsert_job(self, job: JobPosting) -> None:
        self._replace(with_job(self._state, job))

    def upsert_company(self, company: Company) -> None:
        self._replace(with_company(self._state, company))

    def clear_single_job(self) -> None:
        self._replace(replace(self._state, single_job=None))

    def clear_single_company(self) -> None:
        self._replace(replace(self._state, single_company=None))

    # Search and filters ---------------------------------------------------
    def set_search_query(self, query: str) -> None:
        self._replace(replace(self._state, search_query=query))

    def set_company_filter(self, text: str) -> None:
        self._replace(replace(self._state, company_filter=text))

    def set_admin_job_filter(self, text: str) -> None:
        self._replace(replace(self._state, admin_job_filter=text))

    def filtered_companies(self) -> tuple[Company, ...]:
        needle = self._state.company_filter.strip().lower()
        if not needle:
            return tuple(self._state.companies)
        return tuple(c for c in self._state.companies if needle in c.name.lower())

    def filtered_admin_jobs(self) -> tuple[JobPosting, ...]:
        needle = self._state.admin_job_filter.strip().lower()
        if not needle:
            return tuple(self._state.admin_jobs)
        matched = []
        for job in self._state.admin_jobs:
            company_name = job.company.name.lower() if job.company is not None else ""
            if needle in job.title.lower() or needle in company_name:
                matched.append(job)
        return tuple(matched)

    def clear_user_data(self) -> None:
        self._replace(replace(self._state, applied_jobs=()))

    def subscribe(self, listener: CacheListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _replace(self, new_state: CacheState) -> None:
        if new_state == self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)
