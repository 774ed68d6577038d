from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from domain.errors import MalformedPayload
from domain.utils import split_csv


class Role(str, Enum):
    """Roles a portal account can hold."""

    CANDIDATE = "candidate"
    ADMIN = "admin"


@dataclass(frozen=True)
class Profile:
    """Candidate-facing profile details attached to a user."""

    bio: str = ""
    skills: Sequence[str] = field(default_factory=tuple)
    resume_ref: str | None = None
    resume_name: str | None = None
    photo_ref: str | None = None

    @classmethod
    def from_payload(cls, data: Any) -> "Profile":
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise MalformedPayload("profile payload must be an object")
        return cls(
            bio=_optional_text(data.get("bio")) or "",
            skills=_text_tuple(data.get("skills")),
            resume_ref=_optional_text(data.get("resume")),
            resume_name=_optional_text(data.get("resumeOriginalName")),
            photo_ref=_optional_text(data.get("profilePhoto")),
        )


@dataclass(frozen=True)
class User:
    """
    Authenticated identity as returned by the portal service.

    Instances are only built from complete payloads, so a ``User`` held by
    the session store is never partial.
    """

    id: str
    fullname: str
    email: str
    role: Role
    phone_number: str | None = None
    profile: Profile = field(default_factory=Profile)

    @classmethod
    def from_payload(cls, data: Any) -> "User":
        if not isinstance(data, Mapping):
            raise MalformedPayload("user payload must be an object")
        raw_role = data.get("role")
        try:
            role = Role(raw_role)
        except ValueError:
            raise MalformedPayload(f"unknown role: {raw_role!r}") from None
        phone = data.get("phoneNumber")
        return cls(
            id=_entity_id(data, "user"),
            fullname=_required_text(data, "fullname", "user"),
            email=_required_text(data, "email", "user"),
            role=role,
            phone_number=str(phone) if phone not in (None, "") else None,
            profile=Profile.from_payload(data.get("profile")),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "_id": self.id,
            "fullname": self.fullname,
            "email": self.email,
            "phoneNumber": self.phone_number,
            "role": self.role.value,
            "profile": {
                "bio": self.profile.bio,
                "skills": list(self.profile.skills),
                "resume": self.profile.resume_ref,
                "resumeOriginalName": self.profile.resume_name,
                "profilePhoto": self.profile.photo_ref,
            },
        }


@dataclass(frozen=True)
class Session:
    """Client-side session: the current identity plus a loading flag."""

    identity: User | None = None
    is_loading: bool = False


@dataclass(frozen=True)
class Company:
    """A company registered by an admin. ``id`` is assigned by the service."""

    id: str
    name: str
    description: str = ""
    website: str = ""
    location: str = ""
    logo_ref: str | None = None

    @classmethod
    def from_payload(cls, data: Any) -> "Company":
        if not isinstance(data, Mapping):
            raise MalformedPayload("company payload must be an object")
        return cls(
            id=_entity_id(data, "company"),
            name=_required_text(data, "name", "company"),
            description=_optional_text(data.get("description")) or "",
            website=_optional_text(data.get("website")) or "",
            location=_optional_text(data.get("location")) or "",
            logo_ref=_optional_text(data.get("logo")),
        )


@dataclass(frozen=True)
class JobPosting:
    """A job listing. ``company`` is filled when the service populates it."""

    id: str
    title: str
    description: str = ""
    requirements: Sequence[str] = field(default_factory=tuple)
    salary: str = ""
    location: str = ""
    job_type: str = ""
    experience: str = ""
    positions: int = 1
    company_id: str | None = None
    company: Company | None = None
    applicant_ids: Sequence[str] = field(default_factory=tuple)
    created_at: str | None = None

    @classmethod
    def from_payload(cls, data: Any) -> "JobPosting":
        if not isinstance(data, Mapping):
            raise MalformedPayload("job payload must be an object")

        raw_company = data.get("company")
        company: Company | None = None
        company_id: str | None
        if isinstance(raw_company, Mapping):
            company = Company.from_payload(raw_company)
            company_id = company.id
        else:
            company_id = _optional_text(raw_company) or _optional_text(data.get("companyId"))

        raw_positions = data.get("position", data.get("positions", 1))
        try:
            positions = int(raw_positions)
        except (TypeError, ValueError, OverflowError):
            raise MalformedPayload(f"job position is not a number: {raw_positions!r}") from None

        raw_applications = data.get("applications") or ()
        if not isinstance(raw_applications, (list, tuple)):
            raise MalformedPayload("job applications must be a list")
        applicants = []
        for item in raw_applications:
            if isinstance(item, Mapping):
                applicant = item.get("applicant")
                if isinstance(applicant, Mapping):
                    applicant = applicant.get("_id", applicant.get("id"))
                if applicant:
                    applicants.append(str(applicant))
            elif item:
                applicants.append(str(item))

        return cls(
            id=_entity_id(data, "job"),
            title=_required_text(data, "title", "job"),
            description=_optional_text(data.get("description")) or "",
            requirements=_text_tuple(data.get("requirements")),
            salary=_optional_text(data.get("salary")) or "",
            location=_optional_text(data.get("location")) or "",
            job_type=_optional_text(data.get("jobType")) or "",
            experience=_optional_text(data.get("experienceLevel", data.get("experience"))) or "",
            positions=positions,
            company_id=company_id,
            company=company,
            applicant_ids=tuple(applicants),
            created_at=_optional_text(data.get("createdAt")),
        )

    def has_applicant(self, user_id: str) -> bool:
        return user_id in self.applicant_ids


@dataclass(frozen=True)
class JobApplication:
    """An entry of the candidate's applied-jobs list."""

    id: str
    status: str = "pending"
    job: JobPosting | None = None
    created_at: str | None = None

    @classmethod
    def from_payload(cls, data: Any) -> "JobApplication":
        if not isinstance(data, Mapping):
            raise MalformedPayload("application payload must be an object")
        raw_job = data.get("job")
        return cls(
            id=_entity_id(data, "application"),
            status=_optional_text(data.get("status")) or "pending",
            job=JobPosting.from_payload(raw_job) if isinstance(raw_job, Mapping) else None,
            created_at=_optional_text(data.get("createdAt")),
        )


@dataclass(frozen=True)
class UploadedFile:
    """A file picked on a form, held in memory until submission."""

    filename: str
    content_type: str
    content: bytes = b""

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: str) -> "UploadedFile":
        source = Path(path)
        content_type, _ = mimetypes.guess_type(source.name)
        return cls(
            filename=source.name,
            content_type=content_type or "application/octet-stream",
            content=source.read_bytes(),
        )


@dataclass(frozen=True)
class CacheState:
    """Snapshot of every server-owned collection mirrored on the client."""

    jobs: Sequence[JobPosting] = field(default_factory=tuple)
    admin_jobs: Sequence[JobPosting] = field(default_factory=tuple)
    companies: Sequence[Company] = field(default_factory=tuple)
    applied_jobs: Sequence[JobApplication] = field(default_factory=tuple)
    single_job: JobPosting | None = None
    single_company: Company | None = None
    search_query: str = ""
    company_filter: str = ""
    admin_job_filter: str = ""


@dataclass(frozen=True)
class ApiResponse:
    """Decoded response of the portal service."""

    status: int
    body: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "body", MappingProxyType(dict(self.body)))

    @property
    def success(self) -> bool:
        return self.body.get("success") is True

    @property
    def message(self) -> str | None:
        message = self.body.get("message")
        if isinstance(message, str) and message.strip():
            return message
        return None


@dataclass(frozen=True)
class AppConfig:
    """Application-level configuration loaded from config.json."""

    api_base_url: str
    request_timeout_seconds: float = 30.0
    persist_session: bool = False
    session_db_path: str = "job_portal_session.db"
    cookie_jar_path: str | None = None


def _entity_id(data: Mapping[str, Any], kind: str) -> str:
    value = data.get("_id", data.get("id"))
    if value in (None, ""):
        raise MalformedPayload(f"{kind} payload has no id")
    return str(value)


def _required_text(data: Mapping[str, Any], key: str, kind: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MalformedPayload(f"{kind} payload is missing {key!r}")
    return value


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def _text_tuple(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return split_csv(value)
    if not isinstance(value, (list, tuple)):
        raise MalformedPayload(f"expected a list of strings, got {type(value).__name__}")
    return tuple(str(item).strip() for item in value if str(item).strip())


__all__ = [
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
]
