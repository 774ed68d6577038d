"""
Definitions of every create/update form of the portal.

Each ``FormSpec`` tells the submission pipeline which schema to validate
against, where to send the body, which single store mutation to apply with
the response payload, and where to go afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from domain.models import Role
from domain.utils import path_segment
from domain.validation import (
    MAX_IMAGE_BYTES,
    PHONE_PATTERN,
    FieldSpec,
    FieldType,
    Schema,
    email,
    file_types,
    known_company,
    matches,
    max_file_size,
    max_length,
    min_length,
    one_of,
    positive_integer,
    required,
    url,
)

DEFAULT_ERROR_MESSAGE = "An error occurred"

_ROLES = tuple(role.value for role in Role)


class BodyEncoding(str, Enum):
    JSON = "json"
    MULTIPART = "multipart"


class SuccessEffect(str, Enum):
    """The one store mutation a successful submission performs."""

    NONE = "none"
    SET_IDENTITY = "set_identity"
    UPSERT_COMPANY = "upsert_company"
    UPSERT_JOB = "upsert_job"


@dataclass(frozen=True)
class FormSpec:
    name: str
    schema: Schema
    method: str
    path: str
    success_message: str
    effect: SuccessEffect = SuccessEffect.NONE
    result_key: str | None = None
    result_required: bool = False
    redirect: str | None = None
    fallback_error: str = DEFAULT_ERROR_MESSAGE
    tracks_session_loading: bool = False

    @property
    def encoding(self) -> BodyEncoding:
        if self.schema.has_file_field:
            return BodyEncoding.MULTIPART
        return BodyEncoding.JSON

    def resolve_path(self, path_params: Mapping[str, str]) -> str:
        return self.path.format(**{key: path_segment(value) for key, value in path_params.items()})

    def resolve_redirect(
        self,
        path_params: Mapping[str, str],
        result_id: str | None,
    ) -> str | None:
        if self.redirect is None:
            return None
        return self.redirect.format(**path_params, result_id=result_id or "")


LOGIN_FORM = FormSpec(
    name="login",
    schema=Schema(
        [
            FieldSpec(
                "email",
                "Email",
                rules=(required("Email is required"), email("Invalid email")),
            ),
            FieldSpec(
                "password",
                "Password",
                rules=(required("Password is required"),),
                strip=False,
            ),
            FieldSpec(
                "role",
                "Role",
                rules=(required("Role is required"), one_of(_ROLES, "Invalid role")),
            ),
        ]
    ),
    method="POST",
    path="/user/login",
    success_message="Logged in",
    effect=SuccessEffect.SET_IDENTITY,
    result_key="user",
    result_required=True,
    redirect="/",
    tracks_session_loading=True,
)

SIGNUP_FORM = FormSpec(
    name="signup",
    schema=Schema(
        [
            FieldSpec("fullname", "Full name", rules=(required("Full name is required"),)),
            FieldSpec(
                "email",
                "Email",
                rules=(required("Email is required"), email("Invalid email")),
            ),
            FieldSpec(
                "phoneNumber",
                "Phone number",
                rules=(
                    required("Phone number is required"),
                    matches(PHONE_PATTERN, "Phone number must be 10 digits"),
                ),
            ),
            FieldSpec(
                "password",
                "Password",
                rules=(
                    required("Password is required"),
                    min_length(6, "Password must be at least 6 characters"),
                ),
                strip=False,
            ),
            FieldSpec(
                "role",
                "Role",
                rules=(required("Role is required"), one_of(_ROLES, "Invalid role")),
            ),
            FieldSpec(
                "file",
                "Profile photo",
                type=FieldType.FILE,
                rules=(
                    file_types(("image/*",), "Only image files are allowed"),
                    max_file_size(MAX_IMAGE_BYTES, "File is too large"),
                ),
            ),
        ]
    ),
    method="POST",
    path="/user/register",
    success_message="Account created",
    effect=SuccessEffect.SET_IDENTITY,
    result_key="user",
    redirect="/login",
    tracks_session_loading=True,
)

PROFILE_UPDATE_FORM = FormSpec(
    name="profile_update",
    schema=Schema(
        [
            FieldSpec("fullname", "Full name", rules=(required("Full name is required"),)),
            FieldSpec(
                "email",
                "Email",
                rules=(required("Email is required"), email("Invalid email")),
            ),
            FieldSpec(
                "phoneNumber",
                "Phone number",
                rules=(required("Phone number is required"),),
            ),
            FieldSpec("bio", "Bio", rules=(required("Bio is required"),)),
            FieldSpec(
                "skills",
                "Skills",
                rules=(required("Skills are required"),),
                is_list=True,
            ),
            FieldSpec(
                "file",
                "Resume",
                type=FieldType.FILE,
                rules=(file_types(("application/pdf",), "Only PDF files are allowed"),),
            ),
        ]
    ),
    method="POST",
    path="/user/profile/update",
    success_message="Profile updated",
    effect=SuccessEffect.SET_IDENTITY,
    result_key="user",
    result_required=True,
)

COMPANY_CREATE_FORM = FormSpec(
    name="company_create",
    schema=Schema(
        [
            FieldSpec(
                "companyName",
                "Company name",
                rules=(
                    required("Company name is required"),
                    min_length(2, "Company name must be at least 2 characters"),
                    max_length(50, "Company name must be less than 50 characters"),
                ),
            ),
        ]
    ),
    method="POST",
    path="/company/register",
    success_message="Company registered",
    effect=SuccessEffect.UPSERT_COMPANY,
    result_key="company",
    result_required=True,
    redirect="/admin/companies/{result_id}",
    fallback_error="Failed to create company. Please try again.",
)

COMPANY_SETUP_FORM = FormSpec(
    name="company_setup",
    schema=Schema(
        [
            FieldSpec("name", "Company name", rules=(required("Company name is required"),)),
            FieldSpec(
                "description",
                "Description",
                rules=(required("Description is required"),),
            ),
            FieldSpec(
                "website",
                "Website",
                rules=(required("Website is required"), url("Invalid URL")),
            ),
            FieldSpec("location", "Location", rules=(required("Location is required"),)),
            FieldSpec(
                "file",
                "Logo",
                type=FieldType.FILE,
                rules=(
                    file_types(("image/*",), "Only image files are allowed"),
                    max_file_size(MAX_IMAGE_BYTES, "File is too large"),
                ),
            ),
        ]
    ),
    method="PUT",
    path="/company/update/{id}",
    success_message="Company information updated",
    effect=SuccessEffect.UPSERT_COMPANY,
    result_key="company",
    redirect="/admin/companies",
)

POST_JOB_FORM = FormSpec(
    name="post_job",
    schema=Schema(
        [
            FieldSpec("title", "Title", rules=(required("Title is required"),)),
            FieldSpec(
                "description",
                "Description",
                rules=(required("Description is required"),),
            ),
            FieldSpec(
                "requirements",
                "Requirements",
                rules=(required("Requirements are required"),),
            ),
            FieldSpec("salary", "Salary", rules=(required("Salary is required"),)),
            FieldSpec("location", "Location", rules=(required("Location is required"),)),
            FieldSpec("jobType", "Job type", rules=(required("Job type is required"),)),
            FieldSpec(
                "experience",
                "Experience level",
                rules=(required("Experience level is required"),),
            ),
            FieldSpec(
                "position",
                "Position",
                type=FieldType.INTEGER,
                rules=(
                    required("Number of positions is required"),
                    positive_integer("Position must be a positive integer"),
                ),
            ),
            FieldSpec(
                "companyId",
                "Company",
                rules=(
                    required("Company is required"),
                    known_company("Please register a company first, before posting a job"),
                ),
            ),
        ]
    ),
    method="POST",
    path="/job/post",
    success_message="Job posted",
    effect=SuccessEffect.UPSERT_JOB,
    result_key="job",
    redirect="/admin/jobs",
)

FORMS: Mapping[str, FormSpec] = {
    spec.name: spec
    for spec in (
        LOGIN_FORM,
        SIGNUP_FORM,
        PROFILE_UPDATE_FORM,
        COMPANY_CREATE_FORM,
        COMPANY_SETUP_FORM,
        POST_JOB_FORM,
    )
}


__all__ = [
    "DEFAULT_ERROR_MESSAGE",
    "BodyEncoding",
    "SuccessEffect",
    "FormSpec",
    "FORMS",
    "LOGIN_FORM",
    "SIGNUP_FORM",
    "PROFILE_UPDATE_FORM",
    "COMPANY_CREATE_FORM",
    "COMPANY_SETUP_FORM",
    "POST_JOB_FORM",
]
