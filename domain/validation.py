"""
Declarative form validation.

A ``Schema`` is an ordered set of ``FieldSpec``s. Each field has a semantic
``FieldType``: raw input is parsed into that type first and the field's rules
then run against the parsed value, so ``"3"`` reaches a numeric rule as ``3``.
The first failing rule of a field produces that field's message.
"""

from __future__ import annotations

import re
import urllib.parse
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Sequence

from domain.models import Company, UploadedFile

MAX_IMAGE_BYTES = 5 * 1024 * 1024

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_PATTERN = re.compile(r"^\d{10}$")


class FieldType(str, Enum):
    TEXT = "text"
    INTEGER = "integer"
    FILE = "file"


@dataclass(frozen=True)
class ValidationContext:
    """Client-side state some rules need, e.g. the cached company list."""

    companies: Sequence[Company] = field(default_factory=tuple)


Rule = Callable[[Any, ValidationContext], "str | None"]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def required(message: str) -> Rule:
    def rule(value: Any, context: ValidationContext) -> str | None:
        return message if _is_blank(value) else None

    return rule


def email(message: str = "Invalid email") -> Rule:
    def rule(value: Any, context: ValidationContext) -> str | None:
        if _is_blank(value):
            return None
        return None if _EMAIL_PATTERN.match(str(value).strip()) else message

    return rule


def matches(pattern: re.Pattern[str], message: str) -> Rule:
    def rule(value: Any, context: ValidationContext) -> str | None:
        if _is_blank(value):
            return None
        return None if pattern.match(str(value).strip()) else message

    return rule


def url(message: str = "Invalid URL") -> Rule:
    def rule(value: Any, context: ValidationContext) -> str | None:
        if _is_blank(value):
            return None
        parsed = urllib.parse.urlparse(str(value).strip())
        if parsed.scheme in ("http", "https") and parsed.netloc and "." in parsed.netloc:
            return None
        return message

    return rule


def min_length(limit: int, message: str) -> Rule:
    def rule(value: Any, context: ValidationContext) -> str | None:
        if _is_blank(value):
            return None
        return message if len(str(value)) < limit else None

    return rule


def max_length(limit: int, message: str) -> Rule:
    def rule(value: Any, context: ValidationContext) -> str | None:
        if _is_blank(value):
            return None
        return message if len(str(value)) > limit else None

    return rule


def positive_integer(message: str) -> Rule:
    def rule(value: Any, context: ValidationContext) -> str | None:
        if value is None:
            return None
        return message if not isinstance(value, int) or value <= 0 else None

    return rule


def one_of(choices: Iterable[str], message: str) -> Rule:
    allowed = frozenset(choices)

    def rule(value: Any, context: ValidationContext) -> str | None:
        if _is_blank(value):
            return None
        return None if value in allowed else message

    return rule


def file_types(allowed: Iterable[str], message: str) -> Rule:
    """Allow-list of MIME types; entries ending in ``/*`` match a family."""
    patterns = tuple(allowed)

    def rule(value: Any, context: ValidationContext) -> str | None:
        if value is None:
            return None
        content_type = value.content_type.lower()
        for pattern in patterns:
            if pattern.endswith("/*") and content_type.startswith(pattern[:-1]):
                return None
            if content_type == pattern:
                return None
        return message

    return rule


def max_file_size(limit: int, message: str = "File is too large") -> Rule:
    def rule(value: Any, context: ValidationContext) -> str | None:
        if value is None:
            return None
        return message if value.size > limit else None

    return rule


def known_company(message: str = "Please register a company first") -> Rule:
    def rule(value: Any, context: ValidationContext) -> str | None:
        if _is_blank(value):
            return None
        if any(company.id == value for company in context.companies):
            return None
        return message

    return rule


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    type: FieldType = FieldType.TEXT
    rules: Sequence[Rule] = field(default_factory=tuple)
    is_list: bool = False
    strip: bool = True

    def parse(self, raw: Any) -> tuple[Any, str | None]:
        """Convert raw input to the field's type. Returns ``(value, error)``."""
        if self.type is FieldType.FILE:
            if raw is None or raw == "":
                return None, None
            if not isinstance(raw, UploadedFile):
                return None, f"{self.label} must be a file"
            return raw, None

        if self.type is FieldType.INTEGER:
            if _is_blank(raw):
                return None, None
            if isinstance(raw, bool):
                return None, f"{self.label} must be a number"
            if isinstance(raw, int):
                return raw, None
            try:
                number = float(str(raw).strip())
            except ValueError:
                return None, f"{self.label} must be a number"
            if not number.is_integer():
                return None, f"{self.label} must be an integer"
            return int(number), None

        if raw is None:
            return "", None
        if isinstance(raw, (list, tuple)):
            return ", ".join(str(item) for item in raw), None
        return str(raw), None

    def check(self, raw: Any, context: ValidationContext) -> str | None:
        value, error = self.parse(raw)
        if error is not None:
            return error
        for rule in self.rules:
            message = rule(value, context)
            if message is not None:
                return message
        return None


class Schema:
    """Ordered collection of field specs for one form."""

    def __init__(self, fields: Sequence[FieldSpec]) -> None:
        self._fields = tuple(fields)
        self._by_name = {spec.name: spec for spec in self._fields}

    @property
    def fields(self) -> tuple[FieldSpec, ...]:
        return self._fields

    @property
    def has_file_field(self) -> bool:
        return any(spec.type is FieldType.FILE for spec in self._fields)

    def get_field(self, name: str) -> FieldSpec:
        return self._by_name[name]

    def validate(
        self,
        values: Mapping[str, Any],
        context: ValidationContext | None = None,
    ) -> dict[str, str]:
        context = context or ValidationContext()
        errors: dict[str, str] = {}
        for spec in self._fields:
            message = spec.check(values.get(spec.name), context)
            if message is not None:
                errors[spec.name] = message
        return errors

    def validate_field(
        self,
        name: str,
        values: Mapping[str, Any],
        context: ValidationContext | None = None,
    ) -> str | None:
        return self._by_name[name].check(values.get(name), context or ValidationContext())

    def parse(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Typed values for serialization. Call only after ``validate`` passed."""
        parsed: dict[str, Any] = {}
        for spec in self._fields:
            value, _ = spec.parse(values.get(spec.name))
            if isinstance(value, str) and spec.strip:
                value = value.strip()
            parsed[spec.name] = value
        return parsed


__all__ = [
    "MAX_IMAGE_BYTES",
    "PHONE_PATTERN",
    "FieldType",
    "FieldSpec",
    "Schema",
    "ValidationContext",
    "Rule",
    "required",
    "email",
    "matches",
    "url",
    "min_length",
    "max_length",
    "positive_integer",
    "one_of",
    "file_types",
    "max_file_size",
    "known_company",
]
