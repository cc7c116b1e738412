"""Per-category field schemas and payload validation.

Every achievement carries a category tag plus a sparse ``details`` payload.
The registry below fixes, per category, which payload fields exist, which
are required, and what kind of value each holds. ``validate_details`` is run
before any write: it rejects missing required fields and any field that
belongs to a different category, and returns the normalized payload that is
persisted.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional, Sequence
from urllib.parse import urlparse

from ..core.errors import ValidationError
from ..models import AchievementCategory


class FieldKind(str, enum.Enum):
    """Value kinds a payload field may hold."""

    SHORT_TEXT = "short_text"
    LONG_TEXT = "long_text"
    URL = "url"
    DATE = "date"
    ENUM = "enum"
    STRING_SET = "string_set"
    CURRENCY = "currency"


QUALITY_RANKS = ("Q1", "Q2", "Q3", "Q4")
PATENT_STATUSES = ("Filed", "Published", "Granted", "Technology Transferred")
PROJECT_STATUSES = ("Ongoing", "Completed")

SHORT_TEXT_LIMIT = 500
LONG_TEXT_LIMIT = 5000


@dataclass(frozen=True)
class FieldSpec:
    """One payload field of a category."""

    name: str
    kind: FieldKind
    required: bool = False
    choices: Sequence[str] = ()

    def normalize(self, value: Any) -> Any:
        """Return the stored form of ``value`` or raise ``ValidationError``."""

        normalizer = _NORMALIZERS[self.kind]
        return normalizer(self, value)


@dataclass(frozen=True)
class CategorySchema:
    """Ordered field list for one category."""

    category: AchievementCategory
    label: str
    fields: Sequence[FieldSpec] = field(default_factory=tuple)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.fields)

    def describe(self) -> list[tuple[str, bool, FieldKind]]:
        """Return ``(field, required, kind)`` triples in form order."""

        return [(spec.name, spec.required, spec.kind) for spec in self.fields]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def _text(limit: int):
    def normalize(spec: FieldSpec, value: Any) -> str:
        if not isinstance(value, str):
            raise ValidationError(spec.name, f"{spec.name} must be text.")
        cleaned = value.strip()
        if len(cleaned) > limit:
            raise ValidationError(spec.name, f"{spec.name} exceeds {limit} characters.")
        return cleaned

    return normalize


def _url(spec: FieldSpec, value: Any) -> str:
    if not isinstance(value, str):
        raise ValidationError(spec.name, f"{spec.name} must be a URL.")
    cleaned = value.strip()
    parsed = urlparse(cleaned)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(spec.name, f"{spec.name} must start with http:// or https://.")
    return cleaned


def _iso_date(spec: FieldSpec, value: Any) -> str:
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise ValidationError(spec.name, f"{spec.name} must be an ISO date (YYYY-MM-DD).")
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError as exc:
        raise ValidationError(spec.name, f"{spec.name} must be an ISO date (YYYY-MM-DD).") from exc


def _choice(spec: FieldSpec, value: Any) -> str:
    cleaned = value.strip() if isinstance(value, str) else value
    if cleaned not in spec.choices:
        raise ValidationError(spec.name, f"{spec.name} must be one of: {', '.join(spec.choices)}.")
    return cleaned


def _string_set(spec: FieldSpec, value: Any) -> list[str]:
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise ValidationError(spec.name, f"{spec.name} must be a list of strings.")
    seen: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValidationError(spec.name, f"{spec.name} must be a list of strings.")
        cleaned = item.strip()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


def _currency(spec: FieldSpec, value: Any) -> str:
    if isinstance(value, bool):
        raise ValidationError(spec.name, f"{spec.name} must be a non-negative amount.")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(spec.name, f"{spec.name} must be a non-negative amount.") from exc
    if not amount.is_finite() or amount < 0:
        raise ValidationError(spec.name, f"{spec.name} must be a non-negative amount.")
    return str(amount.quantize(Decimal("0.01")))


_NORMALIZERS = {
    FieldKind.SHORT_TEXT: _text(SHORT_TEXT_LIMIT),
    FieldKind.LONG_TEXT: _text(LONG_TEXT_LIMIT),
    FieldKind.URL: _url,
    FieldKind.DATE: _iso_date,
    FieldKind.ENUM: _choice,
    FieldKind.STRING_SET: _string_set,
    FieldKind.CURRENCY: _currency,
}


def _indexed_publication_fields() -> tuple[FieldSpec, ...]:
    # Journal articles, conference papers and books must state indexing and rank.
    return (
        FieldSpec("indexed_in", FieldKind.STRING_SET, required=True),
        FieldSpec("q_ranking", FieldKind.ENUM, required=True, choices=QUALITY_RANKS),
    )


CATEGORY_SCHEMAS: dict[AchievementCategory, CategorySchema] = {
    schema.category: schema
    for schema in (
        CategorySchema(
            AchievementCategory.JOURNAL_ARTICLE,
            "Journal Articles",
            (
                FieldSpec("doi", FieldKind.SHORT_TEXT, required=True),
                FieldSpec("journal_name", FieldKind.SHORT_TEXT, required=True),
                FieldSpec("issn", FieldKind.SHORT_TEXT),
                FieldSpec("publisher", FieldKind.SHORT_TEXT),
                FieldSpec("journal_link", FieldKind.URL),
                FieldSpec("year_of_publication", FieldKind.SHORT_TEXT),
                *_indexed_publication_fields(),
            ),
        ),
        CategorySchema(
            AchievementCategory.CONFERENCE_PAPER,
            "Conference Papers",
            (
                FieldSpec("conference_name", FieldKind.SHORT_TEXT, required=True),
                FieldSpec("conference_date", FieldKind.DATE, required=True),
                FieldSpec("proceedings_publisher", FieldKind.SHORT_TEXT),
                FieldSpec("doi", FieldKind.SHORT_TEXT),
                FieldSpec("paper_link", FieldKind.URL),
                *_indexed_publication_fields(),
            ),
        ),
        CategorySchema(
            AchievementCategory.BOOK_CHAPTER,
            "Books & Book Chapters",
            (
                FieldSpec("book_title", FieldKind.SHORT_TEXT, required=True),
                FieldSpec("publisher", FieldKind.SHORT_TEXT, required=True),
                FieldSpec("chapter_title", FieldKind.SHORT_TEXT),
                FieldSpec("isbn", FieldKind.SHORT_TEXT),
                FieldSpec("year_of_publication", FieldKind.SHORT_TEXT),
                FieldSpec("book_drive_link", FieldKind.URL),
                *_indexed_publication_fields(),
            ),
        ),
        CategorySchema(
            AchievementCategory.PATENT,
            "Patents",
            (
                FieldSpec("patent_number", FieldKind.SHORT_TEXT, required=True),
                FieldSpec("patent_office", FieldKind.SHORT_TEXT, required=True),
                FieldSpec("patent_status", FieldKind.ENUM, required=True, choices=PATENT_STATUSES),
                FieldSpec("filing_date", FieldKind.DATE),
                FieldSpec("grant_date", FieldKind.DATE),
                FieldSpec("patent_link", FieldKind.URL),
            ),
        ),
        CategorySchema(
            AchievementCategory.RESEARCH_COLLABORATION,
            "Research Collaborations",
            (
                FieldSpec("partner_institutions", FieldKind.SHORT_TEXT, required=True),
                FieldSpec("collaboration_details", FieldKind.LONG_TEXT),
                FieldSpec("research_area", FieldKind.SHORT_TEXT),
            ),
        ),
        CategorySchema(
            AchievementCategory.AWARD_RECOGNITION,
            "Awards & Recognitions",
            (
                FieldSpec("award_name", FieldKind.SHORT_TEXT, required=True),
                FieldSpec("awarding_body", FieldKind.SHORT_TEXT, required=True),
                FieldSpec("award_type", FieldKind.SHORT_TEXT),
                FieldSpec("certificate_link", FieldKind.URL),
            ),
        ),
        CategorySchema(
            AchievementCategory.CONSULTANCY_FUNDED_PROJECT,
            "Consultancy & Funded Projects",
            (
                FieldSpec("project_title", FieldKind.SHORT_TEXT, required=True),
                FieldSpec("funding_agency", FieldKind.SHORT_TEXT, required=True),
                FieldSpec("client_organization", FieldKind.SHORT_TEXT),
                FieldSpec("funding_amount", FieldKind.CURRENCY),
                FieldSpec("funding_details", FieldKind.LONG_TEXT),
                FieldSpec("project_duration_start", FieldKind.DATE),
                FieldSpec("project_duration_end", FieldKind.DATE),
                FieldSpec("project_status", FieldKind.ENUM, choices=PROJECT_STATUSES),
                FieldSpec("project_details_link", FieldKind.URL),
            ),
        ),
        CategorySchema(
            AchievementCategory.STARTUP_CENTER,
            "Startups & Centers of Excellence",
            (
                FieldSpec("startup_center_name", FieldKind.SHORT_TEXT, required=True),
                FieldSpec("domain", FieldKind.SHORT_TEXT),
                FieldSpec("organization", FieldKind.SHORT_TEXT),
                FieldSpec("website_link", FieldKind.URL),
            ),
        ),
        CategorySchema(
            AchievementCategory.OTHER,
            "Others",
            (
                FieldSpec("organization", FieldKind.SHORT_TEXT),
                FieldSpec("proof_link", FieldKind.URL),
            ),
        ),
    )
}


def get_schema(category: AchievementCategory | str) -> CategorySchema:
    """Return the schema registered for ``category``."""

    try:
        return CATEGORY_SCHEMAS[AchievementCategory(category)]
    except ValueError as exc:
        raise ValidationError("category", f"Unknown achievement category: {category}") from exc


def describe(category: AchievementCategory | str) -> list[tuple[str, bool, FieldKind]]:
    """Return the ordered ``(field, required, kind)`` list for a category."""

    return get_schema(category).describe()


def validate_details(
    category: AchievementCategory | str,
    details: Optional[Mapping[str, Any]],
) -> dict[str, Any]:
    """Validate a category payload and return its normalized form.

    Required fields are checked in schema order, then fields foreign to the
    category; the first offender is named in the raised ``ValidationError``.
    Empty optional fields are dropped so absent and blank are stored alike.
    """

    schema = get_schema(category)
    payload = dict(details or {})

    for spec in schema.fields:
        if spec.required and _is_empty(payload.get(spec.name)):
            raise ValidationError(spec.name, f"{spec.name} is required for {schema.label}.")

    allowed = set(schema.field_names)
    for name, value in payload.items():
        if name not in allowed and not _is_empty(value):
            raise ValidationError(name, f"{name} does not belong to {schema.label}.")

    normalized: dict[str, Any] = {}
    for spec in schema.fields:
        value = payload.get(spec.name)
        if _is_empty(value):
            continue
        cleaned = spec.normalize(value)
        if _is_empty(cleaned):
            if spec.required:
                raise ValidationError(spec.name, f"{spec.name} is required for {schema.label}.")
            continue
        normalized[spec.name] = cleaned
    return normalized
