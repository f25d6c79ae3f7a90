"""Audit request/response schemas."""

import html
import re
import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
)
from pydantic_core import PydanticCustomError

from roboaudit.models.enums import Detail, Quality, Safety, Truthfulness


def _rating(enum_cls: type[Enum], label: str):
    """Before-validator accepting only the enum's member values (whitespace trimmed)."""

    def validate(value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
        if not isinstance(value, str) or value not in {m.value for m in enum_cls}:
            raise PydanticCustomError("invalid_rating", f"Invalid {label} rating!")
        return value

    return BeforeValidator(validate)


# Escaped on top of what html.escape covers.
_EXTRA_ESCAPES = str.maketrans({"/": "&#x2F;", "\\": "&#x5C;", "`": "&#96;"})

_INT_PATTERN = re.compile(r"[-+]?(0|[1-9][0-9]*)")

# Largest value a BIGINT OFFSET/LIMIT accepts.
MAX_PAGE_VALUE = 2**63 - 1


def _escape(value: str) -> str:
    return html.escape(value).translate(_EXTRA_ESCAPES)


def _text(label: str):
    """Trim, reject empty, then escape HTML-unsafe characters."""

    def validate(value: str) -> str:
        value = value.strip()
        if not value:
            raise PydanticCustomError("empty_text", f"{label} must not be empty!")
        return _escape(value)

    return AfterValidator(validate)


def _audit_id(value: str) -> str:
    value = value.strip()
    try:
        parsed = uuid.UUID(value)
    except ValueError:
        parsed = None
    if (
        parsed is None
        or len(value) != 36
        or str(parsed) != value.lower()
        or parsed.version != 4
    ):
        raise PydanticCustomError("invalid_id", "Not a valid id!")
    return str(parsed)


def _bounded_int(minimum: int, message: str):
    def validate(value: Any) -> int:
        if isinstance(value, bool):
            raise PydanticCustomError("invalid_int", message)
        if isinstance(value, str):
            value = value.strip()
            if not _INT_PATTERN.fullmatch(value):
                raise PydanticCustomError("invalid_int", message)
            value = int(value)
        if not isinstance(value, int) or not minimum <= value <= MAX_PAGE_VALUE:
            raise PydanticCustomError("invalid_int", message)
        return value

    return BeforeValidator(validate)


TruthfulnessRating = Annotated[Truthfulness, _rating(Truthfulness, "truthfulness")]
DetailRating = Annotated[Detail, _rating(Detail, "detail")]
SafetyRating = Annotated[Safety, _rating(Safety, "safety")]
QualityRating = Annotated[Quality, _rating(Quality, "quality")]

AuditId = Annotated[str, AfterValidator(_audit_id)]
Offset = Annotated[int, _bounded_int(0, "Offset must be an integer >= 0!")]
Limit = Annotated[int, _bounded_int(1, "Limit must be an integer >= 1!")]


class CreateAuditRequest(BaseModel):
    """POST /audit request."""

    prompt: Annotated[str, _text("Prompt")]
    response: Annotated[str, _text("Response")]
    truthfulness: TruthfulnessRating
    detail: DetailRating
    safety: SafetyRating
    quality: QualityRating


class UpdateRatingRequest(BaseModel):
    """PATCH /audit/{id} request - any subset of the rating fields."""

    truthfulness: TruthfulnessRating | None = None
    detail: DetailRating | None = None
    safety: SafetyRating | None = None
    quality: QualityRating | None = None

    @field_validator("truthfulness", "detail", "safety", "quality", mode="before")
    @classmethod
    def reject_null(cls, value: Any, info: ValidationInfo) -> Any:
        # Fields are optional, but a field that is sent must carry a rating.
        if value is None:
            raise PydanticCustomError(
                "invalid_rating", f"Invalid {info.field_name} rating!"
            )
        return value

    def supplied_fields(self) -> dict[str, Any]:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class RubricRatingOut(BaseModel):
    """Rating as rendered inside an audit."""

    model_config = ConfigDict(from_attributes=True)

    truthfulness: Truthfulness
    detail: Detail
    safety: Safety
    quality: Quality
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AuditRecord(BaseModel):
    """An audit composed with its rating."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    prompt: str
    response: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    rubric_rating: RubricRatingOut = Field(serialization_alias="RubricRating")

    def render(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
