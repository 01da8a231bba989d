"""
Pydantic validation model for one row of the bookstore CSV.
Validates shape only; numeric-looking fields stay text until normalization.
"""
from __future__ import annotations

from typing import Any, List, Mapping, Optional, Tuple

import pydantic
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

REQUIRED_FIELDS = ("name", "address", "city", "province", "zip", "lat", "lng", "place_id")
REVIEW_SLOTS = range(1, 6)


class SchemaError(ValueError):
    """Raised when a row does not match the bookstore record shape."""

    def __init__(self, message: str, errors: Optional[List[dict]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, exc: pydantic.ValidationError) -> "SchemaError":
        details = exc.errors(include_url=False)
        parts = []
        for item in details:
            location = ".".join(str(part) for part in item["loc"]) or "row"
            parts.append(f"{location}: {item['msg']}")
        return cls("; ".join(parts), details)


class RawBookstoreRecord(BaseModel):
    """Schema for a single row of bookstore CSV data."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    # Basic info
    name: str
    description: Optional[str] = None
    address: str
    city: str
    province: str
    zip: str
    phone: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None

    # Location
    lat: str
    lng: str

    # Business data
    rating: Optional[str] = None
    num_reviews: Optional[str] = None
    price_level: Optional[str] = None

    # Google integration
    place_id: str
    place_url: Optional[str] = None
    photos_url: Optional[str] = None
    street_view: Optional[str] = None

    # Status and hours
    status: Optional[str] = None
    mon_hours: Optional[str] = None
    tue_hours: Optional[str] = None
    wed_hours: Optional[str] = None
    thu_hours: Optional[str] = None
    fri_hours: Optional[str] = None
    sat_hours: Optional[str] = None
    sun_hours: Optional[str] = None

    # Reviews
    review1_author: Optional[str] = None
    review1_rating: Optional[str] = None
    review1_time: Optional[str] = None
    review1_text: Optional[str] = None
    review2_author: Optional[str] = None
    review2_rating: Optional[str] = None
    review2_time: Optional[str] = None
    review2_text: Optional[str] = None
    review3_author: Optional[str] = None
    review3_rating: Optional[str] = None
    review3_time: Optional[str] = None
    review3_text: Optional[str] = None
    review4_author: Optional[str] = None
    review4_rating: Optional[str] = None
    review4_time: Optional[str] = None
    review4_text: Optional[str] = None
    review5_author: Optional[str] = None
    review5_rating: Optional[str] = None
    review5_time: Optional[str] = None
    review5_text: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def blank_optional_to_none(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        cleaned = dict(data)
        for key, value in data.items():
            if key in REQUIRED_FIELDS:
                continue
            if isinstance(value, str) and not value.strip():
                cleaned[key] = None
        return cleaned

    @field_validator("place_id")
    @classmethod
    def place_id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("place_id must not be blank")
        return value

    def review_group(self, index: int) -> Tuple[Optional[str], Optional[str], Optional[str], Optional[str]]:
        """Return ``(author, rating, time, text)`` for review slot ``index``."""

        if index not in REVIEW_SLOTS:
            raise IndexError(f"review slot must be 1-5, got {index}")
        return (
            getattr(self, f"review{index}_author"),
            getattr(self, f"review{index}_rating"),
            getattr(self, f"review{index}_time"),
            getattr(self, f"review{index}_text"),
        )


def validate_row(row: Mapping[str, Any]) -> RawBookstoreRecord:
    """Validate one CSV row mapping, raising ``SchemaError`` on a shape mismatch."""

    if not isinstance(row, Mapping):
        raise SchemaError(f"Row must be a mapping of column names to values, got {type(row).__name__}")
    try:
        return RawBookstoreRecord.model_validate(dict(row))
    except pydantic.ValidationError as exc:
        raise SchemaError.from_pydantic(exc) from exc
