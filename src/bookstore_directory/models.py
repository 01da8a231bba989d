"""Data models used throughout the bookstore directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from .schema import RawBookstoreRecord

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class StoreStatus(str, Enum):
    """Business status reported for a bookstore."""

    OPERATIONAL = "OPERATIONAL"
    CLOSED_TEMPORARILY = "CLOSED_TEMPORARILY"
    CLOSED_PERMANENTLY = "CLOSED_PERMANENTLY"

    @classmethod
    def from_raw(cls, value: Optional[str]) -> "StoreStatus":
        """Map a raw status string, falling back to ``OPERATIONAL``.

        Matching is exact and case-sensitive.
        """

        if value == cls.CLOSED_TEMPORARILY.value:
            return cls.CLOSED_TEMPORARILY
        if value == cls.CLOSED_PERMANENTLY.value:
            return cls.CLOSED_PERMANENTLY
        return cls.OPERATIONAL


@dataclass(slots=True, frozen=True)
class Coordinates:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.lat, self.lng)


@dataclass(slots=True, frozen=True)
class Review:
    author: str
    rating: Optional[float]
    time: str
    text: str


@dataclass(slots=True)
class RatingInfo:
    rating: float
    num_reviews: int = 0
    reviews: List[Review] = field(default_factory=list)


@dataclass(slots=True)
class ProcessedBookstore:
    """Normalized, display-ready representation of a bookstore."""

    name: str
    address: str
    city: str
    province: str
    zip: str
    lat: str
    lng: str
    place_id: str
    formatted_address: str
    description: Optional[str] = None
    phone: str = ""
    website: str = ""
    email: str = ""
    coordinates: Optional[Coordinates] = None
    rating_info: Optional[RatingInfo] = None
    price_level: Optional[int] = None
    hours: Dict[str, str] = field(default_factory=dict)
    status: StoreStatus = StoreStatus.OPERATIONAL
    photos_url: str = ""
    place_url: Optional[str] = None
    street_view: Optional[str] = None

    @property
    def has_website(self) -> bool:
        return bool(self.website)

    @property
    def rating(self) -> Optional[float]:
        return self.rating_info.rating if self.rating_info else None

    def as_dict(self) -> Dict[str, Any]:
        """Return the bookstore as JSON-compatible primitives."""

        return {
            "place_id": self.place_id,
            "name": self.name,
            "description": self.description,
            "address": self.address,
            "city": self.city,
            "province": self.province,
            "zip": self.zip,
            "formatted_address": self.formatted_address,
            "phone": self.phone,
            "website": self.website,
            "email": self.email,
            "lat": self.lat,
            "lng": self.lng,
            "coordinates": (
                {"lat": self.coordinates.lat, "lng": self.coordinates.lng} if self.coordinates else None
            ),
            "rating_info": (
                {
                    "rating": self.rating_info.rating,
                    "num_reviews": self.rating_info.num_reviews,
                    "reviews": [
                        {"author": r.author, "rating": r.rating, "time": r.time, "text": r.text}
                        for r in self.rating_info.reviews
                    ],
                }
                if self.rating_info
                else None
            ),
            "price_level": self.price_level,
            "hours": dict(self.hours),
            "status": self.status.value,
            "photos_url": self.photos_url,
            "place_url": self.place_url,
            "street_view": self.street_view,
        }

    def as_row(self) -> List[str]:
        """Return the bookstore as a CSV row using primitive types."""

        return [
            self.place_id,
            self.name,
            self.description or "",
            self.address,
            self.city,
            self.province,
            self.zip,
            self.formatted_address,
            self.phone,
            self.website,
            self.email,
            self.lat,
            self.lng,
            "" if self.rating_info is None else f"{self.rating_info.rating:.1f}",
            "" if self.rating_info is None else str(self.rating_info.num_reviews),
            "" if self.price_level is None else str(self.price_level),
            self.status.value,
            *(self.hours.get(day, "") for day in WEEKDAYS),
            self.photos_url,
            self.place_url or "",
            self.street_view or "",
        ]


@dataclass(slots=True, frozen=True)
class ValidationError:
    """A CSV row that could not be turned into a raw bookstore record."""

    row: int
    data: Optional[Dict[str, str]]
    error: str


@dataclass(slots=True)
class ParseResult:
    """Outcome of one ingestion pass over a CSV file."""

    records: List["RawBookstoreRecord"] = field(default_factory=list)
    errors: List[ValidationError] = field(default_factory=list)
