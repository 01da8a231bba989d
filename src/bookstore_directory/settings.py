"""Configuration objects for the bookstore directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

DEFAULT_CSV_PATH = "src/data/bookstores.csv"
DEFAULT_SEARCH_KEYS = ("name", "address", "city", "province")
EARTH_RADIUS_KM = 6371.0


@dataclass(slots=True)
class IngestionSettings:
    """Settings that influence how the bookstore CSV is read."""

    csv_path: str = DEFAULT_CSV_PATH
    encoding: str = "utf-8-sig"


@dataclass(slots=True)
class SearchSettings:
    """Tuning for the fuzzy search index."""

    keys: Tuple[str, ...] = DEFAULT_SEARCH_KEYS
    # 0.0 is an exact match, 1.0 matches anything
    threshold: float = 0.3
    suggestion_limit: int = 5

    def __post_init__(self) -> None:
        self.keys = tuple(self.keys)
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"threshold must be between 0 and 1, got {self.threshold}")

    @property
    def min_similarity(self) -> float:
        """Return the threshold expressed on rapidfuzz's 0-100 similarity scale."""

        return (1.0 - self.threshold) * 100.0


@dataclass(slots=True)
class GeolocationSettings:
    """Settings used to resolve the user's location."""

    ip_provider_url: str = "https://ipapi.co/json/"
    geocoder_url: str = "https://nominatim.openstreetmap.org/search"
    email: Optional[str] = None
    timeout: float = 10.0
    user_agent: str = "bookstore-directory/0.1.0"
    extra_headers: Mapping[str, str] = field(default_factory=dict)

    def headers(self) -> Dict[str, str]:
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        headers.update(self.extra_headers)
        return headers

    def query_params(self, query: str) -> Dict[str, str]:
        params = {"format": "jsonv2", "q": query, "limit": "1"}
        if self.email:
            params["email"] = self.email
        return params


@dataclass(slots=True)
class DirectorySettings:
    """Composite settings structure for the directory."""

    ingestion: IngestionSettings = field(default_factory=IngestionSettings)
    search: SearchSettings = field(default_factory=SearchSettings)
    geolocation: GeolocationSettings = field(default_factory=GeolocationSettings)
    output_path: Optional[str] = None
    deduplicate: bool = True

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "DirectorySettings":
        """Build settings from a parsed JSON config with optional sections."""

        return cls(
            ingestion=IngestionSettings(**dict(config.get("ingestion", {}))),
            search=SearchSettings(**dict(config.get("search", {}))),
            geolocation=GeolocationSettings(**dict(config.get("geolocation", {}))),
            output_path=config.get("output_path"),
            deduplicate=config.get("deduplicate", True),
        )


def default_output_fields() -> Iterable[str]:
    """Return the column names used when exporting to CSV."""

    return [
        "place_id",
        "name",
        "description",
        "address",
        "city",
        "province",
        "zip",
        "formatted_address",
        "phone",
        "website",
        "email",
        "lat",
        "lng",
        "rating",
        "num_reviews",
        "price_level",
        "status",
        "monday",
        "tuesday",
        "wednesday",
        "thursday",
        "friday",
        "saturday",
        "sunday",
        "photos_url",
        "place_url",
        "street_view",
    ]
