"""Province/city grouping and URL slugs for bookstore listing pages."""

from __future__ import annotations

import re
from collections import Counter, OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .models import ProcessedBookstore

PROVINCE_CODES: Dict[str, str] = {
    "Ontario": "ON",
    "British Columbia": "BC",
    "Alberta": "AB",
    "Quebec": "QC",
    "Nova Scotia": "NS",
    "New Brunswick": "NB",
    "Manitoba": "MB",
    "Saskatchewan": "SK",
    "Prince Edward Island": "PE",
    "Newfoundland and Labrador": "NL",
    "Northwest Territories": "NT",
    "Nunavut": "NU",
    "Yukon": "YT",
}
_PROVINCE_NAMES = {code: name for name, code in PROVINCE_CODES.items()}

_NON_WORD_RE = re.compile(r"[^\w\-]+")
_SPACE_RE = re.compile(r"\s+")
_HYPHENS_RE = re.compile(r"-{2,}")


@dataclass(slots=True)
class CityInfo:
    name: str
    province: str
    province_code: str
    store_count: int
    slug: str


@dataclass(slots=True)
class ProvinceInfo:
    name: str
    code: str
    total_stores: int
    cities: List[CityInfo] = field(default_factory=list)

    @property
    def slug(self) -> str:
        return slugify(self.name)


def normalize_province(province: Optional[str]) -> str:
    """Return the full province name for a code or name, or ``Unknown`` if blank."""

    trimmed = (province or "").strip()
    if not trimmed:
        return "Unknown"
    return _PROVINCE_NAMES.get(trimmed.upper(), trimmed)


def province_code(province: Optional[str]) -> str:
    normalized = normalize_province(province)
    return PROVINCE_CODES.get(normalized, normalized)


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL slug."""

    slug = _SPACE_RE.sub("-", str(text).strip().lower())
    slug = _NON_WORD_RE.sub("", slug)
    slug = _HYPHENS_RE.sub("-", slug)
    return slug.strip("-")


def store_slug(name: str, city: Optional[str] = None, province: Optional[str] = None) -> str:
    """Return a listing slug, suffixed with city and province when both are known."""

    slug = slugify(name)
    if city and province:
        slug = f"{slug}-{slugify(city)}-{slugify(province)}"
    return slug


def slug_mapping(stores: Iterable[ProcessedBookstore]) -> Dict[str, ProcessedBookstore]:
    """Map each store's slug to the store; later duplicates replace earlier ones."""

    return {store_slug(store.name, store.city, store.province): store for store in stores}


def _city_name(store: ProcessedBookstore) -> str:
    return store.city.strip() or "Unknown"


def _sort_key(count: int, name: str) -> tuple:
    return (-count, name.lower())


def extract_cities(stores: Iterable[ProcessedBookstore]) -> List[CityInfo]:
    counts: Counter = Counter()
    for store in stores:
        counts[(_city_name(store), normalize_province(store.province))] += 1

    cities = [
        CityInfo(
            name=city,
            province=province,
            province_code=province_code(province),
            store_count=count,
            slug=slugify(city),
        )
        for (city, province), count in counts.items()
    ]
    cities.sort(key=lambda item: _sort_key(item.store_count, item.name))
    return cities


def extract_provinces(stores: Iterable[ProcessedBookstore]) -> List[ProvinceInfo]:
    """Group stores by normalized province, listing each province's cities."""

    grouped: "OrderedDict[str, List[ProcessedBookstore]]" = OrderedDict()
    for store in stores:
        grouped.setdefault(normalize_province(store.province), []).append(store)

    provinces = [
        ProvinceInfo(
            name=name,
            code=province_code(name),
            total_stores=len(members),
            cities=extract_cities(members),
        )
        for name, members in grouped.items()
    ]
    provinces.sort(key=lambda item: _sort_key(item.total_stores, item.name))
    return provinces


def stores_by_province(stores: Iterable[ProcessedBookstore], province: str) -> List[ProcessedBookstore]:
    wanted = normalize_province(province)
    return [store for store in stores if normalize_province(store.province) == wanted]


def stores_by_city(stores: Iterable[ProcessedBookstore], province: str, city: str) -> List[ProcessedBookstore]:
    wanted_city = city.strip().lower()
    return [store for store in stores_by_province(stores, province) if store.city.strip().lower() == wanted_city]


def find_province_by_slug(provinces: Iterable[ProvinceInfo], slug: str) -> Optional[ProvinceInfo]:
    for province in provinces:
        if province.slug == slug or province.code.lower() == slug.lower():
            return province
    return None
