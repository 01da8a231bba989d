"""Normalize validated CSV records into display-ready bookstores."""

from __future__ import annotations

import math
import re
from typing import Dict, Iterable, List, Optional

from .models import WEEKDAYS, Coordinates, ProcessedBookstore, RatingInfo, Review, StoreStatus
from .schema import REVIEW_SLOTS, RawBookstoreRecord

DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")

_HOURS_FIELDS = {
    "monday": "mon_hours",
    "tuesday": "tue_hours",
    "wednesday": "wed_hours",
    "thursday": "thu_hours",
    "friday": "fri_hours",
    "saturday": "sat_hours",
    "sunday": "sun_hours",
}


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value


def _parse_decimal(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    text = value.strip()
    if not DECIMAL_RE.fullmatch(text):
        return None
    return float(text)


def _parse_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    text = value.strip().replace(",", "")
    try:
        return int(text)
    except ValueError:
        number = _parse_float(text)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _parse_coordinates(lat: str, lng: str) -> Optional[Coordinates]:
    latitude = _parse_decimal(lat)
    longitude = _parse_decimal(lng)
    if latitude is None or longitude is None:
        return None
    return Coordinates(lat=latitude, lng=longitude)


def _parse_reviews(record: RawBookstoreRecord) -> List[Review]:
    reviews: List[Review] = []
    for index in REVIEW_SLOTS:
        author, rating, time, text = (_clean(value) for value in record.review_group(index))
        if author is None and text is None:
            continue
        reviews.append(Review(author=author or "", rating=_parse_float(rating), time=time or "", text=text or ""))
    return reviews


def _parse_rating_info(record: RawBookstoreRecord) -> Optional[RatingInfo]:
    rating = _parse_float(record.rating)
    if rating is None:
        return None
    num_reviews = _parse_int(record.num_reviews)
    return RatingInfo(
        rating=rating,
        num_reviews=num_reviews if num_reviews is not None else 0,
        reviews=_parse_reviews(record),
    )


def _parse_hours(record: RawBookstoreRecord) -> Dict[str, str]:
    hours: Dict[str, str] = {}
    for day in WEEKDAYS:
        value = _clean(getattr(record, _HOURS_FIELDS[day]))
        if value is not None:
            hours[day] = value
    return hours


def format_address(*parts: Optional[str]) -> str:
    """Join the non-empty address components with ``", "``."""

    return ", ".join(part.strip() for part in parts if part and part.strip())


def process_bookstore(record: RawBookstoreRecord) -> ProcessedBookstore:
    """Map one validated CSV record to a display-ready bookstore.

    Unparsable numeric text never raises; the derived field is left unset.
    """

    return ProcessedBookstore(
        name=record.name,
        description=_clean(record.description),
        address=record.address,
        city=record.city,
        province=record.province,
        zip=record.zip,
        phone=_clean(record.phone) or "",
        website=_clean(record.website) or "",
        email=_clean(record.email) or "",
        lat=record.lat,
        lng=record.lng,
        coordinates=_parse_coordinates(record.lat, record.lng),
        rating_info=_parse_rating_info(record),
        price_level=_parse_int(record.price_level),
        hours=_parse_hours(record),
        status=StoreStatus.from_raw(record.status),
        photos_url=_clean(record.photos_url) or "",
        place_id=record.place_id,
        place_url=_clean(record.place_url),
        street_view=_clean(record.street_view),
        formatted_address=format_address(record.address, record.city, record.province, record.zip),
    )


def process_bookstores(records: Iterable[RawBookstoreRecord]) -> List[ProcessedBookstore]:
    return [process_bookstore(record) for record in records]
