"""Location lookup and distance helpers for "near me" searches."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

import requests
from geopy.distance import great_circle

from .models import Coordinates
from .settings import EARTH_RADIUS_KM, GeolocationSettings

logger = logging.getLogger(__name__)


class LocationError(RuntimeError):
    """Raised when a location provider can not produce a position."""


class Locator(Protocol):
    def locate(self, timeout: float) -> Coordinates: ...


class FixedLocator:
    """Locator returning a position supplied up front, e.g. from the command line."""

    def __init__(self, coordinates: Coordinates) -> None:
        self.coordinates = coordinates

    def locate(self, timeout: float) -> Coordinates:
        return self.coordinates


class _HttpLocator:
    def __init__(self, settings: Optional[GeolocationSettings] = None) -> None:
        self.settings = settings or GeolocationSettings()
        self._session = requests.Session()
        self._session.headers.update(self.settings.headers())

    def _get_json(self, url: str, timeout: float, params: Optional[dict] = None) -> object:
        try:
            response = self._session.get(url, params=params, timeout=timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            raise LocationError(f"Location request to {url} failed: {exc}") from exc
        except ValueError as exc:
            raise LocationError(f"Location provider {url} returned invalid JSON") from exc


class IpApiLocator(_HttpLocator):
    """Approximate the caller's position from their public IP address."""

    def locate(self, timeout: float) -> Coordinates:
        payload = self._get_json(self.settings.ip_provider_url, timeout)
        if not isinstance(payload, dict):
            raise LocationError("Unexpected payload from IP geolocation provider")
        if payload.get("error"):
            raise LocationError(f"IP geolocation refused: {payload.get('reason', 'unknown reason')}")
        try:
            return Coordinates(lat=float(payload["latitude"]), lng=float(payload["longitude"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise LocationError("IP geolocation response has no usable coordinates") from exc


class NominatimLocator(_HttpLocator):
    """Resolve a free-text address through the public Nominatim API."""

    def __init__(self, address: str, settings: Optional[GeolocationSettings] = None) -> None:
        super().__init__(settings)
        self.address = address

    def locate(self, timeout: float) -> Coordinates:
        items = self._get_json(self.settings.geocoder_url, timeout, params=self.settings.query_params(self.address))
        if not items or not isinstance(items, list):
            raise LocationError(f"No geocoding result for {self.address!r}")
        item = items[0]
        try:
            coordinates = Coordinates(lat=float(item["lat"]), lng=float(item["lon"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise LocationError(f"Geocoding result for {self.address!r} has no usable coordinates") from exc
        logger.debug("Geocoded %s -> %s", self.address, item.get("display_name", self.address))
        return coordinates


async def resolve_location(locator: Locator, timeout: float) -> Optional[Coordinates]:
    """Resolve the user's position once, returning None on denial, error or timeout."""

    try:
        return await asyncio.wait_for(asyncio.to_thread(locator.locate, timeout), timeout)
    except asyncio.TimeoutError:
        logger.warning("Location lookup timed out after %.1f seconds", timeout)
    except LocationError as exc:
        logger.warning("Location lookup failed: %s", exc)
    return None


def calculate_distance(origin: Coordinates, target: Coordinates) -> float:
    """Return the great-circle distance in kilometers between two points."""

    return float(great_circle(origin.as_tuple(), target.as_tuple(), radius=EARTH_RADIUS_KM).kilometers)
