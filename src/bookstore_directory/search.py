"""Fuzzy text search and compound filtering over processed bookstores."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Iterator, List, Optional, Sequence

from rapidfuzz import fuzz, utils

from .geolocate import Locator, calculate_distance, resolve_location
from .hours import is_open_weekends, is_store_open
from .models import Coordinates, ProcessedBookstore
from .settings import GeolocationSettings, SearchSettings

logger = logging.getLogger(__name__)


class SearchIndexError(RuntimeError):
    """Raised when the search index is queried before or out of sync with ``build``."""


@dataclass(slots=True, frozen=True)
class SearchMatch:
    store: ProcessedBookstore
    # 0.0 is a perfect match
    score: float


@dataclass(slots=True)
class StoreFilters:
    """Filters applied to search candidates; every active filter must pass."""

    has_website: bool = False
    min_rating: float = 0.0
    province: Optional[str] = None
    max_distance: Optional[float] = None
    open_weekends: bool = False
    open_now: bool = False

    @property
    def distance_active(self) -> bool:
        return bool(self.max_distance)


@dataclass(slots=True)
class SearchResults:
    stores: List[ProcessedBookstore] = field(default_factory=list)
    user_location: Optional[Coordinates] = None
    skipped_filters: List[str] = field(default_factory=list)

    def __iter__(self) -> Iterator[ProcessedBookstore]:
        return iter(self.stores)

    def __len__(self) -> int:
        return len(self.stores)


def _similarity(needle: str, value: str) -> float:
    # a field shorter than the query must match it as a whole
    if len(value) >= len(needle):
        return fuzz.partial_ratio(needle, value)
    return fuzz.ratio(needle, value)


class SearchIndex:
    """In-memory fuzzy index over a snapshot of bookstores.

    Call ``build`` once per dataset load and again whenever the dataset changes;
    there is no incremental update.
    """

    def __init__(self, settings: Optional[SearchSettings] = None) -> None:
        self.settings = settings or SearchSettings()
        self._stores: List[ProcessedBookstore] = []
        self._documents: List[List[str]] = []
        self._members: set[int] = set()
        self._built = False

    @property
    def is_built(self) -> bool:
        return self._built

    def __len__(self) -> int:
        return len(self._stores)

    def build(self, stores: Iterable[ProcessedBookstore]) -> None:
        self._stores = list(stores)
        self._documents = [
            [utils.default_process(str(getattr(store, key) or "")) for key in self.settings.keys]
            for store in self._stores
        ]
        self._members = {id(store) for store in self._stores}
        self._built = True
        logger.debug("Built search index over %d bookstores", len(self._stores))

    def covers(self, stores: Iterable[ProcessedBookstore]) -> bool:
        """Return True when every store was part of the last ``build``."""

        return all(id(store) in self._members for store in stores)

    def query(self, text: str) -> List[SearchMatch]:
        """Return matches ranked best first; ties keep dataset order."""

        if not self._built:
            raise SearchIndexError("Search index has not been built; call build() first")
        needle = utils.default_process(text or "")
        if not needle:
            return []

        min_similarity = self.settings.min_similarity
        ranked = []
        for position, (store, document) in enumerate(zip(self._stores, self._documents)):
            best = max((_similarity(needle, value) for value in document if value), default=0.0)
            if best >= min_similarity:
                ranked.append((1.0 - best / 100.0, position, store))
        ranked.sort(key=lambda item: (item[0], item[1]))
        return [SearchMatch(store=store, score=score) for score, _, store in ranked]

    def ranked_stores(self, stores: Sequence[ProcessedBookstore], text: str) -> List[ProcessedBookstore]:
        """Return the members of ``stores`` matching ``text`` in ranking order."""

        if not self._built:
            raise SearchIndexError("Search index has not been built; call build() first")
        if not self.covers(stores):
            raise SearchIndexError("Search index is stale: rebuild it from the current bookstores")
        wanted = {id(store) for store in stores}
        return [match.store for match in self.query(text) if id(match.store) in wanted]


def get_search_suggestions(index: SearchIndex, stores: Sequence[ProcessedBookstore], query: str) -> List[str]:
    """Return up to ``suggestion_limit`` store names for a partial query."""

    if not query or not query.strip():
        return []
    ranked = index.ranked_stores(stores, query)
    return [store.name for store in ranked[: index.settings.suggestion_limit]]


def apply_filters(
    stores: Iterable[ProcessedBookstore],
    filters: StoreFilters,
    user_location: Optional[Coordinates] = None,
    now: Optional[datetime] = None,
) -> List[ProcessedBookstore]:
    """Keep the stores passing every active filter, preserving input order.

    The distance filter only applies when ``user_location`` is known.
    """

    results = []
    for store in stores:
        if filters.has_website and not store.website:
            continue

        if filters.min_rating > 0:
            rating = store.rating
            if rating is None or rating < filters.min_rating:
                continue

        if filters.province and store.province != filters.province:
            continue

        if filters.distance_active and user_location is not None:
            if store.coordinates is None:
                continue
            if calculate_distance(user_location, store.coordinates) > filters.max_distance:
                continue

        if filters.open_weekends and not is_open_weekends(store):
            continue

        if filters.open_now and not is_store_open(store, now):
            continue

        results.append(store)
    return results


async def search_stores(
    index: SearchIndex,
    stores: Sequence[ProcessedBookstore],
    query: str,
    filters: Optional[StoreFilters] = None,
    *,
    locator: Optional[Locator] = None,
    location_timeout: Optional[float] = None,
    now: Optional[datetime] = None,
) -> SearchResults:
    """Search ``stores`` by fuzzy text and filter the candidates.

    The caller's location is looked up only when a distance filter is set. If
    it can not be resolved the distance filter is skipped and reported in
    ``SearchResults.skipped_filters``; all other filters still apply.
    """

    filters = filters or StoreFilters()
    results = SearchResults()

    if filters.distance_active:
        if locator is not None:
            timeout = location_timeout if location_timeout is not None else GeolocationSettings().timeout
            results.user_location = await resolve_location(locator, timeout)
        if results.user_location is None:
            logger.warning("User location unavailable; skipping max_distance filter")
            results.skipped_filters.append("max_distance")

    candidates = index.ranked_stores(stores, query) if query and query.strip() else list(stores)
    results.stores = apply_filters(candidates, filters, results.user_location, now)
    logger.debug("Search %r matched %d of %d bookstores", query, len(results.stores), len(stores))
    return results
