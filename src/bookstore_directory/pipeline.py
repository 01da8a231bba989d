"""End-to-end pipeline that loads the bookstore directory."""

from __future__ import annotations

import csv
import json
import logging
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .models import ProcessedBookstore
from .parser import parse_bookstores
from .processor import process_bookstores
from .settings import DirectorySettings, default_output_fields

logger = logging.getLogger(__name__)


def load_bookstores(settings: Optional[DirectorySettings] = None) -> List[ProcessedBookstore]:
    """Parse, normalize and de-duplicate the bookstore CSV named in ``settings``."""

    settings = settings or DirectorySettings()
    result = parse_bookstores(settings.ingestion.csv_path, encoding=settings.ingestion.encoding)
    if result.errors:
        logger.warning("Skipped %d invalid rows in %s", len(result.errors), settings.ingestion.csv_path)

    stores = process_bookstores(result.records)
    if settings.deduplicate:
        stores = deduplicate_bookstores(stores)
        logger.info("Retained %d unique bookstores after de-duplication", len(stores))

    if settings.output_path:
        write_stores(stores, settings.output_path)

    return stores


def deduplicate_bookstores(stores: Iterable[ProcessedBookstore]) -> List[ProcessedBookstore]:
    """Return bookstores with duplicates (by place_id) removed while preserving order."""

    seen: OrderedDict[str, ProcessedBookstore] = OrderedDict()
    for store in stores:
        key = store.place_id.strip()
        if key not in seen:
            seen[key] = store
        else:
            logger.debug("Dropping duplicate place_id %s (%s)", key, store.name)
    return list(seen.values())


def write_stores(stores: Iterable[ProcessedBookstore], path: str | Path) -> None:
    """Persist bookstores as JSON (``.json``) or CSV (anything else)."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0

    with path.open("w", newline="", encoding="utf-8") as handle:
        if path.suffix.lower() == ".json":
            payload = [store.as_dict() for store in stores]
            json.dump(payload, handle, ensure_ascii=False, indent=2)
            count = len(payload)
        else:
            writer = csv.writer(handle)
            writer.writerow(default_output_fields())
            for store in stores:
                writer.writerow(store.as_row())
                count += 1

    logger.info("Wrote %d bookstores to %s", count, path)


def paginate_stores(
    stores: Iterable[ProcessedBookstore],
    *,
    search: str = "",
    city: str = "",
    province: str = "",
    offset: int = 0,
    limit: int = 12,
) -> Dict[str, Any]:
    """Return one page of stores as ``{"stores": [...], "total": n}``.

    ``search``, ``city`` and ``province`` are case-insensitive substring filters
    on name, city and province; ``total`` counts matches before paging.
    """

    search, city, province = search.lower(), city.lower(), province.lower()
    matched = [
        store
        for store in stores
        if (not search or search in store.name.lower())
        and (not city or city in store.city.lower())
        and (not province or province in store.province.lower())
    ]
    offset = max(0, offset)
    limit = max(0, limit)
    page = matched[offset : offset + limit]
    return {"stores": [store.as_dict() for store in page], "total": len(matched)}
