import csv
from pathlib import Path

import pytest

from bookstore_directory.processor import process_bookstore
from bookstore_directory.schema import validate_row

BASE_ROW = {
    "name": "A",
    "address": "1 Main St",
    "city": "X",
    "province": "ON",
    "zip": "A1A1A1",
    "lat": "43.0",
    "lng": "-79.0",
    "place_id": "p1",
}

STORE_ROWS = [
    {
        "name": "Indigo Books",
        "address": "220 Yonge St",
        "city": "Toronto",
        "province": "ON",
        "zip": "M5B 2H1",
        "lat": "43.6544",
        "lng": "-79.3807",
        "place_id": "indigo",
        "website": "https://www.indigo.ca",
        "rating": "4.6",
        "num_reviews": "1203",
        "sat_hours": "10:00 AM – 9:00 PM",
        "mon_hours": "9:00 AM – 9:00 PM",
    },
    {
        "name": "Ben McNally Books",
        "address": "366 Bay St",
        "city": "Toronto",
        "province": "ON",
        "zip": "M5H 4B2",
        "lat": "43.6510",
        "lng": "-79.3822",
        "place_id": "ben-mcnally",
        "rating": "4.8",
        "num_reviews": "310",
        "sat_hours": "Closed",
        "sun_hours": "",
    },
    {
        "name": "Munro's Books",
        "address": "1108 Government St",
        "city": "Victoria",
        "province": "BC",
        "zip": "V8W 1Y2",
        "lat": "48.4252",
        "lng": "-123.3665",
        "place_id": "munros",
        "website": "https://www.munrobooks.com",
        "sun_hours": "11:00 AM – 5:00 PM",
    },
    {
        "name": "Librairie Drawn & Quarterly",
        "address": "211 Bernard St W",
        "city": "Montreal",
        "province": "QC",
        "zip": "H2T 2K5",
        "lat": "",
        "lng": "",
        "place_id": "drawn-quarterly",
        "website": "https://mtl.drawnandquarterly.com",
        "rating": "3.9",
    },
]


@pytest.fixture
def make_row():
    def _make_row(**overrides):
        row = dict(BASE_ROW)
        row.update(overrides)
        return row

    return _make_row


@pytest.fixture
def store_rows():
    return [dict(row) for row in STORE_ROWS]


@pytest.fixture
def stores(store_rows):
    return [process_bookstore(validate_row(row)) for row in store_rows]


@pytest.fixture
def write_csv(tmp_path: Path):
    def _write(rows, name="bookstores.csv", fieldnames=None):
        path = tmp_path / name
        if fieldnames is None:
            fieldnames = list(dict.fromkeys(key for row in rows for key in row))
        with path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.DictWriter(handle, fieldnames=fieldnames, restval="")
            writer.writeheader()
            writer.writerows(rows)
        return path

    return _write
