import pytest

from bookstore_directory.geographic import (
    extract_cities,
    extract_provinces,
    find_province_by_slug,
    normalize_province,
    province_code,
    slug_mapping,
    slugify,
    store_slug,
    stores_by_city,
    stores_by_province,
)


@pytest.mark.parametrize(
    "raw,expected",
    [("ON", "Ontario"), ("on", "Ontario"), (" Ontario ", "Ontario"), ("BC", "British Columbia"), ("", "Unknown")],
)
def test_normalize_province(raw, expected):
    assert normalize_province(raw) == expected


def test_province_code():
    assert province_code("British Columbia") == "BC"
    assert province_code("QC") == "QC"
    assert province_code("Atlantis") == "Atlantis"


def test_slugify():
    assert slugify("  Ben McNally Books! ") == "ben-mcnally-books"
    assert slugify("Librairie Drawn & Quarterly") == "librairie-drawn-quarterly"
    assert slugify("--a   b--") == "a-b"


def test_store_slug_adds_city_and_province_when_known():
    assert store_slug("Munro's Books", "Victoria", "BC") == "munros-books-victoria-bc"
    assert store_slug("Munro's Books", "Victoria") == "munros-books"


def test_slug_mapping(stores):
    mapping = slug_mapping(stores)

    assert mapping["indigo-books-toronto-on"].place_id == "indigo"
    assert len(mapping) == len(stores)


def test_extract_provinces_sorts_by_store_count(stores):
    provinces = extract_provinces(stores)

    assert [province.name for province in provinces] == ["Ontario", "British Columbia", "Quebec"]
    ontario = provinces[0]
    assert ontario.code == "ON"
    assert ontario.total_stores == 2
    assert [(city.name, city.store_count) for city in ontario.cities] == [("Toronto", 2)]


def test_extract_cities(stores):
    cities = extract_cities(stores)

    assert cities[0].name == "Toronto"
    assert cities[0].province_code == "ON"
    assert cities[0].slug == "toronto"
    assert {city.name for city in cities} == {"Toronto", "Victoria", "Montreal"}


def test_stores_by_province_and_city(stores):
    assert [store.place_id for store in stores_by_province(stores, "Ontario")] == ["indigo", "ben-mcnally"]
    assert [store.place_id for store in stores_by_city(stores, "BC", " victoria ")] == ["munros"]


def test_find_province_by_slug(stores):
    provinces = extract_provinces(stores)

    assert find_province_by_slug(provinces, "british-columbia").code == "BC"
    assert find_province_by_slug(provinces, "qc").name == "Quebec"
    assert find_province_by_slug(provinces, "yukon") is None
