import pytest

from bookstore_directory.models import Coordinates, StoreStatus
from bookstore_directory.processor import format_address, process_bookstore, process_bookstores
from bookstore_directory.schema import validate_row


def _process(row):
    return process_bookstore(validate_row(row))


def test_basic_row_is_normalized(make_row):
    store = _process(make_row())

    assert store.coordinates == Coordinates(lat=43.0, lng=-79.0)
    assert store.formatted_address == "1 Main St, X, ON, A1A1A1"
    assert store.status is StoreStatus.OPERATIONAL
    assert store.lat == "43.0"
    assert store.lng == "-79.0"
    assert store.place_id == "p1"


def test_absent_contact_fields_default_to_empty_string_but_references_stay_none(make_row):
    store = _process(make_row())

    assert store.phone == ""
    assert store.website == ""
    assert store.email == ""
    assert store.photos_url == ""
    assert store.description is None
    assert store.place_url is None
    assert store.street_view is None
    assert store.has_website is False


@pytest.mark.parametrize(
    "lat,lng",
    [("", "-79.0"), ("43.0", ""), ("abc", "-79.0"), ("43.0abc", "-79.0"), ("nan", "-79.0"), ("inf", "1")],
)
def test_unparsable_coordinates_are_omitted(make_row, lat, lng):
    store = _process(make_row(lat=lat, lng=lng))

    assert store.coordinates is None
    assert store.lat == lat


def test_coordinates_allow_surrounding_whitespace(make_row):
    store = _process(make_row(lat=" 43.65 ", lng="-79.38"))

    assert store.coordinates == Coordinates(lat=43.65, lng=-79.38)


def test_rating_info_collects_reviews_with_author_or_text(make_row):
    store = _process(make_row(rating="4.5", num_reviews="10", review1_author="Jo", review1_text="Great"))

    assert store.rating_info.rating == 4.5
    assert store.rating_info.num_reviews == 10
    assert len(store.rating_info.reviews) == 1
    review = store.rating_info.reviews[0]
    assert review.author == "Jo"
    assert review.text == "Great"
    assert review.rating is None
    assert review.time == ""


def test_reviews_keep_source_order_and_skip_empty_groups(make_row):
    store = _process(
        make_row(
            rating="4.0",
            review1_author="First",
            review2_rating="5",
            review2_time="a week ago",
            review3_text="Third text only",
            review5_author="Fifth",
            review5_rating="3",
        )
    )

    reviews = store.rating_info.reviews
    assert [review.author for review in reviews] == ["First", "", "Fifth"]
    assert reviews[1].text == "Third text only"
    assert reviews[2].rating == 3.0


def test_missing_or_bad_rating_omits_rating_info(make_row):
    assert _process(make_row()).rating_info is None
    assert _process(make_row(rating="n/a", review1_author="Jo")).rating_info is None


def test_unparsable_review_count_defaults_to_zero(make_row):
    store = _process(make_row(rating="3.5", num_reviews="many"))

    assert store.rating_info.num_reviews == 0


def test_review_count_accepts_thousands_separator(make_row):
    assert _process(make_row(rating="3.5", num_reviews="1,204")).rating_info.num_reviews == 1204


def test_hours_are_copied_verbatim_and_blank_days_omitted(make_row):
    store = _process(make_row(mon_hours="9:00 AM – 5:00 PM", sat_hours="Closed", sun_hours=""))

    assert store.hours == {"monday": "9:00 AM – 5:00 PM", "saturday": "Closed"}
    assert "sunday" not in store.hours


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, StoreStatus.OPERATIONAL),
        ("OPERATIONAL", StoreStatus.OPERATIONAL),
        ("CLOSED_TEMPORARILY", StoreStatus.CLOSED_TEMPORARILY),
        ("CLOSED_PERMANENTLY", StoreStatus.CLOSED_PERMANENTLY),
        ("closed_permanently", StoreStatus.OPERATIONAL),
        ("UNKNOWN", StoreStatus.OPERATIONAL),
    ],
)
def test_status_mapping(make_row, raw, expected):
    row = make_row()
    if raw is not None:
        row["status"] = raw

    assert _process(row).status is expected


def test_formatted_address_skips_empty_components(make_row):
    store = _process(make_row(city="", zip=""))

    assert store.formatted_address == "1 Main St, ON"
    assert format_address("", "", "", "") == ""


def test_price_level_is_parsed_when_numeric(make_row):
    assert _process(make_row(price_level="2")).price_level == 2
    assert _process(make_row(price_level="$$")).price_level is None


def test_processing_is_deterministic(make_row):
    record = validate_row(make_row(rating="4.5", review1_author="Jo", sat_hours="10-5"))

    assert process_bookstore(record) == process_bookstore(record)


def test_process_bookstores_maps_each_record(store_rows):
    records = [validate_row(row) for row in store_rows]

    stores = process_bookstores(records)

    assert [store.place_id for store in stores] == [row["place_id"] for row in store_rows]
