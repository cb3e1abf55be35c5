import asyncio
from datetime import date

from metro_storefront_sdk.filters import (
    Debouncer,
    FilterSpec,
    filter_records,
    newest_first,
    parse_filter_date,
    record_date,
    sort_records,
)

CARDS = [
    {"id": 1, "name": "Metro Card", "status": "Locked", "createdAt": "2024-05-13T08:00:00Z"},
    {"id": 2, "name": "Metro Pass", "status": "Active", "createdAt": "2024-05-13T09:00:00Z"},
    {"id": 3, "name": "Ticket", "status": "Locked", "createdAt": "2024-05-13T10:00:00Z"},
    {"id": 4, "title": "metro day pass", "status": "Locked", "createdAt": "2024-05-14T08:00:00Z"},
]


def _ids(records) -> list:
    return [record["id"] for record in records]


def test_filters_compose_with_and() -> None:
    spec = FilterSpec(
        search_query="METRO",
        status_filter="locked",
        date_filter="05/13/2024",
        status_map={"locked": "Locked"},
    )

    assert _ids(filter_records(CARDS, spec)) == [1]


def test_default_spec_keeps_everything_in_order() -> None:
    result = filter_records(CARDS)

    assert _ids(result) == [1, 2, 3, 4]
    assert result is not CARDS


def test_non_list_input_yields_empty_list() -> None:
    assert filter_records(None) == []
    assert filter_records({"id": 1}) == []
    assert filter_records("cards") == []


def test_keyword_checks_name_then_title() -> None:
    assert _ids(filter_records(CARDS, FilterSpec(search_query="day pass"))) == [4]


def test_status_lookup_falls_back_to_lowercase_key() -> None:
    spec = FilterSpec(status_filter="LOCKED", status_map={"locked": "Locked"})

    assert _ids(filter_records(CARDS, spec)) == [1, 3, 4]


def test_unknown_or_empty_status_filter_rejects_everything() -> None:
    assert filter_records(CARDS, FilterSpec(status_filter="archived", status_map={"locked": "Locked"})) == []
    assert filter_records(CARDS, FilterSpec(status_filter="")) == []


def test_default_status_map_uses_vietnamese_labels() -> None:
    requests = [{"id": 1, "status": "Chờ duyệt"}, {"id": 2, "status": "Đã duyệt"}]

    assert _ids(filter_records(requests, FilterSpec(status_filter="approved"))) == [2]


def test_date_slash_value_switches_to_day_first_above_twelve() -> None:
    records = [
        {"id": 1, "date": "13/05/2024"},
        {"id": 2, "date": "05/13/2024"},
        {"id": 3, "date": "05/12/2024"},
    ]

    assert _ids(filter_records(records, FilterSpec(date_filter="05/13/2024"))) == [1, 2]


def test_create_date_is_day_first() -> None:
    assert record_date({"createDate": "13/05/2024"}) == date(2024, 5, 13)
    assert record_date({"createDate": "05/06/2024"}) == date(2024, 6, 5)


def test_record_date_precedence() -> None:
    record = {"createdAt": "2024-01-02T00:00:00", "date": "03/04/2024", "createDate": "05/06/2024"}

    assert record_date(record) == date(2024, 1, 2)
    assert record_date({"createdAt": "garbage", "date": "03/04/2024"}) == date(2024, 3, 4)
    assert record_date({"date": "99/99/2024", "createDate": "05/06/2024"}) == date(2024, 6, 5)
    assert record_date({"name": "no dates"}) is None


def test_unparseable_date_filter_fails_open() -> None:
    for value in ("not-a-date", "2024-05-13", "02/30/2024", "00/10/2024"):
        assert _ids(filter_records(CARDS, FilterSpec(date_filter=value))) == [1, 2, 3, 4]


def test_records_without_usable_date_pass_date_filter() -> None:
    records = [{"id": 1, "name": "no date"}, {"id": 2, "createdAt": "2020-01-01T00:00:00Z"}]

    assert _ids(filter_records(records, FilterSpec(date_filter="05/13/2024"))) == [1]


def test_backend_timestamps_with_nanoseconds_are_parsed() -> None:
    assert record_date({"createdAt": "2024-05-13T08:15:30.123456789"}) == date(2024, 5, 13)
    assert record_date({"createdAt": "2024-05-13T08:15:30.5Z"}) == date(2024, 5, 13)
    records = CARDS + [{"id": 5, "createdAt": "2024-05-12T23:59:59.999999999"}]
    assert _ids(filter_records(records, FilterSpec(date_filter="05/12/2024"))) == [5]


def test_parse_filter_date() -> None:
    assert parse_filter_date("05/13/2024") == date(2024, 5, 13)
    assert parse_filter_date("5/3/2024") == date(2024, 5, 3)
    assert parse_filter_date("13/05/2024") is None
    assert parse_filter_date("") is None


def test_sort_records_keeps_missing_values_last() -> None:
    records = [{"id": 1, "price": 30}, {"id": 2}, {"id": 3, "price": 10}, {"id": 4, "price": 30}]

    assert _ids(sort_records(records, "price")) == [3, 1, 4, 2]
    assert _ids(sort_records(records, "price", descending=True)) == [1, 4, 3, 2]


def test_newest_first() -> None:
    records = [
        {"id": 1, "createdAt": "2024-05-13T08:00:00Z"},
        {"id": 2},
        {"id": 3, "createdAt": "2024-05-14T08:00:00"},
    ]

    assert _ids(newest_first(records)) == [3, 1, 2]


def test_debouncer_only_latest_value_wins() -> None:
    debouncer = Debouncer(wait_seconds=0.01)

    async def type_query() -> list:
        return await asyncio.gather(debouncer.push("me"), debouncer.push("metro"))

    assert asyncio.run(type_query()) == [None, "metro"]
