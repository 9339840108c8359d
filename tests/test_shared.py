from datetime import datetime

import pytest

from app.shared.listing import paginate, sort_records
from app.shared.validators import (
    parse_date_param,
    parse_end_date_param,
    validate_email,
    validate_hex_color,
    validate_phone,
    validate_time_of_day,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("612 345 678", "+34612345678"),
        ("+34 612-345-678", "+34612345678"),
        ("0033 6 12 34 56 78", "+33612345678"),
        ("", ""),
    ],
)
def test_validate_phone(raw, expected):
    assert validate_phone(raw) == expected


def test_validate_phone_rejects_short_numbers():
    with pytest.raises(ValueError):
        validate_phone("12345")


def test_validate_email():
    assert validate_email(" Ana@Example.COM ") == "ana@example.com"
    with pytest.raises(ValueError):
        validate_email("ana@example")


def test_validate_hex_color():
    assert validate_hex_color("#FFF") == "#fff"
    with pytest.raises(ValueError):
        validate_hex_color("#12345")


def test_validate_time_of_day():
    assert validate_time_of_day("07:30") == "07:30"
    with pytest.raises(ValueError):
        validate_time_of_day("7:30")


def test_parse_date_param():
    assert parse_date_param("2024-03-01") == datetime(2024, 3, 1)
    assert parse_date_param("2024-03-01T10:00:00Z") == datetime(2024, 3, 1, 10)
    assert parse_date_param("not a date") is None
    assert parse_date_param(None) is None


def test_parse_end_date_param_covers_whole_day():
    assert parse_end_date_param("2024-03-01") == datetime(2024, 3, 1, 23, 59, 59, 999999)
    assert parse_end_date_param("2024-03-01T10:00:00") == datetime(2024, 3, 1, 10)
    assert parse_end_date_param("nope") is None


def test_paginate_list_clamps_limit():
    items, pagination = paginate(list(range(250)), page=2, limit=500)

    assert items == list(range(100, 200))
    assert pagination == {"page": 2, "limit": 100, "total": 250, "pages": 3}


def test_paginate_empty():
    items, pagination = paginate([], page=1, limit=20)

    assert items == []
    assert pagination["pages"] == 0


def test_sort_records_puts_missing_values_last():
    records = [{"name": "b"}, {"name": None}, {"name": "A"}]

    assert sort_records(records, "name", "asc") == [{"name": "A"}, {"name": "b"}, {"name": None}]
    assert sort_records(records, "name", "desc")[-1] == {"name": None}
