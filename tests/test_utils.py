import re
from datetime import date, datetime
from decimal import Decimal

from app.portal.utils import (
    calculate_percentage,
    format_currency,
    format_date,
    format_short_date,
    generate_reference_number,
    get_initials,
    generate_slug,
    pagination_dict,
    slugify,
    to_jsonable,
    truncate,
)
from app.portal.validation import BaseSchema, form_payload, split_list, validate_payload


def test_reference_number_format():
    ref = generate_reference_number("CR")
    assert re.fullmatch(r"CR-[0-9A-Z]+-[0-9A-Z]{4}", ref)
    assert generate_reference_number("CR") != generate_reference_number("CR")


def test_slugs():
    assert slugify("  Land Cruiser: 2019 Model!  ") == "land-cruiser-2019-model"
    assert slugify("A -- b__c") == "a-b-c"
    slug = generate_slug("Hill Station House")
    assert re.fullmatch(r"hill-station-house-[0-9a-z]{1,4}", slug)


def test_calculate_percentage():
    assert calculate_percentage(1, 3) == 33
    assert calculate_percentage(2, 3) == 67
    assert calculate_percentage(5, 0) == 0


def test_format_currency_and_dates():
    assert format_currency(1234567.89) == "SLE 1,234,568"
    assert format_currency(Decimal("1000"), "USD") == "USD 1,000"
    assert format_date(date(2024, 3, 5)) == "5 March 2024"


def test_short_date_and_initials():
    assert format_short_date(date(2024, 3, 5)) == "05/03/2024"
    assert format_short_date(None) == format_date(None) == format_currency(None) == "-"
    assert get_initials("Francis Ben Kaifala") == "FB"
    assert get_initials("admin@acc.gov.sl") == "A"


def test_truncate():
    assert truncate("short", 10) == "short"
    assert truncate("a sentence that is too long", 10) == "a sentence..."


def test_pagination_dict():
    assert pagination_dict(0, 1, 10) == {"total": 0, "page": 1, "limit": 10, "total_pages": 0}
    assert pagination_dict(21, 2, 10)["total_pages"] == 3


def test_to_jsonable():
    assert to_jsonable(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05"
    assert to_jsonable(Decimal("2.50")) == 2.5
    assert to_jsonable("x") == "x"


class _Example(BaseSchema):
    full_name: str
    nickname: str | None = None


def test_schema_accepts_camel_and_snake_keys():
    a, errors = validate_payload(_Example, {"fullName": "Abu Bakarr"})
    assert errors == []
    b, _ = validate_payload(_Example, {"full_name": "Abu Bakarr", "nickname": "   "})
    assert a.full_name == b.full_name == "Abu Bakarr"
    assert b.nickname is None


def test_validate_payload_errors():
    model, errors = validate_payload(_Example, ["not", "a", "dict"])
    assert model is None
    assert errors == ["Request body must be a JSON object."]

    model, errors = validate_payload(_Example, {"fullName": ""})
    assert model is None
    assert len(errors) == 1
    assert errors[0].startswith("fullName: ")


def test_split_list():
    assert split_list("a, b\nc,,") == ["a", "b", "c"]
    assert split_list(None) == []
    assert split_list(["x"]) == ["x"]


def test_form_payload_checkboxes():
    form = {"title": "T", "publish": "1", "is_featured": "0"}
    payload = form_payload(form, ("title", "description"), checkboxes=("publish", "is_featured", "other"))
    assert payload == {"title": "T", "publish": True, "is_featured": False, "other": False}
