"""Unit tests for display formatting and provisional identifiers"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from finance_tracker.domain.identifiers import generate_transaction_id, is_provisional_id, to_base36
from finance_tracker.utils.formatting import format_currency, format_date


@pytest.mark.parametrize(
    "amount, expected",
    [
        (Decimal("6.50"), "$6.50"),
        (4500, "$4,500.00"),
        (1234567.891, "$1,234,567.89"),
        (Decimal("-6.5"), "-$6.50"),
        (0, "$0.00"),
        (Decimal("0.005"), "$0.01"),
    ],
)
def test_format_currency_usd(amount, expected):
    assert format_currency(amount) == expected


def test_format_currency_other_codes():
    assert format_currency(Decimal("10"), "eur") == "€10.00"
    assert format_currency(1500, "JPY") == "¥1,500"
    assert format_currency(Decimal("10"), "CHF") == "CHF 10.00"


@pytest.mark.parametrize(
    "value",
    [date(2026, 10, 7), datetime(2026, 10, 7, 23, 59), "2026-10-07", "2026-10-07T08:30:00Z"],
)
def test_format_date(value):
    assert format_date(value) == "Oct 7, 2026"


def test_to_base36():
    assert to_base36(0) == "0"
    assert to_base36(35) == "z"
    assert to_base36(36) == "10"
    with pytest.raises(ValueError):
        to_base36(-1)


def test_generate_transaction_id_is_unique_and_provisional():
    ids = {generate_transaction_id() for _ in range(1000)}

    assert len(ids) == 1000
    assert all(i.isalnum() and i == i.lower() for i in ids)
    assert all(is_provisional_id(i) for i in ids)
    assert not is_provisional_id("3f2b8c1e-8d5a-4c57-9a59-0a3bd7b1e2f4")
