"""Display formatting for currency amounts and dates"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from finance_tracker.utils.date_utils import coerce_date

CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "CA$",
    "AUD": "A$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
    "JPY": "¥",
}

# Currencies without minor units
ZERO_DECIMAL_CURRENCIES = {"JPY"}


def format_currency(amount: Union[Decimal, float, int], currency: str = "USD") -> str:
    """
    Format an amount en-US style, e.g. 1234.5 -> "$1,234.50", -6.5 -> "-$6.50".

    Unknown currency codes are rendered as a prefix: "CHF 10.00".
    """
    currency = currency.upper()
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    places = 0 if currency in ZERO_DECIMAL_CURRENCIES else 2
    value = value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)

    sign = "-" if value < 0 else ""
    body = f"{abs(value):,.{places}f}"
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol is None:
        return f"{sign}{currency} {body}"
    return f"{sign}{symbol}{body}"


def format_date(value: Union[date, datetime, str]) -> str:
    """Format a calendar date en-US style, e.g. Oct 17, 2026"""
    day = coerce_date(value)
    return f"{day:%b} {day.day}, {day.year}"
