"""Utility functions for bookkeep."""

from bookkeep.utils.date_parser import DateFormat, parse_date
from bookkeep.utils.amount_parser import (
    AMOUNT_EPSILON,
    parse_amount,
    parse_amount_with_currency,
)

__all__ = [
    "AMOUNT_EPSILON",
    "DateFormat",
    "parse_date",
    "parse_amount",
    "parse_amount_with_currency",
]
