"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
from typing import Optional
import re

from bookkeep.domain.errors import AmountParseError

# Tolerance used when comparing amounts that may have been parsed through
# different code paths (duplicate detection).
AMOUNT_EPSILON = Decimal("0.001")

_TRAILING_CODE = re.compile(r"\s*([A-Za-z]{3})$")
_LEADING_CODE = re.compile(r"^([A-Za-z]{3})\s*")
# No comma and a single point followed by one or two digits: "-10.50", "7.5"
_POINT_DECIMAL = re.compile(r"^[+-]?\d*\.\d{1,2}$")


def split_currency(amount_str: str) -> tuple[str, Optional[str]]:
    """Split an optional 3-letter currency code off an amount string.

    A trailing code ("10,50 EUR") is preferred over a leading one
    ("USD 10.50").

    Returns:
        Tuple of (remaining amount text, upper-cased code or None)
    """
    text = amount_str.strip()
    match = _TRAILING_CODE.search(text)
    if match:
        return text[: match.start()].strip(), match.group(1).upper()
    match = _LEADING_CODE.match(text)
    if match:
        return text[match.end():].strip(), match.group(1).upper()
    return text, None


def parse_amount_with_currency(
    amount_str: str, decimal_separator: str = "."
) -> tuple[Decimal, Optional[str]]:
    """Parse an amount string into a Decimal and an optional currency code.

    Handles various formats:
    - "123.45" / "-123.45" / "+123.45"
    - "$123.45" / "-€4.50"
    - "1,234.56" (decimal_separator=".")
    - "1.234,56" / "10,50 EUR" (decimal_separator=",")
    - "10.50" (decimal_separator=","; a lone point with one or two
      trailing digits is read as the decimal point, "1.234" stays 1234)
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string
        decimal_separator: Fractional separator used by the source ("." or ",");
            the other character is treated as a thousands separator

    Returns:
        Tuple of (signed Decimal amount, currency code or None)

    Raises:
        AmountParseError: If no finite amount can be extracted
    """
    if decimal_separator not in (".", ","):
        raise ValueError(f"Unsupported decimal separator '{decimal_separator}'")

    if amount_str is None or not str(amount_str).strip():
        raise AmountParseError("Empty amount string")

    text, currency = split_currency(str(amount_str))

    # Handle parentheses notation (negative)
    is_negative = False
    if text.startswith("(") and text.endswith(")"):
        is_negative = True
        text = text[1:-1].strip()

    # Remove currency symbols and any grouping whitespace
    text = re.sub(r"[$€£¥]", "", text)
    text = re.sub(r"\s", "", text)

    if decimal_separator == ",":
        # Spreadsheet-rendered numbers use a point even in comma locales
        if not _POINT_DECIMAL.match(text):
            text = text.replace(".", "").replace(",", ".")
    else:
        text = text.replace(",", "")

    if not text:
        raise AmountParseError(f"Could not parse amount '{amount_str}': no digits")

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise AmountParseError(f"Could not parse amount '{amount_str}'")

    if not amount.is_finite():
        raise AmountParseError(f"Amount '{amount_str}' is not a finite number")

    if is_negative:
        amount = -amount
    return amount, currency


def parse_amount(amount_str: str, decimal_separator: str = ".") -> Decimal:
    """Parse an amount string into a Decimal.

    See ``parse_amount_with_currency`` for the accepted formats; any
    currency code is discarded.

    Raises:
        AmountParseError: If amount string cannot be parsed
    """
    amount, _ = parse_amount_with_currency(amount_str, decimal_separator)
    return amount


def amounts_equal(left: Decimal, right: Decimal, epsilon: Decimal = AMOUNT_EPSILON) -> bool:
    """Return True when two amounts differ by strictly less than epsilon."""
    return abs(Decimal(left) - Decimal(right)) < epsilon
