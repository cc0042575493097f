"""Revolut CSV statements (one row per transaction, explicit state column)."""

import csv
import io
import re

from bookkeep.domain.errors import StatementFileError, ValidationError
from bookkeep.formats.base import (
    NormalizeResult,
    RawRow,
    RowContext,
    RowNormalizer,
    Skip,
    SkipKind,
    cell,
)
from bookkeep.utils.amount_parser import parse_amount
from bookkeep.utils.date_parser import DateFormat, parse_date

DATE_COLUMN = "Date completed (UTC)"
DESCRIPTION_COLUMN = "Description"
AMOUNT_COLUMN = "Amount"
CURRENCY_COLUMN = "Payment currency"
STATE_COLUMN = "State"

REQUIRED_COLUMNS = (DATE_COLUMN, DESCRIPTION_COLUMN, AMOUNT_COLUMN, CURRENCY_COLUMN, STATE_COLUMN)

COMPLETED_STATE = "COMPLETED"

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")


class RevolutNormalizer(RowNormalizer):
    """Normalizer for Revolut account statement exports."""

    decimal_separator = "."

    def read_rows(self, data: bytes) -> list[tuple[int, RawRow]]:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise StatementFileError(f"CSV file is not valid UTF-8: {e}")

        # Try to detect delimiter
        sample = text[:1024]
        try:
            delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t").delimiter
        except csv.Error:
            delimiter = ","

        reader = csv.DictReader(io.StringIO(text), delimiter=delimiter)
        csv_columns = reader.fieldnames
        if csv_columns is None:
            raise StatementFileError("CSV file has no columns")

        missing_columns = [col for col in REQUIRED_COLUMNS if col not in csv_columns]
        if missing_columns:
            raise StatementFileError(
                f"CSV file missing required columns: {', '.join(missing_columns)}"
            )

        rows = []
        # Start at 2 (header is row 1)
        for row_num, row in enumerate(reader, start=2):
            values = {
                key: value if isinstance(value, str) else ""
                for key, value in row.items()
                if key is not None
            }
            rows.append((row_num, values))
        return rows

    def normalize_row(self, row: RawRow, context: RowContext) -> NormalizeResult:
        # Pending and reverted rows usually lack a completion date, so the
        # state filter must run before any field validation.
        state = cell(row, STATE_COLUMN)
        if state.upper() != COMPLETED_STATE:
            return Skip(SkipKind.NOT_COMPLETED, f"State is '{state or 'empty'}'")

        completed = cell(row, DATE_COLUMN)
        if not completed:
            raise ValidationError("Missing completed date")
        transaction_date = parse_date(completed, DateFormat.ISO)

        currency = cell(row, CURRENCY_COLUMN).upper()
        if not currency:
            raise ValidationError("Missing currency")
        if not _CURRENCY_CODE.match(currency):
            raise ValidationError(f"Invalid currency code '{currency}'")

        amount = parse_amount(cell(row, AMOUNT_COLUMN), self.decimal_separator)

        return context.candidate(
            transaction_date=transaction_date,
            description=cell(row, DESCRIPTION_COLUMN),
            amount=amount,
            currency=currency,
        )
