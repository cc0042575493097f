"""Banco BPI XLSX statements (ledger-style workbook with a preamble).

The first 15 rows of the first worksheet hold account information; row 16
is the column header and transactions follow. Amounts normally use a comma
as the decimal separator, though a lone point decimal such as "10.50" is
also read. They come either as a signed "Montante" (optionally with a
trailing currency code) or split across "Débito"/"Crédito" columns.
"""

import io
import zipfile
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from bookkeep.domain.errors import AmountParseError, StatementFileError, ValidationError
from bookkeep.formats.base import NormalizeResult, RawRow, RowContext, RowNormalizer, cell
from bookkeep.utils.amount_parser import parse_amount, parse_amount_with_currency
from bookkeep.utils.date_parser import DateFormat, parse_date

HEADER_OFFSET = 15

DATE_COLUMN = "Data Mov."
DESCRIPTION_COLUMN = "Descrição do Movimento"
AMOUNT_COLUMN = "Montante"
DEBIT_COLUMN = "Débito"
CREDIT_COLUMN = "Crédito"
EUR_VALUE_COLUMN = "Valor em EUR"

AMOUNT_COLUMNS = (AMOUNT_COLUMN, DEBIT_COLUMN, CREDIT_COLUMN, EUR_VALUE_COLUMN)


def cell_text(value) -> str:
    """Render a worksheet cell the way the bank displays it."""
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.strftime("%d-%m-%Y")
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, float, Decimal)):
        return format(Decimal(str(value)), "f").replace(".", ",")
    return str(value)


class BpiNormalizer(RowNormalizer):
    """Normalizer for Banco BPI account movement exports."""

    home_currency = "EUR"
    decimal_separator = ","

    def read_rows(self, data: bytes) -> list[tuple[int, RawRow]]:
        try:
            workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
            raise StatementFileError(f"Could not open XLSX workbook: {e}")

        try:
            if not workbook.worksheets:
                raise StatementFileError("XLSX workbook has no worksheets")
            worksheet = workbook.worksheets[0]
            sheet_rows = list(worksheet.iter_rows(min_row=HEADER_OFFSET + 1, values_only=True))
        finally:
            workbook.close()

        if not sheet_rows:
            raise StatementFileError(f"XLSX sheet has no header row after {HEADER_OFFSET} rows")

        header = [cell_text(value).strip() for value in sheet_rows[0]]
        missing_columns = [col for col in (DATE_COLUMN, DESCRIPTION_COLUMN) if col not in header]
        if missing_columns:
            raise StatementFileError(
                f"XLSX sheet missing required columns: {', '.join(missing_columns)}"
            )
        if not any(col in header for col in AMOUNT_COLUMNS):
            raise StatementFileError(
                f"XLSX sheet has no amount column (expected one of: {', '.join(AMOUNT_COLUMNS)})"
            )

        rows = []
        for row_num, values in enumerate(sheet_rows[1:], start=HEADER_OFFSET + 2):
            texts = [cell_text(value) for value in values]
            if not any(text.strip() for text in texts):
                continue
            rows.append(
                (row_num, {name: text for name, text in zip(header, texts) if name})
            )
        return rows

    def normalize_row(self, row: RawRow, context: RowContext) -> NormalizeResult:
        date_str = cell(row, DATE_COLUMN)
        if not date_str:
            raise ValidationError("Missing date")
        transaction_date = parse_date(date_str, DateFormat.DMY)

        amount, currency = self._resolve_amount(row)

        return context.candidate(
            transaction_date=transaction_date,
            description=cell(row, DESCRIPTION_COLUMN),
            amount=amount,
            currency=currency,
        )

    def _resolve_amount(self, row: RawRow) -> tuple[Decimal, str]:
        """Pick the amount from Montante, then Débito/Crédito, then Valor em EUR."""
        montante = cell(row, AMOUNT_COLUMN)
        if montante:
            parsed = self._try_parse(montante)
            if parsed is not None:
                return parsed

        debit = cell(row, DEBIT_COLUMN)
        credit = cell(row, CREDIT_COLUMN)
        if debit and credit:
            raise ValidationError("Both debit and credit values present")
        if debit or credit:
            parsed = self._try_parse(debit or credit)
            if parsed is not None:
                value, currency = parsed
                return (-abs(value) if debit else abs(value)), currency

        eur_value = cell(row, EUR_VALUE_COLUMN)
        if eur_value:
            try:
                return parse_amount(eur_value, self.decimal_separator), "EUR"
            except AmountParseError:
                pass

        raise AmountParseError(
            f"No parseable amount in {', '.join(AMOUNT_COLUMNS)}"
        )

    def _try_parse(self, text: str) -> Optional[tuple[Decimal, str]]:
        try:
            amount, currency = parse_amount_with_currency(text, self.decimal_separator)
        except AmountParseError:
            return None
        return amount, currency or self.home_currency
