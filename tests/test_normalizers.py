"""Tests for bank-format row normalizers."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from bookkeep.domain.entities import TransactionCandidate
from bookkeep.domain.errors import StatementFileError, UnsupportedFormatError
from bookkeep.formats import BankFormat, RowContext, Skip, SkipKind
from bookkeep.formats.bpi import BpiNormalizer, cell_text
from bookkeep.formats.revolut import RevolutNormalizer


@pytest.fixture
def context():
    return RowContext(
        user_id="user-1",
        bank_account_id="account-1",
        statement_id="statement-1",
        source_id="user-1/account-1/1711929600000-statement.csv",
        source_bank="revolut",
    )


class TestBankFormat:
    """Tests for resolving bank-format tags."""

    def test_from_tag(self):
        assert BankFormat.from_tag("revolut") is BankFormat.REVOLUT
        assert BankFormat.from_tag(" BPI ") is BankFormat.BPI

    def test_members_carry_normalizers(self):
        assert isinstance(BankFormat.REVOLUT.normalizer, RevolutNormalizer)
        assert isinstance(BankFormat.BPI.normalizer, BpiNormalizer)
        assert BankFormat.BPI.home_currency == "EUR"
        assert BankFormat.BPI.file_extension == "xlsx"

    @pytest.mark.parametrize("tag", ["cgd", "wise", "other", "", None])
    def test_unsupported_tags(self, tag):
        with pytest.raises(UnsupportedFormatError, match="Unsupported bank type"):
            BankFormat.from_tag(tag)


class TestRevolutNormalizer:
    """Tests for Revolut CSV statements."""

    def test_read_rows(self, make_revolut_csv, make_revolut_row):
        data = make_revolut_csv(
            [
                make_revolut_row("2024-03-01 10:00:00", "Coffee", "-3.50"),
                make_revolut_row("2024-03-02 11:00:00", "Salary", "1500.00"),
            ]
        )
        rows = RevolutNormalizer().read_rows(data)

        assert [num for num, _ in rows] == [2, 3]
        assert rows[0][1]["Description"] == "Coffee"
        assert rows[1][1]["Amount"] == "1500.00"

    def test_read_rows_semicolon_delimiter(self, make_revolut_csv, make_revolut_row):
        data = make_revolut_csv(
            [make_revolut_row("2024-03-01 10:00:00", "Coffee", "-3.50")], delimiter=";"
        )
        rows = RevolutNormalizer().read_rows(data)
        assert rows[0][1]["State"] == "COMPLETED"

    def test_read_rows_with_bom(self, make_revolut_csv, make_revolut_row):
        data = b"\xef\xbb\xbf" + make_revolut_csv(
            [make_revolut_row("2024-03-01 10:00:00", "Coffee", "-3.50")]
        )
        rows = RevolutNormalizer().read_rows(data)
        assert rows[0][1]["Type"] == "CARD_PAYMENT"

    def test_read_rows_missing_columns(self):
        data = b"Date,Description,Amount\n2024-03-01,Coffee,-3.50\n"
        with pytest.raises(StatementFileError, match="missing required columns"):
            RevolutNormalizer().read_rows(data)

    def test_read_rows_empty_file(self):
        with pytest.raises(StatementFileError, match="no columns"):
            RevolutNormalizer().read_rows(b"")

    def test_read_rows_not_utf8(self):
        with pytest.raises(StatementFileError):
            RevolutNormalizer().read_rows(b"\xff\xfe\x00\xd8garbage")

    def test_completed_row(self, context, make_revolut_row):
        """Test the completed Revolut row scenario."""
        row = make_revolut_row("2024-03-01 10:00:00", "  Coffee  ", "-3.50", currency="eur")
        result = RevolutNormalizer().normalize(row, context)

        assert isinstance(result, TransactionCandidate)
        assert result.transaction_date == date(2024, 3, 1)
        assert result.description == "Coffee"
        assert result.amount == Decimal("-3.50")
        assert result.currency == "EUR"
        assert result.statement_id == "statement-1"
        assert result.source_bank == "revolut"
        assert result.source_id == context.source_id

    def test_completed_state_case_insensitive(self, context, make_revolut_row):
        row = make_revolut_row("2024-03-01 10:00:00", "Coffee", "-3.50", state="completed")
        assert isinstance(RevolutNormalizer().normalize(row, context), TransactionCandidate)

    @pytest.mark.parametrize("state", ["PENDING", "REVERTED", "DECLINED", ""])
    def test_not_completed_rows_are_skipped(self, context, make_revolut_row, state):
        row = make_revolut_row("", "Coffee", "-3.50", state=state)
        result = RevolutNormalizer().normalize(row, context)

        assert isinstance(result, Skip)
        assert result.kind is SkipKind.NOT_COMPLETED

    def test_missing_completed_date(self, context, make_revolut_row):
        row = make_revolut_row("", "Coffee", "-3.50")
        result = RevolutNormalizer().normalize(row, context)

        assert result == Skip(SkipKind.ERROR, "Missing completed date")

    def test_malformed_completed_date(self, context, make_revolut_row):
        row = make_revolut_row("yesterday-ish", "Coffee", "-3.50")
        result = RevolutNormalizer().normalize(row, context)

        assert isinstance(result, Skip)
        assert result.kind is SkipKind.ERROR
        assert "Could not parse date" in result.reason

    def test_bad_amount(self, context, make_revolut_row):
        row = make_revolut_row("2024-03-01 10:00:00", "Coffee", "three euros")
        result = RevolutNormalizer().normalize(row, context)

        assert isinstance(result, Skip)
        assert result.kind is SkipKind.ERROR

    @pytest.mark.parametrize(
        "currency,reason",
        [("", "Missing currency"), ("EURO", "Invalid currency code 'EURO'")],
    )
    def test_bad_currency(self, context, make_revolut_row, currency, reason):
        row = make_revolut_row("2024-03-01 10:00:00", "Coffee", "-3.50", currency=currency)
        assert RevolutNormalizer().normalize(row, context) == Skip(SkipKind.ERROR, reason)


class TestBpiNormalizer:
    """Tests for BPI XLSX statements."""

    def test_read_rows_skips_preamble(self, make_bpi_xlsx):
        data = make_bpi_xlsx(
            [
                ["15-03-2024", "15-03-2024", "Supermercado", "-23,45 EUR", "976,55 EUR"],
                ["16-03-2024", "16-03-2024", "Transferência", "100,00 EUR", "1076,55 EUR"],
            ]
        )
        rows = BpiNormalizer().read_rows(data)

        assert [num for num, _ in rows] == [17, 18]
        assert rows[0][1]["Data Mov."] == "15-03-2024"
        assert rows[0][1]["Descrição do Movimento"] == "Supermercado"
        assert rows[0][1]["Montante"] == "-23,45 EUR"

    def test_read_rows_ignores_blank_rows(self, make_bpi_xlsx):
        data = make_bpi_xlsx(
            [
                ["15-03-2024", None, "Supermercado", "-23,45 EUR", None],
                [None, None, None, None, None],
                ["16-03-2024", None, "Farmácia", "-8,10 EUR", None],
            ]
        )
        rows = BpiNormalizer().read_rows(data)
        assert [num for num, _ in rows] == [17, 19]

    def test_read_rows_typed_cells(self, make_bpi_xlsx):
        """Test date and number cells follow the text parsing path."""
        data = make_bpi_xlsx([[datetime(2024, 3, 15), None, "Supermercado", -23.45, None]])
        rows = BpiNormalizer().read_rows(data)

        assert rows[0][1]["Data Mov."] == "15-03-2024"
        assert rows[0][1]["Montante"] == "-23,45"

    def test_read_rows_missing_header(self, make_bpi_xlsx):
        data = make_bpi_xlsx([], header=["Date", "Description", "Amount"])
        with pytest.raises(StatementFileError, match="missing required columns"):
            BpiNormalizer().read_rows(data)

    def test_read_rows_no_amount_column(self, make_bpi_xlsx):
        data = make_bpi_xlsx([], header=["Data Mov.", "Descrição do Movimento", "Saldo"])
        with pytest.raises(StatementFileError, match="no amount column"):
            BpiNormalizer().read_rows(data)

    def test_read_rows_not_a_workbook(self):
        with pytest.raises(StatementFileError, match="Could not open XLSX workbook"):
            BpiNormalizer().read_rows(b"Data Mov.;Montante\n")

    def test_montante_with_currency(self, context):
        """Test the signed Montante scenario."""
        row = {
            "Data Mov.": "15-03-2024",
            "Descrição do Movimento": " Supermercado ",
            "Montante": "-23,45 EUR",
        }
        result = BpiNormalizer().normalize(row, context)

        assert isinstance(result, TransactionCandidate)
        assert result.transaction_date == date(2024, 3, 15)
        assert result.description == "Supermercado"
        assert result.amount == Decimal("-23.45")
        assert result.currency == "EUR"

    def test_montante_with_point_decimal(self, context):
        """Test a Montante rendered with a point decimal keeps its magnitude."""
        row = {"Data Mov.": "01-03-2024", "Descrição do Movimento": "X", "Montante": "-10.50 EUR"}
        result = BpiNormalizer().normalize(row, context)

        assert result.amount == Decimal("-10.50")
        assert result.currency == "EUR"

    def test_debit_with_point_decimal(self, context):
        row = {"Data Mov.": "01-03-2024", "Descrição do Movimento": "Renda", "Débito": "50.5"}
        assert BpiNormalizer().normalize(row, context).amount == Decimal("-50.5")

    def test_montante_foreign_currency(self, context):
        row = {"Data Mov.": "15-03-2024", "Descrição do Movimento": "Hotel", "Montante": "-1.200,00 USD"}
        result = BpiNormalizer().normalize(row, context)

        assert result.amount == Decimal("-1200.00")
        assert result.currency == "USD"

    def test_montante_without_code_uses_home_currency(self, context):
        row = {"Data Mov.": "15-03-2024", "Descrição do Movimento": "Café", "Montante": "-1,20"}
        result = BpiNormalizer().normalize(row, context)

        assert result.amount == Decimal("-1.20")
        assert result.currency == "EUR"

    def test_debit_column_is_negative(self, context):
        """Test a debit-only row becomes a negative amount."""
        row = {
            "Data Mov.": "15-03-2024",
            "Descrição do Movimento": "Renda",
            "Débito": "50,00",
            "Crédito": "",
        }
        result = BpiNormalizer().normalize(row, context)

        assert result.amount == Decimal("-50.00")
        assert result.currency == "EUR"

    def test_credit_column_is_positive(self, context):
        row = {
            "Data Mov.": "15-03-2024",
            "Descrição do Movimento": "Reembolso",
            "Débito": "",
            "Crédito": "12,30",
        }
        assert BpiNormalizer().normalize(row, context).amount == Decimal("12.30")

    def test_debit_sign_is_normalized(self, context):
        row = {"Data Mov.": "15-03-2024", "Descrição do Movimento": "Renda", "Débito": "-50,00"}
        assert BpiNormalizer().normalize(row, context).amount == Decimal("-50.00")

    def test_debit_and_credit_both_present(self, context):
        row = {
            "Data Mov.": "15-03-2024",
            "Descrição do Movimento": "Estranho",
            "Débito": "5,00",
            "Crédito": "5,00",
        }
        result = BpiNormalizer().normalize(row, context)
        assert result == Skip(SkipKind.ERROR, "Both debit and credit values present")

    def test_eur_value_fallback(self, context):
        row = {
            "Data Mov.": "15-03-2024",
            "Descrição do Movimento": "Compra",
            "Montante": "n/d",
            "Valor em EUR": "-9,99",
        }
        result = BpiNormalizer().normalize(row, context)

        assert result.amount == Decimal("-9.99")
        assert result.currency == "EUR"

    def test_no_amount(self, context):
        row = {"Data Mov.": "15-03-2024", "Descrição do Movimento": "Nada", "Montante": ""}
        result = BpiNormalizer().normalize(row, context)

        assert isinstance(result, Skip)
        assert result.kind is SkipKind.ERROR
        assert "No parseable amount" in result.reason

    def test_missing_date(self, context):
        row = {"Data Mov.": "", "Descrição do Movimento": "Café", "Montante": "-1,20"}
        assert BpiNormalizer().normalize(row, context) == Skip(SkipKind.ERROR, "Missing date")

    def test_impossible_date(self, context):
        row = {"Data Mov.": "30-02-2024", "Descrição do Movimento": "Café", "Montante": "-1,20"}
        result = BpiNormalizer().normalize(row, context)

        assert isinstance(result, Skip)
        assert result.kind is SkipKind.ERROR
        assert "Invalid date" in result.reason


def test_cell_text():
    assert cell_text(None) == ""
    assert cell_text(datetime(2024, 3, 5, 0, 0)) == "05-03-2024"
    assert cell_text(date(2024, 3, 5)) == "05-03-2024"
    assert cell_text(-23.45) == "-23,45"
    assert cell_text(100) == "100"
    assert cell_text(" text ") == " text "


def test_unexpected_errors_become_skips(context):
    """Test normalize never raises, even on non-domain errors."""

    class BrokenNormalizer(RevolutNormalizer):
        def normalize_row(self, row, context):
            raise KeyError("boom")

    result = BrokenNormalizer().normalize({}, context)

    assert isinstance(result, Skip)
    assert result.kind is SkipKind.ERROR
    assert result.reason.startswith("Unexpected error")
