"""Shared pytest fixtures for bookkeep tests."""

import io
import tempfile
import os
from datetime import datetime
import pytest
from click.testing import CliRunner
from openpyxl import Workbook

from bookkeep.config import Settings
from bookkeep.database.factories import create_sqlite_database
from bookkeep.domain.account import AccountService
from bookkeep.domain.ingestion import IngestionService
from bookkeep.domain.statement import StatementService
from bookkeep.domain.transaction import TransactionService
from bookkeep.domain.user import UserService
from bookkeep.formats.bpi import HEADER_OFFSET
from bookkeep.storage import LocalStatementStorage

REVOLUT_HEADER = [
    "Type",
    "Product",
    "Started Date",
    "Date completed (UTC)",
    "Description",
    "Amount",
    "Fee",
    "Payment currency",
    "State",
    "Balance",
]

BPI_HEADER = [
    "Data Mov.",
    "Data Valor",
    "Descrição do Movimento",
    "Montante",
    "Saldo Contabilístico",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep BOOKKEEP_* variables from the host out of tests."""
    for name in list(os.environ):
        if name.startswith("BOOKKEEP_"):
            monkeypatch.delenv(name)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def storage_root(tmp_path):
    root = tmp_path / "statements"
    root.mkdir()
    return root


@pytest.fixture
def storage(storage_root):
    return LocalStatementStorage(storage_root)


@pytest.fixture
def settings(temp_db, storage_root):
    return Settings(database_path=temp_db.database_path, storage_root=str(storage_root))


@pytest.fixture
def user_service(temp_db):
    """Create a UserService with a temporary database."""
    return UserService(temp_db)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def statement_service(temp_db):
    return StatementService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def ingestion_service(temp_db, storage, settings):
    """Create an IngestionService over temporary database and storage."""
    return IngestionService(temp_db, storage, settings)


@pytest.fixture
def sample_user(user_service):
    """Create a sample user; returns (user, api token)."""
    user_id, token = user_service.create_user("alice@example.com")
    return user_service.get_user(user_id), token


@pytest.fixture
def other_user(user_service):
    user_id, token = user_service.create_user("bob@example.com")
    return user_service.get_user(user_id), token


@pytest.fixture
def revolut_account(account_service, sample_user):
    """Create a Revolut account owned by the sample user."""
    user, _ = sample_user
    account_id = account_service.create_account(
        user_id=user.id, account_name="Revolut EUR", bank_type="revolut"
    )
    return account_service.get_account(account_id)


@pytest.fixture
def bpi_account(account_service, sample_user):
    """Create a BPI account owned by the sample user."""
    user, _ = sample_user
    account_id = account_service.create_account(
        user_id=user.id,
        account_name="BPI Current",
        bank_type="bpi",
        bank_name="Banco BPI",
        account_number_last4="1234",
    )
    return account_service.get_account(account_id)


def revolut_csv(rows, header=REVOLUT_HEADER, delimiter=",") -> bytes:
    """Build Revolut CSV bytes from row dicts keyed by column name."""
    lines = [delimiter.join(header)]
    for row in rows:
        lines.append(delimiter.join(str(row.get(col, "")) for col in header))
    return ("\n".join(lines) + "\n").encode("utf-8")


def revolut_row(completed, description, amount, currency="EUR", state="COMPLETED"):
    return {
        "Type": "CARD_PAYMENT",
        "Product": "Current",
        "Started Date": completed,
        "Date completed (UTC)": completed,
        "Description": description,
        "Amount": amount,
        "Fee": "0.00",
        "Payment currency": currency,
        "State": state,
        "Balance": "",
    }


def bpi_xlsx(rows, header=BPI_HEADER) -> bytes:
    """Build a BPI workbook: preamble rows, header on row 16, then data rows.

    Rows are lists of cell values in header order.
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Movimentos"
    sheet.append(["Consultar Movimentos de Conta"])
    sheet.append(["Conta", "0-1234567.000.001"])
    sheet.append(["Exportado em", datetime(2024, 4, 1, 9, 30)])
    # Remaining preamble rows stay empty
    for col, name in enumerate(header, start=1):
        sheet.cell(row=HEADER_OFFSET + 1, column=col, value=name)
    for offset, values in enumerate(rows, start=HEADER_OFFSET + 2):
        for col, value in enumerate(values, start=1):
            sheet.cell(row=offset, column=col, value=value)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def store_file(storage, sample_user):
    """Write bytes into statement storage under the sample user's prefix."""

    def _store(account_id: str, filename: str, data: bytes) -> str:
        user, _ = sample_user
        storage_path = f"{user.id}/{account_id}/1711929600000-{filename}"
        storage.save(storage_path, data)
        return storage_path

    return _store


@pytest.fixture
def cli_runner():
    """Create a CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def make_revolut_csv():
    """Builder for Revolut CSV bytes."""
    return revolut_csv


@pytest.fixture
def make_revolut_row():
    return revolut_row


@pytest.fixture
def make_bpi_xlsx():
    """Builder for BPI XLSX bytes."""
    return bpi_xlsx


@pytest.fixture
def cli_args(temp_db, storage_root):
    """Global CLI options pointing at the temporary database and storage."""
    return ["--db-path", temp_db.database_path, "--storage-root", str(storage_root)]


@pytest.fixture
def imported_statement(ingestion_service, sample_user, revolut_account, store_file, make_revolut_csv, make_revolut_row):
    """Import a small Revolut statement; returns the IngestionSummary."""
    user, _ = sample_user
    data = make_revolut_csv(
        [
            make_revolut_row("2024-03-01 10:00:00", "Coffee", "-3.50"),
            make_revolut_row("2024-03-02 12:30:00", "Salary", "1500.00"),
        ]
    )
    path = store_file(revolut_account.id, "revolut.csv", data)
    return ingestion_service.ingest(user.id, revolut_account.id, path)
