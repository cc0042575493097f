"""Tests for transaction categorization and matching."""

import pytest

from bookkeep.cli.main import cli
from bookkeep.domain.entities import MatchStatus
from bookkeep.domain.errors import ForbiddenError, NotFoundError, ValidationError


@pytest.fixture
def coffee(transaction_service, sample_user, imported_statement):
    user, _ = sample_user
    txns = transaction_service.list_transactions(user.id)
    return next(t for t in txns if t.description == "Coffee")


class TestTransactionService:
    """Tests for TransactionService."""

    def test_list_transactions(self, transaction_service, sample_user, revolut_account, imported_statement):
        user, _ = sample_user

        assert len(transaction_service.list_transactions(user.id)) == 2
        assert len(transaction_service.list_transactions(user.id, bank_account_id=revolut_account.id)) == 2
        assert len(
            transaction_service.list_transactions(user.id, statement_id=imported_statement.statement_id)
        ) == 2
        assert transaction_service.list_transactions(user.id, statement_id="other") == []

    def test_newest_first(self, transaction_service, sample_user, imported_statement):
        user, _ = sample_user
        descriptions = [t.description for t in transaction_service.list_transactions(user.id)]
        assert descriptions == ["Salary", "Coffee"]

    def test_categorize(self, transaction_service, sample_user, coffee):
        user, _ = sample_user
        transaction_service.categorize(user.id, coffee.id, " Eating Out ", vendor="Café Central")

        txn = transaction_service.get_transaction(coffee.id)
        assert txn.category == "Eating Out"
        assert txn.vendor == "Café Central"

    def test_clear_category(self, transaction_service, sample_user, coffee):
        user, _ = sample_user
        transaction_service.categorize(user.id, coffee.id, "Eating Out")
        transaction_service.categorize(user.id, coffee.id, "")

        txn = transaction_service.get_transaction(coffee.id)
        assert txn.category is None
        assert txn.vendor is None

    def test_categorize_other_users_transaction(self, transaction_service, other_user, coffee):
        intruder, _ = other_user
        with pytest.raises(ForbiddenError):
            transaction_service.categorize(intruder.id, coffee.id, "Mine")

    def test_categorize_missing_transaction(self, transaction_service, sample_user):
        user, _ = sample_user
        with pytest.raises(NotFoundError):
            transaction_service.categorize(user.id, "missing", "Groceries")

    def test_match_with_invoice(self, transaction_service, sample_user, coffee):
        user, _ = sample_user
        transaction_service.set_match_status(user.id, coffee.id, "matched", invoice_id="inv-1")

        txn = transaction_service.get_transaction(coffee.id)
        assert txn.status is MatchStatus.MATCHED
        assert txn.invoice_id == "inv-1"

    def test_match_requires_invoice(self, transaction_service, sample_user, coffee):
        user, _ = sample_user
        with pytest.raises(ValidationError, match="invoice is required"):
            transaction_service.set_match_status(user.id, coffee.id, MatchStatus.MATCHED)

    def test_ignore_clears_invoice(self, transaction_service, sample_user, coffee):
        user, _ = sample_user
        transaction_service.set_match_status(user.id, coffee.id, "matched", invoice_id="inv-1")
        transaction_service.set_match_status(user.id, coffee.id, "ignored", invoice_id="inv-1")

        txn = transaction_service.get_transaction(coffee.id)
        assert txn.status is MatchStatus.IGNORED
        assert txn.invoice_id is None

    def test_invalid_status(self, transaction_service, sample_user, coffee):
        user, _ = sample_user
        with pytest.raises(ValidationError, match="Invalid status 'paid'"):
            transaction_service.set_match_status(user.id, coffee.id, "paid")


def test_transaction_list_command(cli_runner, cli_args, imported_statement):
    result = cli_runner.invoke(cli, cli_args + ["transaction", "list", "--user", "alice@example.com"])

    assert result.exit_code == 0
    assert "Coffee" in result.output
    assert "Salary" in result.output
    assert "Uncategorized" in result.output
    assert "Total: 2 transactions" in result.output


def test_transaction_list_empty(cli_runner, cli_args, sample_user):
    result = cli_runner.invoke(cli, cli_args + ["transaction", "list", "--user", "alice@example.com"])

    assert result.exit_code == 0
    assert "No transactions found" in result.output


def test_transaction_categorize_command(cli_runner, cli_args, transaction_service, coffee):
    result = cli_runner.invoke(
        cli,
        cli_args
        + [
            "transaction",
            "categorize",
            coffee.id,
            "--user",
            "alice@example.com",
            "--category",
            "Eating Out",
        ],
    )

    assert result.exit_code == 0
    assert "as 'Eating Out'" in result.output
    assert transaction_service.get_transaction(coffee.id).category == "Eating Out"


def test_transaction_status_command(cli_runner, cli_args, transaction_service, coffee):
    result = cli_runner.invoke(
        cli,
        cli_args
        + [
            "transaction",
            "status",
            coffee.id,
            "matched",
            "--user",
            "alice@example.com",
            "--invoice",
            "inv-7",
        ],
    )

    assert result.exit_code == 0
    assert "marked matched" in result.output
    assert transaction_service.get_transaction(coffee.id).invoice_id == "inv-7"


def test_transaction_status_command_without_invoice(cli_runner, cli_args, coffee):
    result = cli_runner.invoke(
        cli,
        cli_args
        + ["transaction", "status", coffee.id, "matched", "--user", "alice@example.com"],
    )

    assert result.exit_code == 1
    assert "Error:" in result.output
