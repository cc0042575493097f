"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic so services only ever see frozen
domain entities.
"""

from decimal import Decimal
from typing import Optional

from bookkeep.domain import entities as domain
from bookkeep.database.models import (
    User as ORMUser,
    BankAccount as ORMBankAccount,
    Statement as ORMStatement,
    Transaction as ORMTransaction,
)


def user_to_domain(orm_user: ORMUser) -> domain.User:
    """Convert SQLAlchemy User model to domain User entity."""
    return domain.User(
        id=orm_user.id,
        email=orm_user.email,
        created_at=orm_user.created_at,
    )


def bank_account_to_domain(orm_account: ORMBankAccount) -> domain.BankAccount:
    """Convert SQLAlchemy BankAccount model to domain BankAccount entity."""
    return domain.BankAccount(
        id=orm_account.id,
        user_id=orm_account.user_id,
        account_name=orm_account.account_name,
        bank_name=orm_account.bank_name,
        bank_type=orm_account.bank_type,
        currency=orm_account.currency,
        account_number_last4=orm_account.account_number_last4,
        created_at=orm_account.created_at,
    )


def statement_to_domain(orm_statement: ORMStatement) -> domain.Statement:
    """Convert SQLAlchemy Statement model to domain Statement entity."""
    return domain.Statement(
        id=orm_statement.id,
        user_id=orm_statement.user_id,
        bank_account_id=orm_statement.bank_account_id,
        storage_path=orm_statement.storage_path,
        filename=orm_statement.filename,
        source_bank=orm_statement.source_bank,
        status=domain.StatementStatus(orm_statement.status),
        transactions_count=orm_statement.transactions_count,
        error_message=orm_statement.error_message,
        uploaded_at=orm_statement.uploaded_at,
        updated_at=orm_statement.updated_at,
    )


def stored_amount(value) -> Optional[Decimal]:
    """Drop the column's zero padding, keeping at least two decimals."""
    if value is None:
        return None
    value = Decimal(value)
    cents = value.quantize(Decimal("0.01"))
    return cents if cents == value else value.normalize()


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        bank_account_id=orm_transaction.bank_account_id,
        statement_id=orm_transaction.statement_id,
        transaction_date=orm_transaction.transaction_date,
        description=orm_transaction.description,
        amount=stored_amount(orm_transaction.amount),
        currency=orm_transaction.currency,
        source_id=orm_transaction.source_id,
        source_bank=orm_transaction.source_bank,
        category=orm_transaction.category,
        vendor=orm_transaction.vendor,
        status=domain.MatchStatus(orm_transaction.status),
        invoice_id=orm_transaction.invoice_id,
        note=orm_transaction.note,
        created_at=orm_transaction.created_at,
    )


def candidate_to_orm(candidate: domain.TransactionCandidate) -> ORMTransaction:
    """Build an unsaved SQLAlchemy Transaction from a candidate."""
    return ORMTransaction(
        user_id=candidate.user_id,
        bank_account_id=candidate.bank_account_id,
        statement_id=candidate.statement_id,
        transaction_date=candidate.transaction_date,
        description=candidate.description,
        amount=candidate.amount,
        currency=candidate.currency,
        source_id=candidate.source_id,
        source_bank=candidate.source_bank,
        status=domain.MatchStatus.UNMATCHED.value,
    )
