"""Transaction domain service."""

from typing import Optional
from bookkeep.database.base import Database
from bookkeep.domain.entities import MatchStatus, Transaction as TransactionEntity
from bookkeep.domain.errors import (
    ForbiddenError,
    NotFoundError,
    ValidationError,
    transaction_not_found,
)


class TransactionService:
    """Service for reading and categorizing imported transactions.

    Transactions are only ever created by the ingestion pipeline; this
    service covers the user-driven changes that follow.
    """

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_transaction(self, transaction_id: str) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def get_owned_transaction(self, user_id: str, transaction_id: str) -> TransactionEntity:
        """Get a transaction and verify the user owns it.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ForbiddenError: If the transaction belongs to another user
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if txn.user_id != user_id:
            raise ForbiddenError(f"Transaction {transaction_id} does not belong to user")
        return txn

    def list_transactions(
        self,
        user_id: str,
        bank_account_id: Optional[str] = None,
        statement_id: Optional[str] = None,
    ) -> list[TransactionEntity]:
        """List a user's transactions, newest first.

        Args:
            user_id: Owning user ID
            bank_account_id: Optional account filter
            statement_id: Optional statement filter
        """
        return self.db.list_transactions(
            user_id=user_id, bank_account_id=bank_account_id, statement_id=statement_id
        )

    def categorize(
        self,
        user_id: str,
        transaction_id: str,
        category: Optional[str],
        vendor: Optional[str] = None,
    ) -> None:
        """Assign (or clear, with empty strings) category and vendor."""
        self.get_owned_transaction(user_id, transaction_id)
        self.db.update_transaction_categorization(
            transaction_id,
            category=(category or "").strip() or None,
            vendor=(vendor or "").strip() or None,
        )

    def set_match_status(
        self,
        user_id: str,
        transaction_id: str,
        status: MatchStatus | str,
        invoice_id: Optional[str] = None,
    ) -> None:
        """Update invoice matching status.

        A linked invoice is required for ``matched`` and dropped otherwise.

        Raises:
            ValidationError: If status is unknown or an invoice is missing
        """
        try:
            status = MatchStatus(status)
        except ValueError:
            choices = ", ".join(s.value for s in MatchStatus)
            raise ValidationError(f"Invalid status '{status}'. Must be one of: {choices}")

        self.get_owned_transaction(user_id, transaction_id)

        if status is MatchStatus.MATCHED and not invoice_id:
            raise ValidationError("An invoice is required to mark a transaction as matched")
        if status is not MatchStatus.MATCHED:
            invoice_id = None

        self.db.update_transaction_status(transaction_id, status, invoice_id)
