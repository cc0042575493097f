"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from bookkeep.domain.entities import (
    User,
    BankAccount,
    Statement,
    StatementStatus,
    Transaction,
    TransactionCandidate,
    MatchStatus,
)


class Database(ABC):
    """Abstract database interface for bookkeep."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # User operations
    @abstractmethod
    def create_user(self, email: str, api_token_hash: str) -> str:
        """Create a user. Returns user ID."""
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email address."""
        pass

    @abstractmethod
    def get_user_by_token_hash(self, api_token_hash: str) -> Optional[User]:
        """Get the user owning an API token hash."""
        pass

    # Bank account operations
    @abstractmethod
    def create_account(
        self,
        user_id: str,
        account_name: str,
        bank_type: str,
        currency: str = "EUR",
        bank_name: Optional[str] = None,
        account_number_last4: Optional[str] = None,
    ) -> str:
        """Create a bank account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: str) -> Optional[BankAccount]:
        """Get bank account by ID."""
        pass

    @abstractmethod
    def list_accounts(self, user_id: Optional[str] = None) -> list[BankAccount]:
        """List bank accounts, optionally only those owned by a user."""
        pass

    @abstractmethod
    def update_account_name(
        self, account_id: str, account_name: str, bank_name: Optional[str] = None
    ) -> None:
        """Update account display name and optionally bank name."""
        pass

    # Statement operations
    @abstractmethod
    def create_statement(
        self,
        user_id: str,
        bank_account_id: str,
        storage_path: str,
        filename: str,
        source_bank: str,
        status: StatementStatus = StatementStatus.UPLOADED,
    ) -> str:
        """Create a statement record. Returns statement ID."""
        pass

    @abstractmethod
    def get_statement(self, statement_id: str) -> Optional[Statement]:
        """Get statement by ID."""
        pass

    @abstractmethod
    def list_statements(
        self, user_id: str, bank_account_id: Optional[str] = None
    ) -> list[Statement]:
        """List a user's statements, newest first."""
        pass

    @abstractmethod
    def update_statement(
        self,
        statement_id: str,
        status: StatementStatus,
        transactions_count: Optional[int] = None,
        error_message: Optional[str] = None,
    ) -> None:
        """Update statement status and, when given, count and error message."""
        pass

    # Transaction operations
    @abstractmethod
    def insert_transactions(self, candidates: list[TransactionCandidate]) -> list[str]:
        """Insert candidates in a single database transaction.

        Either every candidate is stored or none is. Returns the new IDs.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: str,
        bank_account_id: Optional[str] = None,
        source_bank: Optional[str] = None,
        statement_id: Optional[str] = None,
    ) -> list[Transaction]:
        """List a user's transactions with optional filters, newest first."""
        pass

    @abstractmethod
    def count_statement_transactions(self, statement_id: str) -> int:
        """Count transactions referencing a statement."""
        pass

    @abstractmethod
    def update_transaction_categorization(
        self, transaction_id: str, category: Optional[str], vendor: Optional[str]
    ) -> None:
        """Set category and vendor of a transaction."""
        pass

    @abstractmethod
    def update_transaction_status(
        self, transaction_id: str, status: MatchStatus, invoice_id: Optional[str] = None
    ) -> None:
        """Set matching status and linked invoice of a transaction."""
        pass
