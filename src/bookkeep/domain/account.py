"""Bank account domain service."""

import re
from typing import Optional
from bookkeep.database.base import Database
from bookkeep.domain.entities import BANK_TYPES, BankAccount as BankAccountEntity
from bookkeep.domain.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
    account_not_found,
    account_not_owned,
    user_not_found,
)

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")


class AccountService:
    """Service for managing bank accounts.

    The bank type selects the statement format used on import and cannot be
    changed once the account exists; re-imports are deduplicated against
    what the original format produced.
    """

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        user_id: str,
        account_name: str,
        bank_type: str,
        currency: str = "EUR",
        bank_name: Optional[str] = None,
        account_number_last4: Optional[str] = None,
    ) -> str:
        """Create a new bank account.

        Args:
            user_id: Owning user ID
            account_name: Display name
            bank_type: Bank identifier (see entities.BANK_TYPES)
            currency: Primary ISO 4217 currency
            bank_name: Optional bank display name
            account_number_last4: Optional last four digits of the account number

        Returns:
            Account ID

        Raises:
            NotFoundError: If the user doesn't exist
            ValidationError: If bank type, currency or account digits are invalid
            ConflictError: If the user already has an account with that name
        """
        if self.db.get_user(user_id) is None:
            raise NotFoundError(user_not_found(user_id))

        bank_type = bank_type.strip().lower()
        if bank_type not in BANK_TYPES:
            raise ValidationError(
                f"Invalid bank type '{bank_type}'. Must be one of: {', '.join(BANK_TYPES)}"
            )

        currency = currency.strip().upper()
        if not _CURRENCY_CODE.match(currency):
            raise ValidationError(f"Invalid currency code '{currency}'")

        if account_number_last4 is not None and not re.fullmatch(r"\d{4}", account_number_last4):
            raise ValidationError("Account number suffix must be exactly 4 digits")

        account_name = account_name.strip()
        if not account_name:
            raise ValidationError("Account name cannot be empty")

        # Check if account with same name exists for this user
        for acc in self.db.list_accounts(user_id=user_id):
            if acc.account_name == account_name:
                raise ConflictError(f"Account with name '{account_name}' already exists")

        return self.db.create_account(
            user_id=user_id,
            account_name=account_name,
            bank_type=bank_type,
            currency=currency,
            bank_name=bank_name,
            account_number_last4=account_number_last4,
        )

    def get_account(self, account_id: str) -> Optional[BankAccountEntity]:
        """Get bank account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def get_owned_account(self, user_id: str, account_id: str) -> BankAccountEntity:
        """Get a bank account and verify the user owns it.

        Raises:
            NotFoundError: If the account doesn't exist
            ForbiddenError: If the account belongs to another user
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        if account.user_id != user_id:
            raise ForbiddenError(account_not_owned(account_id))
        return account

    def list_accounts(self, user_id: str) -> list[BankAccountEntity]:
        """List a user's bank accounts."""
        return self.db.list_accounts(user_id=user_id)

    def rename_account(
        self, user_id: str, account_id: str, account_name: str, bank_name: Optional[str] = None
    ) -> None:
        """Rename a bank account.

        Raises:
            NotFoundError: If account not found
            ForbiddenError: If the account belongs to another user
            ConflictError: If the user already has an account with that name
        """
        self.get_owned_account(user_id, account_id)

        # Check for duplicate names (excluding current account)
        for acc in self.db.list_accounts(user_id=user_id):
            if acc.id != account_id and acc.account_name == account_name:
                raise ConflictError(f"Account with name '{account_name}' already exists")

        self.db.update_account_name(
            account_id=account_id, account_name=account_name, bank_name=bank_name
        )
