"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class AmountParseError(ValidationError):
    """An amount string did not yield a finite decimal value."""


class DateParseError(ValidationError):
    """A date string did not yield a valid calendar date."""


class StatementFileError(ValidationError):
    """A statement file could not be decoded as a whole."""


class EmptyImportError(ValidationError):
    """An import produced only row errors and nothing usable."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class AuthenticationError(DomainError):
    """Caller could not be resolved to a user."""


class ForbiddenError(DomainError):
    """Caller does not own the requested entity."""


class UnsupportedFormatError(DomainError):
    """No row normalizer is registered for a bank format tag."""


class StorageError(DomainError):
    """A statement file could not be retrieved from storage."""


class PersistenceError(DomainError):
    """A database write failed after row processing."""


class ConfigurationError(DomainError):
    """Invalid configuration value."""


def user_not_found(user_id: str) -> str:
    """Return message for missing user."""
    return f"User {user_id} not found"


def account_not_found(account_id: str) -> str:
    """Return message for missing bank account."""
    return f"Bank account {account_id} not found"


def account_not_owned(account_id: str) -> str:
    """Return message when a bank account belongs to another user."""
    return f"Bank account {account_id} does not belong to user"


def statement_not_found(statement_id: str) -> str:
    """Return message for missing statement."""
    return f"Statement {statement_id} not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def unsupported_bank_type(bank_type: str) -> str:
    """Return message for a bank format tag without a normalizer."""
    return f"Unsupported bank type: {bank_type}"
