"""Domain model entities for bookkeep.

These are pure data classes representing business concepts, independent of
database schema. Mappers in ``bookkeep.database.mappers`` convert ORM rows
into these entities so services never see SQLAlchemy objects.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class StatementStatus(str, Enum):
    """Lifecycle of a statement ingestion run."""

    UPLOADED = "uploaded"
    PARSING = "parsing"
    PARSED = "parsed"
    ERROR = "error"


class MatchStatus(str, Enum):
    """Invoice matching status of a transaction."""

    UNMATCHED = "unmatched"
    MATCHED = "matched"
    IGNORED = "ignored"


# Bank identifiers an account may be tagged with. Only some of them have a
# row normalizer (see bookkeep.formats.BankFormat).
BANK_TYPES = (
    "bpi",
    "cgd",
    "millennium",
    "santander",
    "novobanco",
    "bankinter",
    "revolut",
    "wise",
    "other",
)


@dataclass(frozen=True)
class User:
    """Application user domain entity."""

    id: str
    email: str
    created_at: datetime


@dataclass(frozen=True)
class BankAccount:
    """Bank account domain entity."""

    id: str
    user_id: str
    account_name: str
    bank_name: Optional[str]
    bank_type: str
    currency: str
    account_number_last4: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Statement:
    """One statement upload and its ingestion lifecycle."""

    id: str
    user_id: str
    bank_account_id: str
    storage_path: str
    filename: str
    source_bank: str
    status: StatementStatus
    transactions_count: int
    error_message: Optional[str]
    uploaded_at: datetime
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class TransactionCandidate:
    """A normalized transaction that has not been persisted yet."""

    transaction_date: date
    description: str
    amount: Decimal
    currency: str
    user_id: str
    bank_account_id: str
    statement_id: str
    source_id: str
    source_bank: str


@dataclass(frozen=True)
class Transaction:
    """Persisted transaction domain entity."""

    id: str
    user_id: str
    bank_account_id: str
    statement_id: Optional[str]
    transaction_date: date
    description: str
    amount: Decimal
    currency: str
    source_id: Optional[str]
    source_bank: Optional[str]
    category: Optional[str]
    vendor: Optional[str]
    status: MatchStatus
    invoice_id: Optional[str]
    note: Optional[str]
    created_at: datetime
