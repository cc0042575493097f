"""Duplicate detection for re-imported statement rows.

Statement files are routinely re-uploaded with overlapping date ranges, and
banks do not give us a stable transaction id. A candidate is therefore
considered a duplicate when an existing transaction has the same calendar
date, currency and description and an amount within AMOUNT_EPSILON.

Two genuinely distinct transactions sharing all four values cannot be told
apart; the second one is dropped on re-import.
"""

from enum import Enum
from typing import Iterable

from bookkeep.domain.entities import Transaction, TransactionCandidate
from bookkeep.utils.amount_parser import AMOUNT_EPSILON, amounts_equal


class DedupScope(str, Enum):
    """Which existing transactions a candidate is compared against."""

    # Same user and bank account
    ACCOUNT = "account"
    # Same user and bank-format tag (legacy scheme without accounts)
    BANK_FORMAT = "bank_format"


def matches(candidate: TransactionCandidate, existing: Transaction) -> bool:
    """Return True when both records share the natural transaction key."""
    return (
        existing.transaction_date == candidate.transaction_date
        and amounts_equal(existing.amount, candidate.amount, AMOUNT_EPSILON)
        and existing.currency == candidate.currency
        and existing.description == candidate.description
    )


def is_duplicate(
    candidate: TransactionCandidate, existing_transactions: Iterable[Transaction]
) -> bool:
    """Return True if any existing transaction matches the candidate."""
    return any(matches(candidate, existing) for existing in existing_transactions)
