"""Shared contract for bank-format row normalizers."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Union

from bookkeep.domain.entities import TransactionCandidate
from bookkeep.domain.errors import DomainError

logger = logging.getLogger(__name__)

RawRow = dict[str, str]


class SkipKind(str, Enum):
    """Why a row did not become a candidate."""

    NOT_COMPLETED = "not_completed"
    ERROR = "error"


@dataclass(frozen=True)
class Skip:
    """A row the normalizer declined, with a human-readable reason."""

    kind: SkipKind
    reason: str


@dataclass(frozen=True)
class RowContext:
    """Ownership and provenance stamped onto every candidate."""

    user_id: str
    bank_account_id: str
    statement_id: str
    source_id: str
    source_bank: str

    def candidate(self, **fields) -> TransactionCandidate:
        return TransactionCandidate(
            user_id=self.user_id,
            bank_account_id=self.bank_account_id,
            statement_id=self.statement_id,
            source_id=self.source_id,
            source_bank=self.source_bank,
            **fields,
        )


NormalizeResult = Union[TransactionCandidate, Skip]


class RowNormalizer(ABC):
    """Reads one bank's statement files and maps rows to candidates."""

    #: Currency assumed when a row carries no explicit code
    home_currency: str = "EUR"
    #: Fractional separator used by the bank's amount columns
    decimal_separator: str = "."

    @abstractmethod
    def read_rows(self, data: bytes) -> list[tuple[int, RawRow]]:
        """Decode a whole statement file into (row number, row) pairs.

        Raises:
            StatementFileError: If the file cannot be read as this format
        """

    @abstractmethod
    def normalize_row(self, row: RawRow, context: RowContext) -> NormalizeResult:
        """Map one row; may raise DomainError for row-level problems."""

    def normalize(self, row: RawRow, context: RowContext) -> NormalizeResult:
        """Map one row to a candidate or a Skip. Never raises."""
        try:
            return self.normalize_row(row, context)
        except DomainError as e:
            return Skip(SkipKind.ERROR, str(e))
        except Exception as e:
            logger.warning("Unexpected error normalizing row: %s", e, exc_info=True)
            return Skip(SkipKind.ERROR, f"Unexpected error: {e}")


def cell(row: RawRow, column: str) -> str:
    """Return a trimmed cell value, or an empty string when absent."""
    value = row.get(column)
    if value is None:
        return ""
    return str(value).strip()
