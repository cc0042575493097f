"""Statement ingestion pipeline.

A statement moves through ``parsing`` to ``parsed`` or ``error``:

1. resolve the bank account and check ownership
2. create the statement row in ``parsing``
3. read the file from storage
4. load the existing transactions that seed duplicate detection
5. read, normalize and deduplicate every row
6. insert accepted candidates in one database transaction
7. record the final status and transaction count

Failures before row processing (storage, unsupported format, unreadable
file) leave the statement in ``parsing``. Failures while persisting move it
to ``error``. Row problems never abort a run; each row yields a RowOutcome
and the summary counts are aggregated from those events.
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from bookkeep.config import EmptyImportPolicy, Settings
from bookkeep.database.base import Database
from bookkeep.domain.account import AccountService
from bookkeep.domain.dedup import DedupScope, is_duplicate
from bookkeep.domain.entities import (
    BankAccount,
    StatementStatus,
    Transaction,
    TransactionCandidate,
)
from bookkeep.domain.errors import EmptyImportError, PersistenceError, ValidationError
from bookkeep.formats import BankFormat, RowContext, RowNormalizer, Skip, SkipKind
from bookkeep.storage import StatementStorage

logger = logging.getLogger(__name__)


class RowOutcomeKind(str, Enum):
    """What happened to one statement row."""

    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"
    NOT_COMPLETED = "not_completed"
    ERROR = "error"


@dataclass(frozen=True)
class RowOutcome:
    """Per-row ingestion event."""

    row_number: int
    kind: RowOutcomeKind
    reason: Optional[str] = None
    candidate: Optional[TransactionCandidate] = None


@dataclass(frozen=True)
class IngestionSummary:
    """Result of one ingestion run."""

    statement_id: str
    bank_type: str
    processed: int
    inserted: int
    duplicates: int
    not_completed: int
    errors: int
    events: tuple[RowOutcome, ...] = field(default=(), repr=False)

    @property
    def details(self) -> str:
        return (
            f"{self.processed} rows processed, {self.inserted} inserted, "
            f"{self.duplicates} duplicates skipped, {self.errors} errors"
        )

    @property
    def error_messages(self) -> list[str]:
        return [
            f"Row {event.row_number}: {event.reason}"
            for event in self.events
            if event.kind is RowOutcomeKind.ERROR
        ]


# One entry per account ever ingested in this process; never pruned.
_account_locks: dict[str, threading.Lock] = {}
_account_locks_guard = threading.Lock()


def account_lock(account_id: str) -> threading.Lock:
    """Return the in-process lock serializing ingestion for one account."""
    with _account_locks_guard:
        return _account_locks.setdefault(account_id, threading.Lock())


def classify_rows(
    normalizer: RowNormalizer,
    rows: Iterable[tuple[int, dict[str, str]]],
    context: RowContext,
    existing_transactions: list[Transaction],
) -> list[RowOutcome]:
    """Normalize and deduplicate rows, producing one outcome per row.

    The existing-transaction snapshot is not extended with accepted rows, so
    repeated rows inside a single file are all accepted.
    """
    outcomes = []
    for row_number, row in rows:
        result = normalizer.normalize(row, context)
        if isinstance(result, Skip):
            kind = (
                RowOutcomeKind.NOT_COMPLETED
                if result.kind is SkipKind.NOT_COMPLETED
                else RowOutcomeKind.ERROR
            )
            outcome = RowOutcome(row_number, kind, reason=result.reason)
        elif is_duplicate(result, existing_transactions):
            outcome = RowOutcome(
                row_number,
                RowOutcomeKind.DUPLICATE,
                reason=f"Duplicate of existing transaction on {result.transaction_date.isoformat()}",
                candidate=result,
            )
        else:
            outcome = RowOutcome(row_number, RowOutcomeKind.ACCEPTED, candidate=result)

        logger.debug(
            "Row %d %s",
            row_number,
            outcome.kind.value,
            extra={
                "statement_id": context.statement_id,
                "row": row_number,
                "outcome": outcome.kind.value,
                "reason": outcome.reason,
            },
        )
        outcomes.append(outcome)
    return outcomes


def statement_filename(storage_path: str) -> str:
    return storage_path.rstrip("/").split("/")[-1] or "unknown"


class IngestionService:
    """Runs the statement ingestion pipeline."""

    def __init__(self, db: Database, storage: StatementStorage, settings: Settings):
        """Initialize ingestion service.

        Args:
            db: Database instance
            storage: Statement file storage
            settings: Dedup scope and empty-import policy are read from here
        """
        self.db = db
        self.storage = storage
        self.settings = settings
        self.account_service = AccountService(db)

    def ingest(self, user_id: str, account_id: str, storage_path: str) -> IngestionSummary:
        """Import one uploaded statement file into an account.

        Args:
            user_id: Requesting user
            account_id: Target bank account
            storage_path: Location of the uploaded file in statement storage

        Returns:
            IngestionSummary with counts and per-row events

        Raises:
            ValidationError: If storage path or account ID is missing
            NotFoundError: If the account doesn't exist
            ForbiddenError: If the account belongs to another user
            StorageError: If the file cannot be read
            UnsupportedFormatError: If the account's bank type has no normalizer
            StatementFileError: If the file cannot be decoded as that format
            PersistenceError: If storing transactions or the statement fails
            EmptyImportError: If the empty-import policy rejects the run
        """
        if not storage_path or not account_id:
            raise ValidationError("Missing storagePath or accountId")

        account = self.account_service.get_owned_account(user_id, account_id)

        with account_lock(account.id):
            return self._ingest(user_id, account, storage_path)

    def _ingest(self, user_id: str, account: BankAccount, storage_path: str) -> IngestionSummary:
        statement_id = self.db.create_statement(
            user_id=user_id,
            bank_account_id=account.id,
            storage_path=storage_path,
            filename=statement_filename(storage_path),
            source_bank=account.bank_type,
            status=StatementStatus.PARSING,
        )
        logger.info(
            "Processing statement %s for account %s (%s)",
            statement_id,
            account.id,
            account.bank_type,
            extra={"statement_id": statement_id},
        )

        data = self.storage.read(storage_path)
        existing = self._load_existing(user_id, account)

        bank_format = BankFormat.from_tag(account.bank_type)
        rows = bank_format.normalizer.read_rows(data)

        context = RowContext(
            user_id=user_id,
            bank_account_id=account.id,
            statement_id=statement_id,
            source_id=storage_path,
            source_bank=account.bank_type,
        )
        outcomes = classify_rows(bank_format.normalizer, rows, context, existing)

        counts = {kind: 0 for kind in RowOutcomeKind}
        for outcome in outcomes:
            counts[outcome.kind] += 1
        accepted = [o.candidate for o in outcomes if o.kind is RowOutcomeKind.ACCEPTED]

        try:
            inserted = len(self.db.insert_transactions(accepted))
        except PersistenceError as e:
            self._mark_error(statement_id, str(e))
            raise

        errors = counts[RowOutcomeKind.ERROR]
        duplicates = counts[RowOutcomeKind.DUPLICATE]
        if (
            self.settings.empty_import_policy is EmptyImportPolicy.ERROR
            and inserted == 0
            and duplicates == 0
            and errors > 0
        ):
            message = f"No transactions imported: {errors} rows could not be parsed"
            self._mark_error(statement_id, message)
            raise EmptyImportError(message)

        try:
            self.db.update_statement(
                statement_id, StatementStatus.PARSED, transactions_count=inserted
            )
        except PersistenceError as e:
            self._mark_error(statement_id, f"Failed to update statement count: {e}")
            raise

        summary = IngestionSummary(
            statement_id=statement_id,
            bank_type=account.bank_type,
            processed=len(outcomes),
            inserted=inserted,
            duplicates=duplicates,
            not_completed=counts[RowOutcomeKind.NOT_COMPLETED],
            errors=errors,
            events=tuple(outcomes),
        )
        logger.info(
            "Statement %s parsed: %s",
            statement_id,
            summary.details,
            extra={"statement_id": statement_id},
        )
        return summary

    def _load_existing(self, user_id: str, account: BankAccount) -> list[Transaction]:
        if self.settings.dedup_scope is DedupScope.BANK_FORMAT:
            return self.db.list_transactions(user_id=user_id, source_bank=account.bank_type)
        return self.db.list_transactions(user_id=user_id, bank_account_id=account.id)

    def _mark_error(self, statement_id: str, message: str) -> None:
        logger.error(
            "Statement %s failed: %s", statement_id, message, extra={"statement_id": statement_id}
        )
        try:
            self.db.update_statement(statement_id, StatementStatus.ERROR, error_message=message)
        except PersistenceError:
            # The original failure is re-raised by the caller
            logger.exception("Could not mark statement %s as error", statement_id)
