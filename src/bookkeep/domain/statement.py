"""Statement domain service (read side).

Statement rows are written only by the ingestion pipeline; this service
exposes them to callers that poll for progress.
"""

from typing import Optional

from bookkeep.database.base import Database
from bookkeep.domain.entities import Statement as StatementEntity
from bookkeep.domain.errors import ForbiddenError, NotFoundError, statement_not_found


class StatementService:
    """Service for querying statements."""

    def __init__(self, db: Database):
        self.db = db

    def get_statement(self, statement_id: str) -> Optional[StatementEntity]:
        return self.db.get_statement(statement_id)

    def get_owned_statement(self, user_id: str, statement_id: str) -> StatementEntity:
        """Get a statement and verify the user owns it.

        Raises:
            NotFoundError: If the statement doesn't exist
            ForbiddenError: If the statement belongs to another user
        """
        statement = self.db.get_statement(statement_id)
        if statement is None:
            raise NotFoundError(statement_not_found(statement_id))
        if statement.user_id != user_id:
            raise ForbiddenError(f"Statement {statement_id} does not belong to user")
        return statement

    def list_statements(
        self, user_id: str, bank_account_id: Optional[str] = None
    ) -> list[StatementEntity]:
        """List a user's statements, newest first."""
        return self.db.list_statements(user_id=user_id, bank_account_id=bank_account_id)
