from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bookkeep.domain.entities import Statement
from bookkeep.domain.ingestion import IngestionSummary


class ProcessStatementRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    storage_path: Optional[str] = Field(None, alias="storagePath")
    account_id: Optional[str] = Field(None, alias="accountId")
    bank_account_id: Optional[str] = Field(None, alias="bankAccountId")

    @property
    def target_account_id(self) -> Optional[str]:
        return self.account_id or self.bank_account_id


class RowCounts(BaseModel):
    processed: int
    inserted: int
    duplicates: int
    notCompleted: int
    errors: int


class ProcessStatementResponse(BaseModel):
    message: str
    details: str
    bankType: str
    transactionCount: int
    statementId: str
    counts: RowCounts

    @classmethod
    def from_summary(cls, summary: IngestionSummary) -> "ProcessStatementResponse":
        return cls(
            message="Statement processed successfully",
            details=summary.details,
            bankType=summary.bank_type,
            transactionCount=summary.inserted,
            statementId=summary.statement_id,
            counts=RowCounts(
                processed=summary.processed,
                inserted=summary.inserted,
                duplicates=summary.duplicates,
                notCompleted=summary.not_completed,
                errors=summary.errors,
            ),
        )


class StatementResponse(BaseModel):
    id: str
    bankAccountId: str
    storagePath: str
    filename: str
    sourceBank: str
    status: str
    transactionsCount: int
    errorMessage: Optional[str] = None
    uploadedAt: datetime
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_entity(cls, statement: Statement) -> "StatementResponse":
        return cls(
            id=statement.id,
            bankAccountId=statement.bank_account_id,
            storagePath=statement.storage_path,
            filename=statement.filename,
            sourceBank=statement.source_bank,
            status=statement.status.value,
            transactionsCount=statement.transactions_count,
            errorMessage=statement.error_message,
            uploadedAt=statement.uploaded_at,
            updatedAt=statement.updated_at,
        )


class ErrorResponse(BaseModel):
    error: str
