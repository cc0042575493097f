"""FastAPI application.

Routes authenticate with ``Authorization: Bearer <api token>`` and report
failures as ``{"error": "<message>"}``.
"""

import logging
from typing import Optional

from fastapi import Depends, FastAPI, Header, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from bookkeep.api.schemas import (
    ErrorResponse,
    ProcessStatementRequest,
    ProcessStatementResponse,
    StatementResponse,
)
from bookkeep.config import Settings
from bookkeep.database.base import Database
from bookkeep.domain.entities import User
from bookkeep.domain.errors import (
    AuthenticationError,
    ConflictError,
    DomainError,
    EmptyImportError,
    ForbiddenError,
    NotFoundError,
    PersistenceError,
    StatementFileError,
    StorageError,
    UnsupportedFormatError,
    ValidationError,
)
from bookkeep.domain.ingestion import IngestionService
from bookkeep.domain.statement import StatementService
from bookkeep.domain.user import UserService
from bookkeep.storage import StatementStorage

logger = logging.getLogger(__name__)

# First match wins, so subclasses come before their bases
ERROR_STATUS_CODES: list[tuple[type[DomainError], int]] = [
    (StatementFileError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (EmptyImportError, status.HTTP_400_BAD_REQUEST),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (UnsupportedFormatError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_code_for(error: DomainError) -> int:
    for error_cls, code in ERROR_STATUS_CODES:
        if isinstance(error, error_cls):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None


def get_current_user(request: Request, authorization: str = Header(None)) -> User:
    return request.app.state.user_service.authenticate(bearer_token(authorization))


def create_app(db: Database, storage: StatementStorage, settings: Settings) -> FastAPI:
    """Build the API application around a database and statement storage."""
    app = FastAPI(title="bookkeep", version="0.1.0")
    app.state.user_service = UserService(db)
    app.state.statement_service = StatementService(db)
    app.state.ingestion_service = IngestionService(db, storage, settings)

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        code = status_code_for(exc)
        if code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=code, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Invalid request body"}
        )

    @app.post(
        "/api/process-statement",
        response_model=ProcessStatementResponse,
        responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
    )
    def process_statement(
        body: ProcessStatementRequest,
        request: Request,
        user: User = Depends(get_current_user),
    ):
        if not body.storage_path or not body.target_account_id:
            raise ValidationError("Missing storagePath or accountId")

        summary = request.app.state.ingestion_service.ingest(
            user_id=user.id,
            account_id=body.target_account_id,
            storage_path=body.storage_path,
        )
        return ProcessStatementResponse.from_summary(summary)

    @app.get("/api/statements", response_model=list[StatementResponse])
    def list_statements(
        request: Request,
        accountId: Optional[str] = None,
        user: User = Depends(get_current_user),
    ):
        statements = request.app.state.statement_service.list_statements(
            user_id=user.id, bank_account_id=accountId
        )
        return [StatementResponse.from_entity(s) for s in statements]

    @app.get(
        "/api/statements/{statement_id}",
        response_model=StatementResponse,
        responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    )
    def get_statement(
        statement_id: str,
        request: Request,
        user: User = Depends(get_current_user),
    ):
        statement = request.app.state.statement_service.get_owned_statement(
            user.id, statement_id
        )
        return StatementResponse.from_entity(statement)

    return app
