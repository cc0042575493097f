"""Domain layer for bookkeep application."""

_SERVICES = {
    "UserService": "bookkeep.domain.user",
    "AccountService": "bookkeep.domain.account",
    "StatementService": "bookkeep.domain.statement",
    "TransactionService": "bookkeep.domain.transaction",
    "IngestionService": "bookkeep.domain.ingestion",
}

__all__ = list(_SERVICES)


# Import services lazily; parsers import domain.errors, and services import parsers
def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
