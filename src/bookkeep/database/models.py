"""SQLAlchemy models for bookkeep database."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """Application user model."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String, unique=True, nullable=False)
    api_token_hash = Column(String(64), unique=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    bank_accounts = relationship("BankAccount", back_populates="user")


class BankAccount(Base):
    """Bank account model."""

    __tablename__ = "bank_accounts"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    account_name = Column(String, nullable=False)
    bank_name = Column(String, nullable=True)
    bank_type = Column(String, nullable=False)
    currency = Column(String(3), default="EUR", nullable=False)
    account_number_last4 = Column(String(4), nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    # Relationships
    user = relationship("User", back_populates="bank_accounts")
    statements = relationship("Statement", back_populates="bank_account")
    transactions = relationship("Transaction", back_populates="bank_account")


class Statement(Base):
    """Statement upload / ingestion run model."""

    __tablename__ = "statements"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    bank_account_id = Column(String(36), ForeignKey("bank_accounts.id"), nullable=False)
    storage_path = Column(String, nullable=False)
    filename = Column(String, nullable=False)
    source_bank = Column(String, nullable=False)
    status = Column(String, default="uploaded", nullable=False)
    transactions_count = Column(Integer, default=0, nullable=False)
    error_message = Column(String, nullable=True)
    uploaded_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    # Relationships
    bank_account = relationship("BankAccount", back_populates="statements")
    transactions = relationship("Transaction", back_populates="statement")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    bank_account_id = Column(String(36), ForeignKey("bank_accounts.id"), nullable=False)
    statement_id = Column(String(36), ForeignKey("statements.id"), nullable=True)
    transaction_date = Column(Date, nullable=False)
    description = Column(String, nullable=False, default="")
    amount = Column(Numeric(20, 8), nullable=False)
    currency = Column(String(3), nullable=False)
    source_id = Column(String, nullable=True)
    source_bank = Column(String, nullable=True)
    category = Column(String, nullable=True)
    vendor = Column(String, nullable=True)
    status = Column(String, default="unmatched", nullable=False)
    invoice_id = Column(String(36), nullable=True)
    note = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Dedup snapshot lookups filter on these
    __table_args__ = (
        Index("ix_transactions_user_account_date", "user_id", "bank_account_id", "transaction_date"),
        Index("ix_transactions_user_source_bank", "user_id", "source_bank"),
    )

    # Relationships
    bank_account = relationship("BankAccount", back_populates="transactions")
    statement = relationship("Statement", back_populates="transactions")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sessions are opened from request worker threads
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
