"""SQLAlchemy ORM models for the household ledger tables (read by this service)"""

import uuid
from sqlalchemy import Column, String, Boolean, Float, DateTime, Date, ForeignKey, Numeric, Text, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class Account(Base):
    """Bank account linked to a user"""

    __tablename__ = "accounts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False, default="")
    exclude_from_previsionnel = Column(Boolean, nullable=False, default=False)
    initial_balance = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transactions = relationship("Transaction", back_populates="account")


class Category(Base):
    """User-defined transaction category"""

    __tablename__ = "categories"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=True, index=True)
    name = Column(Text, nullable=False)
    type = Column(String(16), nullable=True)  # "income" | "expense"


class Transaction(Base):
    """Ledger transaction"""

    __tablename__ = "transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    account_id = Column(UUID(as_uuid=True), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(UUID(as_uuid=True), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False, index=True)
    type = Column(String(16), nullable=False)  # "income" | "expense"
    archived = Column(Boolean, nullable=False, default=False)

    account = relationship("Account", back_populates="transactions")
    category = relationship("Category")


class MonthClosure(Base):
    """Closed accounting period with its exact boundaries"""

    __tablename__ = "month_closures"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    month_year = Column(String(7), nullable=False)  # "YYYY-MM"
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)


class UserSettings(Base):
    """Stored spending targets and savings rate"""

    __tablename__ = "user_settings"

    user_id = Column(Text, primary_key=True)
    spend_targets = Column(JSON, nullable=True)
    savings_rate = Column(Float, nullable=True)
