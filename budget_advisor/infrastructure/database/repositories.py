"""Read-only data access layer for the household ledger"""

import uuid
from datetime import date
from typing import List, Optional, Sequence, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload
from budget_advisor.infrastructure.database.models import Account, MonthClosure, Transaction, UserSettings
from budget_advisor.domain.models import EXPENSE, INCOME, DateRange, PeriodBoundary, TransactionRecord


class AccountRepository:
    """Repository for user accounts"""

    def __init__(self, db: Session):
        self.db = db

    def get_account_ids(self, user_id: str, include_excluded: bool = False) -> List[uuid.UUID]:
        """Accounts used for budgeting; those excluded from forecasts are skipped by default"""
        query = self.db.query(Account.id).filter(Account.user_id == user_id)
        if not include_excluded:
            query = query.filter(Account.exclude_from_previsionnel.is_(False))
        return [row.id for row in query.order_by(Account.created_at).all()]

    def get_balances(self, user_id: str) -> Tuple[float, float]:
        """Opening balances summed as (budgeted accounts, excluded accounts)"""
        rows = (
            self.db.query(Account.exclude_from_previsionnel, func.sum(Account.initial_balance))
            .filter(Account.user_id == user_id)
            .group_by(Account.exclude_from_previsionnel)
            .all()
        )
        included = excluded = 0.0
        for is_excluded, total in rows:
            if is_excluded:
                excluded = float(total or 0)
            else:
                included = float(total or 0)
        return included, excluded


class MonthClosureRepository:
    """Repository for closed accounting periods"""

    def __init__(self, db: Session):
        self.db = db

    def get_boundaries(self, user_id: str, month_keys: Sequence[str]) -> List[PeriodBoundary]:
        """Recorded closures for the given months"""
        if not month_keys:
            return []
        closures = (
            self.db.query(MonthClosure)
            .filter(MonthClosure.user_id == user_id)
            .filter(MonthClosure.month_year.in_(list(month_keys)))
            .all()
        )
        return [
            PeriodBoundary(month_key=c.month_year, start_date=c.start_date, end_date=c.end_date)
            for c in closures
        ]


class TransactionRepository:
    """Repository for ledger transactions"""

    def __init__(self, db: Session):
        self.db = db

    def get_earliest_transaction_date(self, account_ids: Sequence[uuid.UUID]) -> Optional[date]:
        """Date of the first recorded transaction across the accounts"""
        if not account_ids:
            return None
        return (
            self.db.query(func.min(Transaction.date))
            .filter(Transaction.account_id.in_(list(account_ids)))
            .scalar()
        )

    def get_transactions(self, account_ids: Sequence[uuid.UUID], ranges: Sequence[DateRange]) -> List[TransactionRecord]:
        """
        Fetch income/expense transactions for each range (inclusive bounds).

        One query per range, in range order.
        """
        records: List[TransactionRecord] = []
        if not account_ids:
            return records

        for period in ranges:
            rows = (
                self.db.query(Transaction)
                .options(joinedload(Transaction.category))
                .filter(Transaction.account_id.in_(list(account_ids)))
                .filter(Transaction.date >= period.start)
                .filter(Transaction.date <= period.end)
                .filter(Transaction.type.in_((INCOME, EXPENSE)))
                .order_by(Transaction.date, Transaction.id)
                .all()
            )
            records.extend(
                TransactionRecord(
                    amount=float(row.amount),
                    date=row.date,
                    kind=row.type,
                    category_name=row.category.name if row.category is not None else None,
                )
                for row in rows
            )

        return records


class UserSettingsRepository:
    """Repository for stored budgeting preferences"""

    def __init__(self, db: Session):
        self.db = db

    def get_settings(self, user_id: str) -> Optional[UserSettings]:
        return self.db.query(UserSettings).filter(UserSettings.user_id == user_id).first()
