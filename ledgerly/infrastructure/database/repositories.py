"""Data access layer for debt entities"""

import uuid
from datetime import date
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from ledgerly.infrastructure.database.models import DebtRecord, DebtUpdateRecord
from ledgerly.domain.models import Debt, DebtRole, DebtStatus, DebtUpdate, Frequency, UpdateStatus


def debt_to_domain(record: DebtRecord) -> Debt:
    """Map ORM row to domain dataclass"""
    return Debt(
        id=record.id,
        user_id=record.user_id,
        name=record.name,
        role=DebtRole(record.role),
        principal_cents=record.principal_cents,
        current_balance_cents=record.current_balance_cents,
        installment_cents=record.installment_cents,
        frequency=Frequency(record.frequency) if record.frequency else None,
        term=record.term,
        start_date=record.start_date,
        next_due_date=record.next_due_date,
        installments_posted=record.installments_posted or 0,
        account_id=record.account_id,
        counterparty_name=record.counterparty_name,
        settlement_group_id=record.settlement_group_id,
        notes=record.notes,
        status=DebtStatus(record.status),
    )


def update_to_domain(record: DebtUpdateRecord) -> DebtUpdate:
    """Map ORM row to domain dataclass"""
    return DebtUpdate(
        id=record.id,
        debt_id=record.debt_id,
        update_date=record.update_date,
        installment_no=record.installment_no,
        amount_cents=record.amount_cents,
        adjustment_cents=record.adjustment_cents or 0,
        status=UpdateStatus(record.status),
        transaction_id=record.transaction_id,
        notes=record.notes,
    )


class DebtRepository:
    """Repository for debts"""

    def __init__(self, db: Session):
        self.db = db

    def create_debt(self, debt: Debt) -> DebtRecord:
        """Persist a new debt"""
        db_debt = DebtRecord(
            user_id=debt.user_id,
            name=debt.name,
            role=debt.role.value,
            account_id=debt.account_id,
            principal_cents=debt.principal_cents,
            current_balance_cents=debt.current_balance_cents,
            installment_cents=debt.installment_cents,
            frequency=debt.frequency.value if debt.frequency else None,
            term=debt.term,
            start_date=debt.start_date,
            next_due_date=debt.next_due_date,
            installments_posted=debt.installments_posted,
            counterparty_name=debt.counterparty_name,
            settlement_group_id=debt.settlement_group_id,
            notes=debt.notes,
            status=debt.status.value,
        )
        self.db.add(db_debt)
        self.db.flush()  # Get ID without committing
        return db_debt

    def get_debt(self, user_id: str, debt_id: uuid.UUID) -> Optional[DebtRecord]:
        """Fetch a debt within the owner's scope"""
        return (
            self.db.query(DebtRecord)
            .filter(DebtRecord.id == debt_id, DebtRecord.user_id == user_id)
            .first()
        )

    def get_debts(self, user_id: str, debt_ids: Iterable[uuid.UUID]) -> List[DebtRecord]:
        """Fetch several debts within the owner's scope (unordered)"""
        return (
            self.db.query(DebtRecord)
            .filter(DebtRecord.user_id == user_id, DebtRecord.id.in_(list(debt_ids)))
            .all()
        )

    def list_debts(
        self,
        user_id: str,
        role: Optional[str] = None,
        status: Optional[str] = None,
        counterparty_name: Optional[str] = None,
    ) -> List[DebtRecord]:
        """List a user's debts, oldest first, with optional filters"""
        query = self.db.query(DebtRecord).filter(DebtRecord.user_id == user_id)
        if role:
            query = query.filter(DebtRecord.role == role)
        if status:
            query = query.filter(DebtRecord.status == status)
        if counterparty_name:
            query = query.filter(DebtRecord.counterparty_name == counterparty_name)
        return query.order_by(DebtRecord.created_at, DebtRecord.name).all()

    def list_by_settlement_group(self, user_id: str, group_id: str) -> List[DebtRecord]:
        return (
            self.db.query(DebtRecord)
            .filter(DebtRecord.user_id == user_id, DebtRecord.settlement_group_id == group_id)
            .order_by(DebtRecord.created_at)
            .all()
        )

    def list_settlement_group_ids(self, user_id: str) -> List[str]:
        """Every group label the user has used, settled debts included"""
        rows = (
            self.db.query(DebtRecord.settlement_group_id)
            .filter(DebtRecord.user_id == user_id, DebtRecord.settlement_group_id.isnot(None))
            .distinct()
            .order_by(DebtRecord.settlement_group_id)
            .all()
        )
        return [group_id for (group_id,) in rows]

    def list_due(self, user_id: str, as_of: date) -> List[DebtRecord]:
        """Active scheduled debts with a due date on or before `as_of`"""
        return (
            self.db.query(DebtRecord)
            .filter(
                DebtRecord.user_id == user_id,
                DebtRecord.status == DebtStatus.ACTIVE.value,
                DebtRecord.next_due_date.isnot(None),
                DebtRecord.next_due_date <= as_of,
            )
            .order_by(DebtRecord.next_due_date)
            .all()
        )

    def update_details(self, db_debt: DebtRecord, **fields) -> DebtRecord:
        """Apply descriptive field changes (never balances or schedule)"""
        for name, value in fields.items():
            setattr(db_debt, name, value)
        self.db.flush()
        return db_debt

    def delete_debt(self, db_debt: DebtRecord) -> None:
        """Delete debt; its updates go with it"""
        self.db.delete(db_debt)
        self.db.flush()

    def compare_and_set_schedule(
        self,
        debt_id: uuid.UUID,
        expected_balance_cents: int,
        expected_next_due_date: date,
        balance_cents: int,
        next_due_date: date,
        installments_posted: int,
        status: DebtStatus,
    ) -> bool:
        """
        Atomically advance the schedule only if nobody else moved it first.

        Returns False when the row no longer holds the expected balance and
        due date, i.e. a concurrent catch-up or payment got there first.
        """
        updated = (
            self.db.query(DebtRecord)
            .filter(
                DebtRecord.id == debt_id,
                DebtRecord.current_balance_cents == expected_balance_cents,
                DebtRecord.next_due_date == expected_next_due_date,
            )
            .update(
                {
                    DebtRecord.current_balance_cents: balance_cents,
                    DebtRecord.next_due_date: next_due_date,
                    DebtRecord.installments_posted: installments_posted,
                    DebtRecord.status: status.value,
                },
                synchronize_session=False,
            )
        )
        return updated == 1

    def compare_and_set_balance(
        self,
        debt_id: uuid.UUID,
        expected_balance_cents: int,
        balance_cents: int,
        status: DebtStatus,
    ) -> bool:
        """Atomically replace the balance if it still equals the expected value"""
        updated = (
            self.db.query(DebtRecord)
            .filter(
                DebtRecord.id == debt_id,
                DebtRecord.current_balance_cents == expected_balance_cents,
            )
            .update(
                {
                    DebtRecord.current_balance_cents: balance_cents,
                    DebtRecord.status: status.value,
                },
                synchronize_session=False,
            )
        )
        return updated == 1


class DebtUpdateRepository:
    """Repository for debt updates"""

    def __init__(self, db: Session):
        self.db = db

    def add_updates(self, debt_id: uuid.UUID, updates: List[DebtUpdate]) -> List[DebtUpdateRecord]:
        """Persist updates for a debt"""
        records = [
            DebtUpdateRecord(
                debt_id=debt_id,
                update_date=update.update_date,
                installment_no=update.installment_no,
                amount_cents=update.amount_cents,
                adjustment_cents=update.adjustment_cents,
                status=update.status.value,
                transaction_id=update.transaction_id,
                notes=update.notes,
            )
            for update in updates
        ]
        self.db.add_all(records)
        self.db.flush()
        return records

    def list_updates(self, debt_id: uuid.UUID) -> List[DebtUpdateRecord]:
        """Fetch a debt's updates in date order"""
        return (
            self.db.query(DebtUpdateRecord)
            .filter(DebtUpdateRecord.debt_id == debt_id)
            .order_by(DebtUpdateRecord.update_date, DebtUpdateRecord.created_at)
            .all()
        )
