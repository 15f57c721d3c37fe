"""SQLAlchemy ORM models for debts and their updates"""

import uuid
from sqlalchemy import Column, BigInteger, Date, DateTime, Integer, ForeignKey, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class DebtRecord(Base):
    """Debt owned by a user"""

    __tablename__ = "debts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    role = Column(Text, nullable=False)
    account_id = Column(Text, nullable=True)
    principal_cents = Column(BigInteger, nullable=False)
    current_balance_cents = Column(BigInteger, nullable=False)
    installment_cents = Column(BigInteger, nullable=True)
    frequency = Column(Text, nullable=True)
    term = Column(Integer, nullable=True)
    start_date = Column(Date, nullable=True)
    next_due_date = Column(Date, nullable=True, index=True)
    installments_posted = Column(Integer, nullable=False, default=0)
    counterparty_name = Column(Text, nullable=True, index=True)
    settlement_group_id = Column(Text, nullable=True, index=True)
    notes = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    updates = relationship(
        "DebtUpdateRecord",
        back_populates="debt",
        cascade="all, delete-orphan",
        order_by="DebtUpdateRecord.update_date",
    )


class DebtUpdateRecord(Base):
    """Scheduled or recorded movement against a debt's balance"""

    __tablename__ = "debt_updates"
    __table_args__ = (
        UniqueConstraint("debt_id", "installment_no", name="uq_debt_update_installment_no"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    debt_id = Column(UUID(as_uuid=True), ForeignKey("debts.id", ondelete="CASCADE"), nullable=False, index=True)
    update_date = Column(Date, nullable=False)
    installment_no = Column(Integer, nullable=True)
    amount_cents = Column(BigInteger, nullable=False)
    adjustment_cents = Column(BigInteger, nullable=False, default=0)
    status = Column(Text, nullable=False, default="pending")
    transaction_id = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    debt = relationship("DebtRecord", back_populates="updates")
