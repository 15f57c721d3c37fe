"""Domain models - pure Python dataclasses representing business entities"""

import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional


class DebtRole(str, Enum):
    INSTITUTIONAL = "institutional"
    LENT = "lent"
    BORROWED = "borrowed"


class DebtStatus(str, Enum):
    ACTIVE = "active"
    SETTLED = "settled"


class UpdateStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    SKIPPED = "skipped"


class Frequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


@dataclass
class Debt:
    """A debt owned by a user; all money in cents"""

    user_id: str
    name: str
    role: DebtRole
    principal_cents: int
    current_balance_cents: int
    installment_cents: Optional[int] = None
    frequency: Optional[Frequency] = None
    term: Optional[int] = None
    start_date: Optional[date] = None
    next_due_date: Optional[date] = None
    installments_posted: int = 0
    account_id: Optional[str] = None
    counterparty_name: Optional[str] = None
    settlement_group_id: Optional[str] = None
    notes: Optional[str] = None
    status: DebtStatus = DebtStatus.ACTIVE
    id: Optional[uuid.UUID] = None

    @property
    def is_settled(self) -> bool:
        return self.status == DebtStatus.SETTLED or self.current_balance_cents == 0


@dataclass
class DebtUpdate:
    """Single scheduled or recorded movement against a debt's balance"""

    update_date: date
    amount_cents: int
    status: UpdateStatus
    adjustment_cents: int = 0
    installment_no: Optional[int] = None
    transaction_id: Optional[str] = None
    notes: Optional[str] = None
    debt_id: Optional[uuid.UUID] = None
    id: Optional[uuid.UUID] = None


@dataclass
class TransactionRecord:
    """Money movement persisted by the external transaction service"""

    transaction_id: str
    amount_cents: int
    type: str  # "expense" or "income"
    description: str
    date: date
    account_id: Optional[str] = None


@dataclass
class CatchUpPlan:
    """Outcome of replaying elapsed periods against a debt snapshot"""

    updates: List[DebtUpdate]
    balance_cents: int
    next_due_date: Optional[date]
    installments_posted: int
    status: DebtStatus


@dataclass
class Allocation:
    """Portion of a batch payment applied to one debt"""

    debt_id: uuid.UUID
    amount_cents: int


@dataclass
class CounterpartyBalance:
    """Net position with one person across lent/borrowed debts"""

    name: str
    you_owe_cents: int = 0
    they_owe_cents: int = 0
    debt_ids: List[uuid.UUID] = field(default_factory=list)

    @property
    def net_balance_cents(self) -> int:
        return self.they_owe_cents - self.you_owe_cents


@dataclass
class GroupBalance:
    """Net position across the debts sharing a settlement group"""

    group_id: str
    total_cents: int = 0
    debt_ids: List[uuid.UUID] = field(default_factory=list)


@dataclass
class ItemResult:
    """Per-debt outcome of a catch-up or batch loop"""

    debt_id: uuid.UUID
    outcome: str  # "applied" | "up_to_date" | "skipped" | "failed" | "conflict"
    amount_cents: int = 0
    updates_created: int = 0
    error: Optional[str] = None
