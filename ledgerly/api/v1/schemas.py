"""Pydantic schemas for API request/response validation"""

import uuid
from datetime import date
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ledgerly.domain.models import DebtRole, DebtStatus, Frequency, UpdateStatus


class DebtCreateBase(BaseModel):
    """Fields shared by every debt role"""

    name: str = Field(..., min_length=1, max_length=200)
    principal_cents: int = Field(..., gt=0, description="Original amount in cents")
    current_balance_cents: Optional[int] = Field(None, ge=0, description="Defaults to the principal")
    installment_cents: Optional[int] = Field(None, gt=0, description="Derived from term when omitted")
    frequency: Optional[Frequency] = None
    term: Optional[int] = Field(None, gt=0, description="Number of scheduled payments")
    start_date: Optional[date] = None
    account_id: Optional[str] = None
    settlement_group_id: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=1000)


class InstitutionalDebtCreate(DebtCreateBase):
    """Loan or credit line from an institution; always scheduled"""

    role: Literal["institutional"]
    account_id: str = Field(..., min_length=1)
    frequency: Frequency
    start_date: date


class PersonalDebtCreate(DebtCreateBase):
    """Money lent to or borrowed from a person"""

    role: Literal["lent", "borrowed"]
    counterparty_name: str = Field(..., min_length=1, max_length=200)


DebtCreateRequest = Annotated[
    Union[InstitutionalDebtCreate, PersonalDebtCreate],
    Field(discriminator="role"),
]


class DebtPatchRequest(BaseModel):
    """Request body for PATCH /v1/debts/{debt_id}"""

    name: Optional[str] = Field(None, max_length=200)
    account_id: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=1000)
    settlement_group_id: Optional[str] = None


class DebtResponse(BaseModel):
    """Single debt"""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    role: DebtRole
    status: DebtStatus
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


class DebtUpdateResponse(BaseModel):
    """Single scheduled or recorded update"""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    debt_id: uuid.UUID
    update_date: date
    status: UpdateStatus
    amount_cents: int
    adjustment_cents: int = 0
    installment_no: Optional[int] = None
    transaction_id: Optional[str] = None
    notes: Optional[str] = None


class ItemResultResponse(BaseModel):
    """Per-debt outcome of catch-up or batch processing"""

    model_config = ConfigDict(from_attributes=True)

    debt_id: uuid.UUID
    outcome: str
    amount_cents: int = 0
    updates_created: int = 0
    error: Optional[str] = None


class CatchUpRequest(BaseModel):
    """Request body for catch-up endpoints"""

    as_of: Optional[date] = Field(None, description="Processing date (default: today)")


class CatchUpResponse(BaseModel):
    """Response for POST /v1/debts/catch-up"""

    as_of: date
    results: List[ItemResultResponse]


class PaymentResponse(BaseModel):
    """Debt state after a payoff or repayment plus the paid update"""

    debt: DebtResponse
    update: DebtUpdateResponse


class RepaymentRequest(BaseModel):
    """Request body for POST /v1/debts/{debt_id}/repayments"""

    amount_cents: int = Field(..., gt=0)
    payment_date: date
    adjustment_cents: int = Field(0, ge=0, description="Balance reduction without cash movement")
    account_id: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=1000)


class BatchRepaymentRequest(BaseModel):
    """Request body for POST /v1/debts/batch-repayment"""

    debt_ids: List[uuid.UUID] = Field(..., min_length=1)
    amount_cents: int = Field(..., gt=0)
    payment_date: date
    account_id: Optional[str] = None


class BatchRepaymentResponse(BaseModel):
    """Per-debt results of a batch repayment"""

    amount_cents: int
    results: List[ItemResultResponse]


class SettleUpRequest(BaseModel):
    """Request body for POST /v1/balances/counterparties/{name}/settle"""

    payment_date: Optional[date] = Field(None, description="Defaults to today")
    account_id: Optional[str] = None
    amount_cents: Optional[int] = Field(None, gt=0, description="Defaults to everything outstanding")


class CounterpartyBalanceResponse(BaseModel):
    """Net position with one counterparty"""

    model_config = ConfigDict(from_attributes=True)

    name: str
    you_owe_cents: int
    they_owe_cents: int
    net_balance_cents: int
    debt_ids: List[uuid.UUID]


class GroupBalanceResponse(BaseModel):
    """Net position for one settlement group"""

    model_config = ConfigDict(from_attributes=True)

    group_id: str
    total_cents: int
    debt_ids: List[uuid.UUID]
