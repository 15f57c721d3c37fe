"""Debt lifecycle, catch-up and repayment endpoints"""

import time
import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from ledgerly.api.dependencies import get_debt_service, get_request_id, get_user_id
from ledgerly.api.v1.schemas import (
    BatchRepaymentRequest,
    BatchRepaymentResponse,
    CatchUpRequest,
    CatchUpResponse,
    DebtCreateRequest,
    DebtPatchRequest,
    DebtResponse,
    DebtUpdateResponse,
    ItemResultResponse,
    PaymentResponse,
    RepaymentRequest,
)
from ledgerly.domain.models import DebtRole, DebtStatus
from ledgerly.infrastructure.observability.logging import (
    log_batch_repayment,
    log_catch_up,
    log_payoff,
    log_repayment,
)
from ledgerly.services.debt_service import DebtService

router = APIRouter()


@router.post("/debts", response_model=DebtResponse, status_code=status.HTTP_201_CREATED)
async def create_debt(
    request_body: DebtCreateRequest,
    user_id: str = Depends(get_user_id),
    service: DebtService = Depends(get_debt_service),
):
    """
    Create a debt.

    The body is discriminated on `role`: institutional debts need an account
    and a schedule, lent/borrowed debts need a counterparty. When only a term
    is given the installment is derived from it.
    """
    debt = await service.create_debt(user_id, **request_body.model_dump())
    return DebtResponse.model_validate(debt)


@router.get("/debts", response_model=List[DebtResponse])
def list_debts(
    role: Optional[DebtRole] = Query(None),
    debt_status: Optional[DebtStatus] = Query(None, alias="status"),
    counterparty_name: Optional[str] = Query(None),
    user_id: str = Depends(get_user_id),
    service: DebtService = Depends(get_debt_service),
):
    """List the caller's debts, optionally filtered"""
    debts = service.list_debts(
        user_id,
        role=role.value if role else None,
        status=debt_status.value if debt_status else None,
        counterparty_name=counterparty_name,
    )
    return [DebtResponse.model_validate(d) for d in debts]


@router.post("/debts/catch-up", response_model=CatchUpResponse)
def catch_up_all(
    request: Request,
    request_body: Optional[CatchUpRequest] = None,
    user_id: str = Depends(get_user_id),
    service: DebtService = Depends(get_debt_service),
):
    """
    Generate pending updates for every debt that has come due.

    Returns one result per visited debt; a debt that cannot be processed
    (no installment, lost race) is reported rather than failing the call.
    """
    start_time = time.time()
    as_of = (request_body.as_of if request_body else None) or date.today()

    results = service.catch_up_all(user_id, as_of)

    duration_ms = (time.time() - start_time) * 1000
    log_catch_up(get_request_id(request), user_id, results, duration_ms)

    return CatchUpResponse(
        as_of=as_of,
        results=[ItemResultResponse.model_validate(r) for r in results],
    )


@router.post("/debts/batch-repayment", response_model=BatchRepaymentResponse)
async def batch_repayment(
    request_body: BatchRepaymentRequest,
    request: Request,
    user_id: str = Depends(get_user_id),
    service: DebtService = Depends(get_debt_service),
):
    """Spread one payment across several debts in the order given"""
    results = await service.batch_repay(
        user_id,
        request_body.debt_ids,
        request_body.amount_cents,
        request_body.payment_date,
        account_id=request_body.account_id,
    )
    log_batch_repayment(get_request_id(request), user_id, request_body.amount_cents, results)

    return BatchRepaymentResponse(
        amount_cents=request_body.amount_cents,
        results=[ItemResultResponse.model_validate(r) for r in results],
    )


@router.get("/debts/{debt_id}", response_model=DebtResponse)
def get_debt(
    debt_id: uuid.UUID,
    user_id: str = Depends(get_user_id),
    service: DebtService = Depends(get_debt_service),
):
    return DebtResponse.model_validate(service.get_debt(user_id, debt_id))


@router.patch("/debts/{debt_id}", response_model=DebtResponse)
async def update_debt(
    debt_id: uuid.UUID,
    request_body: DebtPatchRequest,
    user_id: str = Depends(get_user_id),
    service: DebtService = Depends(get_debt_service),
):
    """Edit name, account, notes or settlement group"""
    debt = await service.update_debt(user_id, debt_id, **request_body.model_dump(exclude_unset=True))
    return DebtResponse.model_validate(debt)


@router.delete("/debts/{debt_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_debt(
    debt_id: uuid.UUID,
    user_id: str = Depends(get_user_id),
    service: DebtService = Depends(get_debt_service),
):
    service.delete_debt(user_id, debt_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/debts/{debt_id}/updates", response_model=List[DebtUpdateResponse])
def list_updates(
    debt_id: uuid.UUID,
    user_id: str = Depends(get_user_id),
    service: DebtService = Depends(get_debt_service),
):
    """Scheduled and recorded updates of a debt, oldest first"""
    return [DebtUpdateResponse.model_validate(u) for u in service.list_updates(user_id, debt_id)]


@router.post("/debts/{debt_id}/catch-up", response_model=ItemResultResponse)
def catch_up_debt(
    debt_id: uuid.UUID,
    request_body: Optional[CatchUpRequest] = None,
    user_id: str = Depends(get_user_id),
    service: DebtService = Depends(get_debt_service),
):
    as_of = request_body.as_of if request_body else None
    return ItemResultResponse.model_validate(service.catch_up_debt(user_id, debt_id, as_of))


@router.post("/debts/{debt_id}/pay-early", response_model=PaymentResponse)
async def pay_early(
    debt_id: uuid.UUID,
    request: Request,
    user_id: str = Depends(get_user_id),
    service: DebtService = Depends(get_debt_service),
):
    """Pay the whole outstanding balance and settle the debt"""
    update = await service.pay_early(user_id, debt_id)
    log_payoff(get_request_id(request), user_id, str(debt_id), update.amount_cents)

    return PaymentResponse(
        debt=DebtResponse.model_validate(service.get_debt(user_id, debt_id)),
        update=DebtUpdateResponse.model_validate(update),
    )


@router.post("/debts/{debt_id}/repayments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def add_repayment(
    debt_id: uuid.UUID,
    request_body: RepaymentRequest,
    request: Request,
    user_id: str = Depends(get_user_id),
    service: DebtService = Depends(get_debt_service),
):
    """Record a partial repayment, optionally with a non-cash adjustment"""
    update = await service.add_repayment(
        user_id,
        debt_id,
        request_body.amount_cents,
        request_body.payment_date,
        adjustment_cents=request_body.adjustment_cents,
        account_id=request_body.account_id,
        notes=request_body.notes,
    )
    debt = service.get_debt(user_id, debt_id)
    log_repayment(
        get_request_id(request),
        user_id,
        str(debt_id),
        update.amount_cents,
        update.adjustment_cents,
        debt.current_balance_cents,
    )

    return PaymentResponse(
        debt=DebtResponse.model_validate(debt),
        update=DebtUpdateResponse.model_validate(update),
    )
