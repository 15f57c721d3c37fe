"""Who-owes-whom views and settle-up for person-to-person debts"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Request

from ledgerly.api.dependencies import get_debt_service, get_request_id, get_user_id
from ledgerly.api.v1.schemas import (
    BatchRepaymentResponse,
    CounterpartyBalanceResponse,
    DebtResponse,
    GroupBalanceResponse,
    ItemResultResponse,
    SettleUpRequest,
)
from ledgerly.infrastructure.observability.logging import log_batch_repayment
from ledgerly.services.debt_service import DebtService

router = APIRouter()


@router.get("/balances/counterparties", response_model=List[CounterpartyBalanceResponse])
def get_counterparty_balances(
    user_id: str = Depends(get_user_id),
    service: DebtService = Depends(get_debt_service),
):
    """
    Net balance per counterparty across open lent/borrowed debts.

    Positive `net_balance_cents` means they owe you. Largest absolute
    balances come first.
    """
    return [CounterpartyBalanceResponse.model_validate(b) for b in service.counterparty_balances(user_id)]


@router.post("/balances/counterparties/{name}/settle", response_model=BatchRepaymentResponse)
async def settle_with_counterparty(
    name: str,
    request: Request,
    request_body: Optional[SettleUpRequest] = None,
    user_id: str = Depends(get_user_id),
    service: DebtService = Depends(get_debt_service),
):
    """Settle every open debt with one person (everything outstanding unless an amount is given)"""
    request_body = request_body or SettleUpRequest()
    results = await service.settle_up(
        user_id,
        name,
        request_body.payment_date or date.today(),
        account_id=request_body.account_id,
        amount_cents=request_body.amount_cents,
    )
    amount_cents = sum(r.amount_cents for r in results if r.outcome == "applied")
    log_batch_repayment(get_request_id(request), user_id, amount_cents, results)

    return BatchRepaymentResponse(
        amount_cents=amount_cents,
        results=[ItemResultResponse.model_validate(r) for r in results],
    )


@router.get("/balances/settlement-groups", response_model=List[GroupBalanceResponse])
def get_group_balances(
    user_id: str = Depends(get_user_id),
    service: DebtService = Depends(get_debt_service),
):
    """Net total per settlement group (lent positive, borrowed negative)"""
    return [GroupBalanceResponse.model_validate(g) for g in service.group_balances(user_id)]


@router.get("/settlement-groups", response_model=List[str])
def list_settlement_groups(
    user_id: str = Depends(get_user_id),
    service: DebtService = Depends(get_debt_service),
):
    """All settlement group labels in use, including fully settled groups"""
    return service.list_settlement_groups(user_id)


@router.get("/balances/settlement-groups/{group_id}", response_model=List[DebtResponse])
def get_group_debts(
    group_id: str,
    user_id: str = Depends(get_user_id),
    service: DebtService = Depends(get_debt_service),
):
    return [DebtResponse.model_validate(d) for d in service.list_group_debts(user_id, group_id)]
