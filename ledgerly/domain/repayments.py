"""Payoff, single repayment and batch allocation rules"""

from datetime import date
from typing import List, Optional, Sequence

from ledgerly.domain.exceptions import AlreadySettledError, OverpaymentError, ValidationError
from ledgerly.domain.models import Allocation, Debt, DebtRole, DebtUpdate, UpdateStatus


def transaction_type_for(debt: Debt) -> str:
    """Repaying a loan spends money; a counterparty repaying you is income"""
    return "income" if debt.role == DebtRole.LENT else "expense"


def plan_payoff(debt: Debt, on: date) -> DebtUpdate:
    """
    Pay the whole outstanding balance in one paid update.

    Raises:
        AlreadySettledError: nothing left to pay
    """
    if debt.current_balance_cents <= 0:
        raise AlreadySettledError(f"Debt {debt.id} is already settled")

    return DebtUpdate(
        update_date=on,
        amount_cents=debt.current_balance_cents,
        status=UpdateStatus.PAID,
        debt_id=debt.id,
        notes="Early payoff",
    )


def plan_repayment(
    debt: Debt,
    amount_cents: int,
    on: date,
    adjustment_cents: int = 0,
    notes: Optional[str] = None,
) -> DebtUpdate:
    """
    Record a partial repayment; `adjustment_cents` lowers the balance
    without moving money (discounts, forgiven interest, rounding).
    """
    if amount_cents is None or amount_cents <= 0:
        raise ValidationError("Repayment amount must be greater than zero", field="amount_cents")
    if adjustment_cents < 0:
        raise ValidationError("Adjustment cannot be negative", field="adjustment_cents")
    if debt.current_balance_cents <= 0:
        raise AlreadySettledError(f"Debt {debt.id} is already settled")

    total = amount_cents + adjustment_cents
    if total > debt.current_balance_cents:
        raise OverpaymentError(
            f"Repayment of {total} cents exceeds outstanding balance of {debt.current_balance_cents} cents"
        )

    return DebtUpdate(
        update_date=on,
        amount_cents=amount_cents,
        adjustment_cents=adjustment_cents,
        status=UpdateStatus.PAID,
        debt_id=debt.id,
        notes=notes,
    )


def allocate_batch(debts: Sequence[Debt], amount_cents: int) -> List[Allocation]:
    """
    Split a payment across debts in the order given.

    Each debt takes up to its current balance until the amount runs out;
    debts reached after that get a zero allocation. The allocations always
    sum to `amount_cents`.

    Raises:
        ValidationError: non-positive amount, no debts, or repeated debts
        OverpaymentError: amount exceeds the combined outstanding balance

    Example:
        balances [300, 500, 200], amount 600 -> [300, 300, 0]
    """
    if amount_cents is None or amount_cents <= 0:
        raise ValidationError("Amount must be greater than zero", field="amount_cents")
    if not debts:
        raise ValidationError("At least one debt is required", field="debt_ids")

    ids = [d.id for d in debts]
    if len(set(ids)) != len(ids):
        raise ValidationError("Debt ids must be unique", field="debt_ids")

    outstanding = sum(d.current_balance_cents for d in debts)
    if amount_cents > outstanding:
        raise OverpaymentError(
            f"Amount of {amount_cents} cents exceeds outstanding balance of {outstanding} cents"
        )

    remaining = amount_cents
    allocations = []
    for debt in debts:
        portion = min(debt.current_balance_cents, remaining)
        allocations.append(Allocation(debt_id=debt.id, amount_cents=portion))
        remaining -= portion

    return allocations
