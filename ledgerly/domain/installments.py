"""Installment calculation and scheduled catch-up for debt repayment"""

from datetime import date
from typing import List, Optional

from ledgerly.domain.exceptions import ValidationError
from ledgerly.domain.models import CatchUpPlan, Debt, DebtStatus, DebtUpdate, Frequency, UpdateStatus
from ledgerly.utils.date_utils import add_period


def round_half_up_div(numerator: int, denominator: int) -> int:
    """Integer division of non-negative values rounded half-up"""
    return (2 * numerator + denominator) // (2 * denominator)


def calculate_installment(
    principal_cents: int,
    term: Optional[int],
    frequency: Frequency,
) -> Optional[int]:
    """
    Derive the per-period installment from principal and term.

    Requirements:
    - `term` is already expressed in payment periods of `frequency`
    - Half-up rounding to the cent
    - No term (or a non-positive one) means no derived value; the caller
      has to supply the installment explicitly

    Example:
        $1200.00 over 12 monthly payments -> $100.00
        $100.00 over 3 payments -> $33.33 (33.333 rounds down)
        $0.05 over 2 payments -> $0.03 (2.5 cents rounds up)
    """
    if principal_cents is None or principal_cents <= 0:
        raise ValidationError("Principal must be greater than zero", field="principal_cents")

    try:
        Frequency(frequency)
    except ValueError:
        raise ValidationError(f"Unsupported frequency: {frequency}", field="frequency")

    if term is None or term <= 0:
        return None

    return round_half_up_div(principal_cents, term)


def first_due_date(start_date: date, frequency: Frequency) -> date:
    """First installment falls one period after the debt starts"""
    return add_period(start_date, frequency, anchor_day=start_date.day)


def plan_catch_up(debt: Debt, as_of: date) -> CatchUpPlan:
    """
    Replay every period due on or before `as_of` against a debt snapshot.

    Each elapsed period yields one pending update for the installment, the
    last one clipped to what is left so the balance never goes negative.
    `next_due_date` moves one period per update and the debt settles when the
    balance reaches zero. Nothing is mutated; the caller persists the plan.

    Raises:
        ValidationError: debt is due but has no positive installment
    """
    plan = CatchUpPlan(
        updates=[],
        balance_cents=debt.current_balance_cents,
        next_due_date=debt.next_due_date,
        installments_posted=debt.installments_posted,
        status=debt.status,
    )

    if debt.is_settled or debt.next_due_date is None or debt.frequency is None:
        return plan
    if debt.next_due_date > as_of:
        return plan

    if not debt.installment_cents or debt.installment_cents <= 0:
        raise ValidationError(
            f"Debt {debt.id} has no positive installment amount",
            field="installment_cents",
        )

    anchor_day = debt.start_date.day if debt.start_date else debt.next_due_date.day
    updates: List[DebtUpdate] = []

    while plan.next_due_date <= as_of and plan.balance_cents > 0:
        amount = min(debt.installment_cents, plan.balance_cents)
        plan.balance_cents -= amount
        plan.installments_posted += 1

        updates.append(
            DebtUpdate(
                update_date=plan.next_due_date,
                amount_cents=amount,
                status=UpdateStatus.PENDING,
                installment_no=plan.installments_posted,
                debt_id=debt.id,
            )
        )
        plan.next_due_date = add_period(plan.next_due_date, debt.frequency, anchor_day)

    if plan.balance_cents == 0:
        plan.status = DebtStatus.SETTLED

    plan.updates = updates
    return plan
