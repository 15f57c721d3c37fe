"""Unit tests for payoff, repayment and batch allocation"""

import uuid
import pytest
from datetime import date
from ledgerly.domain.exceptions import AlreadySettledError, OverpaymentError, ValidationError
from ledgerly.domain.models import Debt, DebtRole, UpdateStatus
from ledgerly.domain.repayments import allocate_batch, plan_payoff, plan_repayment, transaction_type_for


def make_debt(balance_cents: int, role: DebtRole = DebtRole.BORROWED) -> Debt:
    return Debt(
        id=uuid.uuid4(),
        user_id="user_1",
        name="Loan from Sam",
        role=role,
        principal_cents=max(balance_cents, 100000),
        current_balance_cents=balance_cents,
        counterparty_name="Sam",
    )


def test_plan_payoff_takes_whole_balance():
    debt = make_debt(90000)
    update = plan_payoff(debt, date(2025, 5, 1))

    assert update.status == UpdateStatus.PAID
    assert update.amount_cents == 90000
    assert update.update_date == date(2025, 5, 1)
    assert update.debt_id == debt.id


def test_plan_payoff_settled_debt():
    with pytest.raises(AlreadySettledError):
        plan_payoff(make_debt(0), date(2025, 5, 1))


def test_plan_repayment_with_adjustment():
    """Adjustment lowers the balance but is not cash"""
    update = plan_repayment(make_debt(10000), 6000, date(2025, 5, 1), adjustment_cents=500, notes="Rounded down")

    assert update.amount_cents == 6000
    assert update.adjustment_cents == 500
    assert update.notes == "Rounded down"


def test_plan_repayment_rejects_overpayment():
    with pytest.raises(OverpaymentError):
        plan_repayment(make_debt(10000), 9800, date(2025, 5, 1), adjustment_cents=300)


def test_plan_repayment_rejects_non_positive_amount():
    with pytest.raises(ValidationError) as exc_info:
        plan_repayment(make_debt(10000), 0, date(2025, 5, 1))
    assert exc_info.value.field == "amount_cents"


def test_allocate_batch_in_order():
    """Earlier debts are paid in full before later ones get anything"""
    debts = [make_debt(30000), make_debt(50000), make_debt(20000)]
    allocations = allocate_batch(debts, 60000)

    assert [a.amount_cents for a in allocations] == [30000, 30000, 0]
    assert [a.debt_id for a in allocations] == [d.id for d in debts]


@pytest.mark.parametrize("amount", [1, 29999, 30000, 65432, 100000])
def test_allocate_batch_sums_to_amount(amount):
    debts = [make_debt(30000), make_debt(50000), make_debt(20000)]
    allocations = allocate_batch(debts, amount)

    assert sum(a.amount_cents for a in allocations) == amount
    for debt, allocation in zip(debts, allocations):
        assert 0 <= allocation.amount_cents <= debt.current_balance_cents


def test_allocate_batch_rejects_overpayment():
    with pytest.raises(OverpaymentError):
        allocate_batch([make_debt(30000), make_debt(20000)], 50001)


def test_allocate_batch_validation():
    debt = make_debt(30000)

    with pytest.raises(ValidationError):
        allocate_batch([debt], 0)
    with pytest.raises(ValidationError):
        allocate_batch([], 100)
    with pytest.raises(ValidationError) as exc_info:
        allocate_batch([debt, debt], 100)
    assert exc_info.value.field == "debt_ids"


def test_transaction_type_follows_direction():
    assert transaction_type_for(make_debt(100, DebtRole.LENT)) == "income"
    assert transaction_type_for(make_debt(100, DebtRole.BORROWED)) == "expense"
    assert transaction_type_for(make_debt(100, DebtRole.INSTITUTIONAL)) == "expense"
