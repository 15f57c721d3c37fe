"""Unit tests for role-specific debt construction"""

import pytest
from datetime import date
from ledgerly.domain.debts import prepare_debt
from ledgerly.domain.exceptions import ValidationError
from ledgerly.domain.models import DebtRole, DebtStatus, Frequency


def test_institutional_debt_derives_installment(car_loan_fields):
    debt = prepare_debt(user_id="user_1", **car_loan_fields)

    assert debt.role == DebtRole.INSTITUTIONAL
    assert debt.installment_cents == 10000
    assert debt.current_balance_cents == 120000
    assert debt.next_due_date == date(2025, 2, 15)
    assert debt.status == DebtStatus.ACTIVE


def test_explicit_installment_wins_over_term(car_loan_fields):
    debt = prepare_debt(user_id="user_1", installment_cents=15000, **car_loan_fields)
    assert debt.installment_cents == 15000


@pytest.mark.parametrize(
    "missing,field",
    [("account_id", "account_id"), ("frequency", "frequency"), ("start_date", "start_date")],
)
def test_institutional_required_fields(car_loan_fields, missing, field):
    car_loan_fields[missing] = None
    with pytest.raises(ValidationError) as exc_info:
        prepare_debt(user_id="user_1", **car_loan_fields)
    assert exc_info.value.field == field


def test_institutional_needs_term_or_installment(car_loan_fields):
    car_loan_fields["term"] = None
    with pytest.raises(ValidationError) as exc_info:
        prepare_debt(user_id="user_1", **car_loan_fields)
    assert exc_info.value.field == "installment_cents"


def test_personal_debt_requires_counterparty():
    with pytest.raises(ValidationError) as exc_info:
        prepare_debt(user_id="user_1", name="Dinner", role="lent", principal_cents=4000)
    assert exc_info.value.field == "counterparty_name"


def test_personal_debt_without_schedule():
    debt = prepare_debt(
        user_id="user_1",
        name="Concert tickets",
        role="borrowed",
        principal_cents=8000,
        counterparty_name="  Sam ",
        settlement_group_id="festival",
    )

    assert debt.counterparty_name == "Sam"
    assert debt.frequency is None
    assert debt.next_due_date is None
    assert debt.installment_cents is None


def test_personal_debt_with_schedule():
    debt = prepare_debt(
        user_id="user_1",
        name="Laptop",
        role=DebtRole.LENT,
        principal_cents=60000,
        counterparty_name="Ana",
        frequency=Frequency.WEEKLY,
        term=6,
        start_date=date(2025, 3, 3),
    )

    assert debt.installment_cents == 10000
    assert debt.next_due_date == date(2025, 3, 10)


def test_installment_without_frequency_rejected():
    with pytest.raises(ValidationError) as exc_info:
        prepare_debt(
            user_id="user_1",
            name="Laptop",
            role="lent",
            principal_cents=60000,
            counterparty_name="Ana",
            installment_cents=1000,
        )
    assert exc_info.value.field == "frequency"


def test_balance_bounds(car_loan_fields):
    with pytest.raises(ValidationError) as exc_info:
        prepare_debt(user_id="user_1", current_balance_cents=120001, **car_loan_fields)
    assert exc_info.value.field == "current_balance_cents"

    debt = prepare_debt(user_id="user_1", current_balance_cents=0, **car_loan_fields)
    assert debt.status == DebtStatus.SETTLED


def test_unknown_role_rejected():
    with pytest.raises(ValidationError) as exc_info:
        prepare_debt(user_id="user_1", name="X", role="gift", principal_cents=100, counterparty_name="Sam")
    assert exc_info.value.field == "role"
