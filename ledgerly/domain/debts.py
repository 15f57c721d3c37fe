"""Debt construction with role-specific validation"""

from datetime import date
from typing import Optional

from ledgerly.domain.exceptions import ValidationError
from ledgerly.domain.installments import calculate_installment, first_due_date
from ledgerly.domain.models import Debt, DebtRole, DebtStatus, Frequency


def prepare_debt(
    user_id: str,
    name: str,
    role: DebtRole,
    principal_cents: int,
    current_balance_cents: Optional[int] = None,
    installment_cents: Optional[int] = None,
    frequency: Optional[Frequency] = None,
    term: Optional[int] = None,
    start_date: Optional[date] = None,
    account_id: Optional[str] = None,
    counterparty_name: Optional[str] = None,
    settlement_group_id: Optional[str] = None,
    notes: Optional[str] = None,
) -> Debt:
    """
    Build a new debt, enforcing the fields each role requires.

    - institutional: account, frequency, start date, and a term or installment
    - lent / borrowed: counterparty; a schedule is optional, but once a
      frequency is given it needs a start date and a term or installment

    The installment is derived from the term when not supplied and the first
    due date is one period after the start date.
    """
    if not name or not name.strip():
        raise ValidationError("Name is required", field="name")
    if principal_cents is None or principal_cents <= 0:
        raise ValidationError("Principal must be greater than zero", field="principal_cents")

    try:
        role = DebtRole(role)
    except ValueError:
        raise ValidationError(f"Unsupported role: {role}", field="role")

    if role == DebtRole.INSTITUTIONAL:
        if not account_id:
            raise ValidationError("Institutional debts must be tied to an account", field="account_id")
        if frequency is None:
            raise ValidationError("Institutional debts need a payment frequency", field="frequency")
    elif not counterparty_name or not counterparty_name.strip():
        raise ValidationError(f"A {role.value} debt needs a counterparty", field="counterparty_name")

    if current_balance_cents is None:
        current_balance_cents = principal_cents
    if current_balance_cents < 0:
        raise ValidationError("Current balance cannot be negative", field="current_balance_cents")
    if current_balance_cents > principal_cents:
        raise ValidationError("Current balance cannot exceed the principal", field="current_balance_cents")

    next_due_date = None
    if frequency is not None:
        try:
            frequency = Frequency(frequency)
        except ValueError:
            raise ValidationError(f"Unsupported frequency: {frequency}", field="frequency")
        if start_date is None:
            raise ValidationError("A scheduled debt needs a start date", field="start_date")

        if installment_cents is None:
            installment_cents = calculate_installment(principal_cents, term, frequency)
        if installment_cents is None:
            raise ValidationError(
                "Provide either a term or an installment amount",
                field="installment_cents",
            )
        if installment_cents <= 0:
            raise ValidationError("Installment must be greater than zero", field="installment_cents")

        next_due_date = first_due_date(start_date, frequency)
    elif installment_cents is not None or term is not None:
        raise ValidationError("Installments require a payment frequency", field="frequency")

    return Debt(
        user_id=user_id,
        name=name.strip(),
        role=role,
        principal_cents=principal_cents,
        current_balance_cents=current_balance_cents,
        installment_cents=installment_cents,
        frequency=frequency,
        term=term,
        start_date=start_date,
        next_due_date=next_due_date,
        account_id=account_id,
        counterparty_name=counterparty_name.strip() if counterparty_name else None,
        settlement_group_id=settlement_group_id,
        notes=notes,
        status=DebtStatus.SETTLED if current_balance_cents == 0 else DebtStatus.ACTIVE,
    )
