"""Person-to-person balance aggregation (who owes whom)"""

from typing import Dict, Iterable, List

from ledgerly.domain.models import CounterpartyBalance, Debt, DebtRole, GroupBalance

PERSONAL_ROLES = (DebtRole.LENT, DebtRole.BORROWED)


def _open_personal_debts(debts: Iterable[Debt]) -> List[Debt]:
    return [d for d in debts if d.role in PERSONAL_ROLES and not d.is_settled]


def aggregate_counterparty_balances(debts: Iterable[Debt]) -> List[CounterpartyBalance]:
    """
    Net open lent/borrowed debts per counterparty.

    - you_owe: balances of debts you borrowed from them
    - they_owe: balances of debts you lent to them
    - net = they_owe - you_owe (positive means they owe you)

    Sorted by absolute net balance, largest first.
    """
    balances: Dict[str, CounterpartyBalance] = {}

    for debt in _open_personal_debts(debts):
        if not debt.counterparty_name:
            continue

        balance = balances.setdefault(debt.counterparty_name, CounterpartyBalance(name=debt.counterparty_name))
        balance.debt_ids.append(debt.id)

        if debt.role == DebtRole.BORROWED:
            balance.you_owe_cents += debt.current_balance_cents
        else:
            balance.they_owe_cents += debt.current_balance_cents

    return sorted(balances.values(), key=lambda b: abs(b.net_balance_cents), reverse=True)


def aggregate_group_balances(debts: Iterable[Debt]) -> List[GroupBalance]:
    """Net open debts per settlement group; lent counts positive, borrowed negative"""
    groups: Dict[str, GroupBalance] = {}

    for debt in _open_personal_debts(debts):
        if not debt.settlement_group_id:
            continue

        group = groups.setdefault(debt.settlement_group_id, GroupBalance(group_id=debt.settlement_group_id))
        group.debt_ids.append(debt.id)

        sign = 1 if debt.role == DebtRole.LENT else -1
        group.total_cents += sign * debt.current_balance_cents

    return sorted(groups.values(), key=lambda g: abs(g.total_cents), reverse=True)


def debts_for_counterparty(debts: Iterable[Debt], name: str) -> List[Debt]:
    """Open lent/borrowed debts with `name` that still carry a balance"""
    return [
        d for d in _open_personal_debts(debts)
        if d.counterparty_name == name and d.current_balance_cents > 0
    ]
