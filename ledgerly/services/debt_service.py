"""Debt ledger operations: lifecycle, catch-up, repayments and balances"""

import logging
import uuid
from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledgerly.config import settings
from ledgerly.domain.balances import aggregate_counterparty_balances, aggregate_group_balances, debts_for_counterparty
from ledgerly.domain.debts import prepare_debt
from ledgerly.domain.exceptions import ConflictError, DomainException, NotFoundError, ValidationError
from ledgerly.domain.installments import plan_catch_up
from ledgerly.domain.models import (
    CatchUpPlan,
    CounterpartyBalance,
    Debt,
    DebtRole,
    DebtStatus,
    DebtUpdate,
    GroupBalance,
    ItemResult,
    UpdateStatus,
)
from ledgerly.domain.repayments import allocate_batch, plan_payoff, plan_repayment, transaction_type_for
from ledgerly.infrastructure.clients.accounts import AccountClient
from ledgerly.infrastructure.clients.transactions import TransactionClient
from ledgerly.infrastructure.database.models import DebtRecord
from ledgerly.infrastructure.database.repositories import (
    DebtRepository,
    DebtUpdateRepository,
    debt_to_domain,
    update_to_domain,
)
from ledgerly.infrastructure.observability.metrics import (
    batch_item_counter,
    catch_up_conflict_counter,
    catch_up_outcome_counter,
    catch_up_updates_counter,
    debts_created_counter,
    debts_settled_counter,
    payment_conflict_counter,
    record_repayment,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "account_id", "notes", "settlement_group_id")


class DebtService:
    """
    Application service over one database session.

    Balances only move through compare-and-swap updates, so two requests
    racing on the same debt cannot both apply: the loser gets a
    ConflictError (catch-up retries once against fresh state first).
    """

    def __init__(self, db: Session, account_client: AccountClient, transaction_client: TransactionClient):
        self.db = db
        self.debts = DebtRepository(db)
        self.updates = DebtUpdateRepository(db)
        self.accounts = account_client
        self.transactions = transaction_client

    # Lifecycle

    async def create_debt(self, user_id: str, **fields) -> Debt:
        """Validate role-specific input, verify the account, persist"""
        debt = prepare_debt(user_id=user_id, **fields)
        if debt.account_id:
            await self.accounts.get_account(user_id, debt.account_id)

        try:
            db_debt = self.debts.create_debt(debt)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        debts_created_counter.labels(role=debt.role.value).inc()
        return debt_to_domain(db_debt)

    def list_debts(
        self,
        user_id: str,
        role: Optional[str] = None,
        status: Optional[str] = None,
        counterparty_name: Optional[str] = None,
    ) -> List[Debt]:
        records = self.debts.list_debts(user_id, role=role, status=status, counterparty_name=counterparty_name)
        return [debt_to_domain(r) for r in records]

    def get_debt(self, user_id: str, debt_id: uuid.UUID) -> Debt:
        return debt_to_domain(self._get_record(user_id, debt_id))

    async def update_debt(self, user_id: str, debt_id: uuid.UUID, **changes) -> Debt:
        """Edit descriptive fields; balances and schedule are not editable"""
        db_debt = self._get_record(user_id, debt_id)
        changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}

        if "name" in changes:
            if not changes["name"] or not changes["name"].strip():
                raise ValidationError("Name is required", field="name")
            changes["name"] = changes["name"].strip()

        if "account_id" in changes:
            if changes["account_id"]:
                await self.accounts.get_account(user_id, changes["account_id"])
            elif db_debt.role == DebtRole.INSTITUTIONAL.value:
                raise ValidationError("Institutional debts must be tied to an account", field="account_id")

        try:
            self.debts.update_details(db_debt, **changes)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return debt_to_domain(db_debt)

    def delete_debt(self, user_id: str, debt_id: uuid.UUID) -> None:
        db_debt = self._get_record(user_id, debt_id)
        try:
            self.debts.delete_debt(db_debt)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def list_updates(self, user_id: str, debt_id: uuid.UUID) -> List[DebtUpdate]:
        self._get_record(user_id, debt_id)
        return [update_to_domain(r) for r in self.updates.list_updates(debt_id)]

    # Catch-up

    def catch_up_all(self, user_id: str, as_of: Optional[date] = None) -> List[ItemResult]:
        """
        Generate the pending updates every due debt has accumulated.

        Each debt is committed on its own; a debt that cannot be processed
        is reported in its result and the rest carry on.
        """
        as_of = as_of or date.today()
        return [self._catch_up_record(db_debt, as_of) for db_debt in self.debts.list_due(user_id, as_of)]

    def catch_up_debt(self, user_id: str, debt_id: uuid.UUID, as_of: Optional[date] = None) -> ItemResult:
        db_debt = self._get_record(user_id, debt_id)
        return self._catch_up_record(db_debt, as_of or date.today())

    def _catch_up_record(self, db_debt: DebtRecord, as_of: date) -> ItemResult:
        debt_id = db_debt.id
        try:
            plan = self._apply_catch_up(db_debt, as_of)
        except ValidationError as e:
            logger.warning("Skipping debt during catch-up", extra={"debt_id": str(debt_id), "reason": str(e)})
            result = ItemResult(debt_id=debt_id, outcome="skipped", error=str(e))
        except ConflictError as e:
            logger.warning("Catch-up conflict", extra={"debt_id": str(debt_id), "reason": str(e)})
            result = ItemResult(debt_id=debt_id, outcome="conflict", error=str(e))
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Catch-up failed", extra={"debt_id": str(debt_id), "reason": str(e)})
            result = ItemResult(debt_id=debt_id, outcome="failed", error=str(e))
        else:
            outcome = "applied" if plan.updates else "up_to_date"
            result = ItemResult(
                debt_id=debt_id,
                outcome=outcome,
                amount_cents=sum(u.amount_cents for u in plan.updates),
                updates_created=len(plan.updates),
            )

        catch_up_outcome_counter.labels(outcome=result.outcome).inc()
        return result

    def _apply_catch_up(self, db_debt: DebtRecord, as_of: date) -> CatchUpPlan:
        for _ in range(settings.catch_up_max_attempts):
            debt = debt_to_domain(db_debt)
            plan = plan_catch_up(debt, as_of)
            if not plan.updates:
                return plan

            applied = self.debts.compare_and_set_schedule(
                debt.id,
                expected_balance_cents=debt.current_balance_cents,
                expected_next_due_date=debt.next_due_date,
                balance_cents=plan.balance_cents,
                next_due_date=plan.next_due_date,
                installments_posted=plan.installments_posted,
                status=plan.status,
            )
            if applied:
                self.updates.add_updates(debt.id, plan.updates)
                self.db.commit()
                catch_up_updates_counter.inc(len(plan.updates))
                if plan.status == DebtStatus.SETTLED:
                    debts_settled_counter.labels(reason="catch_up").inc()
                return plan

            # Lost the race: reload and replan once against fresh state
            catch_up_conflict_counter.inc()
            self.db.rollback()
            self.db.refresh(db_debt)

        raise ConflictError(f"Debt {db_debt.id} changed concurrently during catch-up")

    # Repayments

    async def pay_early(self, user_id: str, debt_id: uuid.UUID, on: Optional[date] = None) -> DebtUpdate:
        """
        Pay off the whole balance and settle the debt.

        A payoff that loses the balance race is replanned once against the
        fresh balance; if the other writer settled the debt the retry raises
        AlreadySettledError.
        """
        on = on or date.today()
        for attempt in range(1, settings.payoff_max_attempts + 1):
            debt = self.get_debt(user_id, debt_id)
            update = plan_payoff(debt, on)
            try:
                return await self._record_payment(
                    user_id, debt, update, debt.account_id, f"{debt.name} Payoff", kind="payoff"
                )
            except ConflictError:
                if attempt == settings.payoff_max_attempts:
                    raise
                logger.info("Payoff conflict, retrying", extra={"debt_id": str(debt_id), "attempt": attempt})

    async def add_repayment(
        self,
        user_id: str,
        debt_id: uuid.UUID,
        amount_cents: int,
        on: date,
        adjustment_cents: int = 0,
        account_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> DebtUpdate:
        """Record a partial repayment; only the cash part becomes a transaction"""
        debt = self.get_debt(user_id, debt_id)
        update = plan_repayment(debt, amount_cents, on, adjustment_cents=adjustment_cents, notes=notes)
        if account_id:
            await self.accounts.get_account(user_id, account_id)
        return await self._record_payment(
            user_id, debt, update, account_id or debt.account_id, f"{debt.name} Repayment", kind="repayment"
        )

    async def batch_repay(
        self,
        user_id: str,
        debt_ids: Sequence[uuid.UUID],
        amount_cents: int,
        on: date,
        account_id: Optional[str] = None,
    ) -> List[ItemResult]:
        """
        Spread one payment over several debts in the order given.

        Unknown ids and overpayment reject the whole request up front. After
        allocation each debt is applied and committed separately; per-debt
        failures are logged and reported so the caller can retry the rest.
        """
        if not debt_ids:
            raise ValidationError("At least one debt is required", field="debt_ids")

        by_id = {r.id: r for r in self.debts.get_debts(user_id, debt_ids)}
        missing = [str(i) for i in debt_ids if i not in by_id]
        if missing:
            raise NotFoundError(f"Debts not found: {', '.join(missing)}")

        debts = [debt_to_domain(by_id[i]) for i in debt_ids]
        allocations = allocate_batch(debts, amount_cents)

        if account_id:
            await self.accounts.get_account(user_id, account_id)

        results = []
        for debt, allocation in zip(debts, allocations):
            if allocation.amount_cents == 0:
                results.append(ItemResult(debt_id=debt.id, outcome="skipped"))
                batch_item_counter.labels(outcome="skipped").inc()
                continue

            update = DebtUpdate(
                update_date=on,
                amount_cents=allocation.amount_cents,
                status=UpdateStatus.PAID,
                debt_id=debt.id,
                notes="Batch repayment",
            )
            try:
                await self._record_payment(
                    user_id, debt, update, account_id or debt.account_id, f"{debt.name} Repayment", kind="batch"
                )
            except (DomainException, SQLAlchemyError) as e:
                logger.error("Batch repayment item failed", extra={"debt_id": str(debt.id), "reason": str(e)})
                results.append(ItemResult(debt_id=debt.id, outcome="failed", error=str(e)))
                batch_item_counter.labels(outcome="failed").inc()
                continue

            results.append(
                ItemResult(debt_id=debt.id, outcome="applied", amount_cents=allocation.amount_cents, updates_created=1)
            )
            batch_item_counter.labels(outcome="applied").inc()

        return results

    async def settle_up(
        self,
        user_id: str,
        counterparty_name: str,
        on: date,
        account_id: Optional[str] = None,
        amount_cents: Optional[int] = None,
    ) -> List[ItemResult]:
        """Batch-repay every open debt with one counterparty (full balance by default)"""
        debts = debts_for_counterparty(self.list_debts(user_id), counterparty_name)
        if not debts:
            raise NotFoundError(f"No open debts with {counterparty_name}")

        if amount_cents is None:
            amount_cents = sum(d.current_balance_cents for d in debts)
        return await self.batch_repay(user_id, [d.id for d in debts], amount_cents, on, account_id)

    async def _record_payment(
        self,
        user_id: str,
        debt: Debt,
        update: DebtUpdate,
        account_id: Optional[str],
        description: str,
        kind: str,
    ) -> DebtUpdate:
        """
        Lower the balance, emit the transaction, persist the paid update.

        The conditional balance update runs first and the session commits only
        after the transaction service accepted the money movement, so a failed
        call leaves the debt untouched.
        """
        new_balance = debt.current_balance_cents - update.amount_cents - update.adjustment_cents
        status = DebtStatus.SETTLED if new_balance == 0 else DebtStatus.ACTIVE

        try:
            if not self.debts.compare_and_set_balance(debt.id, debt.current_balance_cents, new_balance, status):
                payment_conflict_counter.labels(kind=kind).inc()
                raise ConflictError(f"Debt {debt.id} balance changed concurrently")

            txn = await self.transactions.create_transaction(
                user_id=user_id,
                amount_cents=update.amount_cents,
                type=transaction_type_for(debt),
                description=description,
                on=update.update_date,
                account_id=account_id,
            )
            update.transaction_id = txn.transaction_id
            update.debt_id = debt.id
            db_update = self.updates.add_updates(debt.id, [update])[0]
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        record_repayment(kind, update.amount_cents, status == DebtStatus.SETTLED)
        return update_to_domain(db_update)

    # Balances

    def counterparty_balances(self, user_id: str) -> List[CounterpartyBalance]:
        return aggregate_counterparty_balances(self.list_debts(user_id))

    def group_balances(self, user_id: str) -> List[GroupBalance]:
        return aggregate_group_balances(self.list_debts(user_id))

    def list_settlement_groups(self, user_id: str) -> List[str]:
        return self.debts.list_settlement_group_ids(user_id)

    def list_group_debts(self, user_id: str, group_id: str) -> List[Debt]:
        return [debt_to_domain(r) for r in self.debts.list_by_settlement_group(user_id, group_id)]

    def _get_record(self, user_id: str, debt_id: uuid.UUID) -> DebtRecord:
        db_debt = self.debts.get_debt(user_id, debt_id)
        if db_debt is None:
            raise NotFoundError(f"Debt {debt_id} not found")
        return db_debt
