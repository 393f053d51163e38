"""Ledger use cases.

Each public method is one unit of work: it validates, then sequences the
transaction recorder and the balance mutator inside a single
``store.run_atomic()`` block, so a failure anywhere leaves the ledger as it
was. Callers get a result dataclass on success and a ``LedgerError``
subclass otherwise.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Iterator, Optional

from ..constants import (
    AccountKind,
    ChangeType,
    Direction,
    EntityKind,
    IncomeSource,
    PaymentMethod,
    SpendingCategory,
)
from ..constants.categories import SYSTEM_INCOME_SOURCES, SYSTEM_SPENDING_CATEGORIES
from ..domain.store import LedgerStore
from ..errors import (
    InsufficientFunds,
    InvalidAmount,
    InvalidInput,
    InvalidRange,
    LedgerError,
    NotFound,
    ProtectedEntity,
    StorageFailure,
    Unauthenticated,
)
from ..logging_config import get_logger
from ..models import Account, Debt, DebtPayment, Transaction, TransactionSubrecord, User
from ..money import (
    EPSILON,
    ZERO,
    MoneyInput,
    as_utc,
    is_negligible,
    positive_amount,
    quantize,
    to_money,
    utcnow,
)
from .balance import BalanceChange, BalanceMutator
from .recorder import TransactionRecorder

logger = get_logger("ledger")

CASH_BANK_NAME = "Cash"
CASH_ACCOUNT_NAME = "Cash on Hand"
LOAN_TERM = timedelta(days=90)


@dataclass(frozen=True, slots=True)
class ProvisionResult:
    user: User
    cash_account: Account


@dataclass(frozen=True, slots=True)
class DepositResult:
    transaction_id: int
    account_id: int
    account_balance: Decimal
    debt_id: Optional[int] = None
    debt_balance: Optional[Decimal] = None


@dataclass(frozen=True, slots=True)
class WithdrawalResult:
    transaction_id: int
    account_id: int
    account_balance: Decimal
    debt_id: Optional[int] = None
    debt_balance: Optional[Decimal] = None
    payment_id: Optional[int] = None


@dataclass(frozen=True, slots=True)
class AccountResult:
    """Account after a create or reconcile; ``transaction_id`` is the adjustment, if any."""

    account: Account
    transaction_id: Optional[int] = None
    change: Optional[BalanceChange] = None


@dataclass(frozen=True, slots=True)
class DebtResult:
    debt: Debt
    change: Optional[BalanceChange] = None


@dataclass(frozen=True, slots=True)
class DeletionResult:
    """``transaction_id`` is the closure/forgiveness transaction, if one was needed."""

    entity_id: int
    transaction_id: Optional[int] = None
    purged_transactions: int = 0


def _required_text(value: Optional[str], field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidInput(f"{field} is required")
    return text


def _account_kind(value: AccountKind | str) -> AccountKind:
    try:
        return AccountKind(value)
    except ValueError as exc:
        raise InvalidInput(f"Unknown account kind {value!r}") from exc


def _as_deadline(value: Optional[date | datetime]) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return as_utc(value)
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def _check_debt_range(total: Decimal, current: Decimal) -> None:
    if total <= ZERO:
        raise InvalidAmount("Total amount must be greater than zero")
    if current < ZERO:
        raise InvalidRange("Current balance cannot be negative")
    if current - total >= EPSILON:
        raise InvalidRange("Current balance cannot exceed total amount")


class LedgerOperations:
    """The public use cases of the ledger engine."""

    def __init__(
        self,
        store: LedgerStore,
        *,
        recorder: Optional[TransactionRecorder] = None,
        mutator: Optional[BalanceMutator] = None,
    ):
        self.store = store
        self.recorder = recorder or TransactionRecorder()
        self.mutator = mutator or BalanceMutator()

    # -- plumbing --------------------------------------------------------

    @contextmanager
    def _unit_of_work(self, use_case: str, **context: Any) -> Iterator[LedgerStore]:
        try:
            with self.store.run_atomic() as unit:
                yield unit
        except StorageFailure:
            logger.exception("%s not committed", use_case, extra=context)
            raise
        except LedgerError as exc:
            logger.info("%s rejected: %s", use_case, exc.code, extra={**context, "reason": str(exc)})
            raise

    def _require_user(self, unit: LedgerStore, user_id: Optional[int]) -> User:
        if user_id is None:
            raise Unauthenticated()
        try:
            return unit.get(User, user_id)
        except NotFound:
            raise Unauthenticated(f"Unknown user {user_id!r}") from None

    def _owned(self, unit: LedgerStore, model: type, entity_id: Optional[int], user_id: int) -> Any:
        """Fetch an entity the user owns; other users' rows look missing."""

        table = model.__tablename__
        if entity_id is None:
            raise NotFound(table, entity_id)
        entity = unit.get(model, entity_id)
        if entity.user_id != user_id:
            raise NotFound(table, entity_id)
        return entity

    @staticmethod
    def _payment_method(account: Account) -> PaymentMethod:
        return PaymentMethod.CASH if account.is_cash else PaymentMethod.BANK

    @staticmethod
    def _income_source(value: IncomeSource | str) -> IncomeSource:
        try:
            source = IncomeSource(value)
        except ValueError as exc:
            raise InvalidInput(f"Unknown income source {value!r}") from exc
        if source in SYSTEM_INCOME_SOURCES:
            raise InvalidInput(f"{source.value} is reserved for system transactions")
        return source

    @staticmethod
    def _spending_category(value: SpendingCategory | str) -> SpendingCategory:
        try:
            category = SpendingCategory(value)
        except ValueError as exc:
            raise InvalidInput(f"Unknown spending category {value!r}") from exc
        if category in SYSTEM_SPENDING_CATEGORIES:
            raise InvalidInput(f"{category.value} is reserved for system transactions")
        return category

    # -- users -----------------------------------------------------------

    def provision_user(
        self, email: str, display_name: str = "", user_type: str = "standard"
    ) -> ProvisionResult:
        """Create a user together with the cash account every user owns."""

        email = _required_text(email, "email").lower()
        with self._unit_of_work("provision_user", email=email) as unit:
            if unit.query(User, User.email == email, limit=1):
                raise InvalidInput(f"{email} is already provisioned")
            user = unit.create(
                User(email=email, display_name=(display_name or "").strip(), user_type=user_type)
            )
            cash = unit.create(
                Account(
                    user_id=user.id,
                    bank_name=CASH_BANK_NAME,
                    account_name=CASH_ACCOUNT_NAME,
                    kind=AccountKind.OTHER.value,
                    balance=ZERO,
                    is_cash=True,
                )
            )
        logger.info("User provisioned", extra={"user_id": user.id, "cash_account_id": cash.id})
        return ProvisionResult(user=user, cash_account=cash)

    # -- money movements -------------------------------------------------

    def deposit(
        self,
        user_id: Optional[int],
        account_id: Optional[int],
        amount: MoneyInput,
        *,
        description: str,
        source_type: IncomeSource | str = IncomeSource.OTHER,
        debt_id: Optional[int] = None,
    ) -> DepositResult:
        """Record money in and credit the account.

        ``loan`` opens a new debt for the amount; ``existing_loan`` grows
        the given debt's total and balance by the amount.
        """

        context = {"user_id": user_id, "account_id": account_id}
        with self._unit_of_work("deposit", **context) as unit:
            self._require_user(unit, user_id)
            amount = positive_amount(amount)
            description = _required_text(description, "Description")
            source = self._income_source(source_type)
            account = self._owned(unit, Account, account_id, user_id)

            debt: Optional[Debt] = None
            if source is IncomeSource.LOAN:
                debt = unit.create(
                    Debt(
                        user_id=user_id,
                        name=f"Loan: {description}",
                        description=description,
                        total_amount=amount,
                        current_balance=ZERO,
                        deadline=utcnow() + LOAN_TERM,
                    )
                )
            elif source is IncomeSource.EXISTING_LOAN:
                debt = self._owned(unit, Debt, debt_id, user_id)
                unit.update(
                    Debt,
                    debt.id,
                    total_amount=quantize(debt.total_amount + amount),
                    updated_at=utcnow(),
                )

            recorded = self.recorder.record(
                unit,
                user_id=user_id,
                direction=Direction.IN,
                amount=amount,
                description=description,
                account_id=account.id,
                category=source,
                payment_method=self._payment_method(account),
                debt_id=debt.id if debt else None,
            )
            account_change = self.mutator.apply_delta(
                unit,
                EntityKind.ACCOUNT,
                account.id,
                amount,
                change_type=ChangeType.IN,
                transaction_id=recorded.id,
            )
            debt_balance = None
            if debt is not None:
                opening = source is IncomeSource.LOAN
                debt_change = self.mutator.apply_delta(
                    unit,
                    EntityKind.DEBT,
                    debt.id,
                    amount,
                    change_type=ChangeType.DEBT_OPENED if opening else ChangeType.DEBT_BORROWED,
                    transaction_id=recorded.id,
                )
                if opening:
                    unit.update(Debt, debt.id, originating_transaction_id=recorded.id)
                debt_balance = debt_change.new_balance

        logger.info(
            "Deposit recorded",
            extra={**context, "transaction_id": recorded.id, "amount": str(amount), "source": source.value},
        )
        return DepositResult(
            transaction_id=recorded.id,
            account_id=account.id,
            account_balance=account_change.new_balance,
            debt_id=debt.id if debt else None,
            debt_balance=debt_balance,
        )

    def withdraw(
        self,
        user_id: Optional[int],
        account_id: Optional[int],
        amount: MoneyInput,
        *,
        description: str,
        category: SpendingCategory | str = SpendingCategory.OTHER,
        debt_id: Optional[int] = None,
    ) -> WithdrawalResult:
        """Record money out and debit the account.

        A ``debt_payment`` with a ``debt_id`` also pays the debt down
        (never below zero) and writes the payment link. ``debt_id`` is
        ignored for other categories.
        """

        context = {"user_id": user_id, "account_id": account_id}
        with self._unit_of_work("withdraw", **context) as unit:
            self._require_user(unit, user_id)
            amount = positive_amount(amount)
            description = _required_text(description, "Description")
            spending = self._spending_category(category)
            account = self._owned(unit, Account, account_id, user_id)

            debt: Optional[Debt] = None
            if spending is SpendingCategory.DEBT_PAYMENT and debt_id is not None:
                debt = self._owned(unit, Debt, debt_id, user_id)

            available = quantize(account.balance)
            if amount - available >= EPSILON:
                raise InsufficientFunds(available, amount)

            recorded = self.recorder.record(
                unit,
                user_id=user_id,
                direction=Direction.OUT,
                amount=amount,
                description=description,
                account_id=account.id,
                category=spending,
                payment_method=self._payment_method(account),
                debt_id=debt.id if debt else None,
            )
            account_change = self.mutator.apply_delta(
                unit,
                EntityKind.ACCOUNT,
                account.id,
                -amount,
                change_type=ChangeType.OUT,
                transaction_id=recorded.id,
            )
            debt_balance = None
            payment_id = None
            if debt is not None:
                debt_change = self.mutator.apply_delta(
                    unit,
                    EntityKind.DEBT,
                    debt.id,
                    -amount,
                    change_type=ChangeType.DEBT_PAYMENT,
                    transaction_id=recorded.id,
                )
                payment = unit.create(
                    DebtPayment(
                        user_id=user_id,
                        debt_id=debt.id,
                        transaction_id=recorded.id,
                        amount=amount,
                    )
                )
                debt_balance = debt_change.new_balance
                payment_id = payment.id

        logger.info(
            "Withdrawal recorded",
            extra={**context, "transaction_id": recorded.id, "amount": str(amount), "category": spending.value},
        )
        return WithdrawalResult(
            transaction_id=recorded.id,
            account_id=account.id,
            account_balance=account_change.new_balance,
            debt_id=debt.id if debt else None,
            debt_balance=debt_balance,
            payment_id=payment_id,
        )

    # -- accounts --------------------------------------------------------

    def _reconcile(
        self, unit: LedgerStore, account: Account, target: Decimal, *, opening: bool
    ) -> tuple[Optional[int], Optional[BalanceChange]]:
        """Bring ``account`` to ``target`` with one synthesized transaction."""

        delta = target - quantize(account.balance)
        if is_negligible(delta):
            return None, None

        direction = Direction.IN if delta > ZERO else Direction.OUT
        if opening:
            category: IncomeSource | SpendingCategory = IncomeSource.INITIAL_DEPOSIT
            method = PaymentMethod.BANK_TRANSFER
            change_type = ChangeType.INITIAL_DEPOSIT
            description = f"Initial deposit for {account.account_name}"
        else:
            category = (
                IncomeSource.BALANCE_ADJUSTMENT
                if direction is Direction.IN
                else SpendingCategory.BALANCE_ADJUSTMENT
            )
            method = PaymentMethod.BALANCE_ADJUSTMENT
            change_type = ChangeType.BALANCE_ADJUSTMENT
            description = f"Balance adjustment for {account.account_name}"

        recorded = self.recorder.record(
            unit,
            user_id=account.user_id,
            direction=direction,
            amount=abs(delta),
            description=description,
            account_id=account.id,
            category=category,
            payment_method=method,
        )
        change = self.mutator.apply_delta(
            unit,
            EntityKind.ACCOUNT,
            account.id,
            delta,
            change_type=change_type,
            transaction_id=recorded.id,
        )
        return recorded.id, change

    def create_account(
        self,
        user_id: Optional[int],
        *,
        bank_name: str,
        account_name: str,
        kind: AccountKind | str = AccountKind.SAVINGS,
        opening_balance: MoneyInput = ZERO,
    ) -> AccountResult:
        """Add an account; a non-zero opening balance is recorded as an initial deposit."""

        with self._unit_of_work("create_account", user_id=user_id) as unit:
            self._require_user(unit, user_id)
            bank_name = _required_text(bank_name, "bank_name")
            account_name = _required_text(account_name, "account_name")
            account_kind = _account_kind(kind)
            opening = to_money(opening_balance)
            if opening < ZERO:
                raise InvalidRange("Balance cannot be negative")

            account = unit.create(
                Account(
                    user_id=user_id,
                    bank_name=bank_name,
                    account_name=account_name,
                    kind=account_kind.value,
                    balance=ZERO,
                    is_cash=False,
                )
            )
            transaction_id, change = self._reconcile(unit, account, opening, opening=True)

        logger.info(
            "Account created",
            extra={"user_id": user_id, "account_id": account.id, "opening_balance": str(opening)},
        )
        return AccountResult(account=account, transaction_id=transaction_id, change=change)

    def reconcile_account(
        self,
        user_id: Optional[int],
        account_id: Optional[int],
        new_balance: Optional[MoneyInput],
        *,
        bank_name: Optional[str] = None,
        account_name: Optional[str] = None,
        kind: Optional[AccountKind | str] = None,
    ) -> AccountResult:
        """Edit an account, synthesizing an adjustment when the balance moves.

        ``new_balance=None`` leaves the balance alone and only edits fields.
        """

        context = {"user_id": user_id, "account_id": account_id}
        with self._unit_of_work("reconcile_account", **context) as unit:
            self._require_user(unit, user_id)
            account = self._owned(unit, Account, account_id, user_id)

            fields: dict[str, Any] = {}
            if bank_name is not None:
                fields["bank_name"] = _required_text(bank_name, "bank_name")
            if account_name is not None:
                fields["account_name"] = _required_text(account_name, "account_name")
            if kind is not None:
                fields["kind"] = _account_kind(kind).value

            transaction_id, change = None, None
            if new_balance is not None:
                target = to_money(new_balance)
                if target < ZERO:
                    raise InvalidRange("Balance cannot be negative")
                transaction_id, change = self._reconcile(unit, account, target, opening=False)
            if fields:
                unit.update(Account, account.id, updated_at=utcnow(), **fields)

        logger.info(
            "Account updated",
            extra={**context, "transaction_id": transaction_id, "fields": sorted(fields)},
        )
        return AccountResult(account=account, transaction_id=transaction_id, change=change)

    def delete_account(
        self,
        user_id: Optional[int],
        account_id: Optional[int],
        *,
        purge_history: bool = False,
    ) -> DeletionResult:
        """Remove an account, recording any remaining balance as leaving the ledger."""

        context = {"user_id": user_id, "account_id": account_id}
        with self._unit_of_work("delete_account", **context) as unit:
            self._require_user(unit, user_id)
            account = self._owned(unit, Account, account_id, user_id)
            if account.is_cash:
                raise ProtectedEntity("The cash account cannot be deleted")

            transaction_id = None
            remaining = quantize(account.balance)
            if remaining >= EPSILON:
                # The account row goes away with its balance; no mutator call.
                recorded = self.recorder.record(
                    unit,
                    user_id=user_id,
                    direction=Direction.OUT,
                    amount=remaining,
                    description=f"Account closure for {account.label}",
                    account_id=account.id,
                    category=SpendingCategory.ACCOUNT_CLOSURE,
                    payment_method=PaymentMethod.ACCOUNT_CLOSURE,
                )
                transaction_id = recorded.id
            unit.delete(Account, account.id)

        logger.info(
            "Account deleted",
            extra={**context, "transaction_id": transaction_id, "closing_balance": str(remaining)},
        )
        purged = 0
        if purge_history:
            purged = self._purge_history(
                "delete_account", user_id, Transaction.account_id == account_id
            )
        return DeletionResult(entity_id=account.id, transaction_id=transaction_id, purged_transactions=purged)

    # -- debts -----------------------------------------------------------

    def create_debt(
        self,
        user_id: Optional[int],
        *,
        name: str,
        total_amount: MoneyInput,
        current_balance: Optional[MoneyInput] = None,
        description: str = "",
        interest_rate: MoneyInput = ZERO,
        deadline: Optional[date | datetime] = None,
    ) -> DebtResult:
        """Track a debt. ``current_balance`` defaults to the full total."""

        with self._unit_of_work("create_debt", user_id=user_id) as unit:
            self._require_user(unit, user_id)
            name = _required_text(name, "name")
            total = to_money(total_amount)
            current = total if current_balance is None else to_money(current_balance)
            _check_debt_range(total, current)
            rate = to_money(interest_rate)
            if rate < ZERO:
                raise InvalidRange("Interest rate cannot be negative")

            debt = unit.create(
                Debt(
                    user_id=user_id,
                    name=name,
                    description=(description or "").strip(),
                    total_amount=total,
                    current_balance=ZERO,
                    interest_rate=rate,
                    deadline=_as_deadline(deadline),
                )
            )
            change = self.mutator.apply_delta(
                unit, EntityKind.DEBT, debt.id, current, change_type=ChangeType.DEBT_OPENED
            )

        logger.info(
            "Debt created",
            extra={"user_id": user_id, "debt_id": debt.id, "total_amount": str(total)},
        )
        return DebtResult(debt=debt, change=change)

    def edit_debt(
        self,
        user_id: Optional[int],
        debt_id: Optional[int],
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        total_amount: Optional[MoneyInput] = None,
        current_balance: Optional[MoneyInput] = None,
        interest_rate: Optional[MoneyInput] = None,
        deadline: Optional[date | datetime] = None,
    ) -> DebtResult:
        """Edit a debt; arguments left as None keep their stored value."""

        context = {"user_id": user_id, "debt_id": debt_id}
        with self._unit_of_work("edit_debt", **context) as unit:
            self._require_user(unit, user_id)
            debt = self._owned(unit, Debt, debt_id, user_id)

            previous = quantize(debt.current_balance)
            total = quantize(debt.total_amount) if total_amount is None else to_money(total_amount)
            current = previous if current_balance is None else to_money(current_balance)
            _check_debt_range(total, current)

            fields: dict[str, Any] = {"total_amount": total}
            if name is not None:
                fields["name"] = _required_text(name, "name")
            if description is not None:
                fields["description"] = description.strip()
            if interest_rate is not None:
                rate = to_money(interest_rate)
                if rate < ZERO:
                    raise InvalidRange("Interest rate cannot be negative")
                fields["interest_rate"] = rate
            if deadline is not None:
                fields["deadline"] = _as_deadline(deadline)
            unit.update(Debt, debt.id, updated_at=utcnow(), **fields)

            change = self.mutator.apply_delta(
                unit,
                EntityKind.DEBT,
                debt.id,
                current - previous,
                change_type=ChangeType.BALANCE_ADJUSTMENT,
            )

        logger.info("Debt updated", extra={**context, "balance_changed": change.applied})
        return DebtResult(debt=debt, change=change)

    def delete_debt(
        self,
        user_id: Optional[int],
        debt_id: Optional[int],
        *,
        purge_history: bool = False,
    ) -> DeletionResult:
        """Remove a debt; an outstanding balance is recorded as forgiven income."""

        context = {"user_id": user_id, "debt_id": debt_id}
        with self._unit_of_work("delete_debt", **context) as unit:
            self._require_user(unit, user_id)
            debt = self._owned(unit, Debt, debt_id, user_id)

            transaction_id = None
            remaining = quantize(debt.current_balance)
            if remaining >= EPSILON:
                recorded = self.recorder.record(
                    unit,
                    user_id=user_id,
                    direction=Direction.IN,
                    amount=remaining,
                    description=f"Debt forgiveness for {debt.name}",
                    account_id=None,
                    category=IncomeSource.DEBT_FORGIVENESS,
                    payment_method=PaymentMethod.DEBT_FORGIVENESS,
                    debt_id=debt.id,
                )
                transaction_id = recorded.id
            unit.delete(Debt, debt.id)

        logger.info(
            "Debt deleted",
            extra={**context, "transaction_id": transaction_id, "forgiven": str(remaining)},
        )
        purged = 0
        if purge_history:
            purged = self._purge_history(
                "delete_debt", user_id, Transaction.debt_id == debt_id, debt_id=debt_id
            )
        return DeletionResult(entity_id=debt.id, transaction_id=transaction_id, purged_transactions=purged)

    # -- cascade ---------------------------------------------------------

    def _purge_history(
        self, use_case: str, user_id: int, criterion: Any, *, debt_id: Optional[int] = None
    ) -> int:
        """Best-effort removal of history tied to a deleted entity.

        Runs as its own unit after the deletion committed. Audit entries
        are kept. Returns the number of transactions removed.
        """

        try:
            with self.store.run_atomic() as unit:
                transactions = unit.query(Transaction, Transaction.user_id == user_id, criterion)
                ids = [txn.id for txn in transactions]
                if ids:
                    for sub in unit.query(
                        TransactionSubrecord,
                        TransactionSubrecord.transaction_id.in_(ids),  # type: ignore[attr-defined]
                    ):
                        unit.delete(TransactionSubrecord, sub.id)
                    for payment in unit.query(
                        DebtPayment, DebtPayment.transaction_id.in_(ids)  # type: ignore[attr-defined]
                    ):
                        unit.delete(DebtPayment, payment.id)
                    for txn_id in ids:
                        unit.delete(Transaction, txn_id)
                if debt_id is not None:
                    for payment in unit.query(
                        DebtPayment, DebtPayment.user_id == user_id, DebtPayment.debt_id == debt_id
                    ):
                        unit.delete(DebtPayment, payment.id)
        except Exception:
            logger.warning(
                "History purge after %s failed; deletion kept",
                use_case,
                exc_info=True,
                extra={"user_id": user_id},
            )
            return 0
        logger.info("History purged", extra={"user_id": user_id, "transactions": len(ids)})
        return len(ids)
