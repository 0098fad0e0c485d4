"""Single-account balance mutations: income, expense, bill and investment.

Every public function here runs in one database transaction: the balance
statement and the audit row (or its removal) commit together or not at all.
Notifications go out only after the commit.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlmodel import Session, select

from money_manager.constants.investments import INVESTMENT_TYPE_IDS
from money_manager.core.errors import InvalidOperation, NotFound
from money_manager.core.logging_setup import get_logger
from money_manager.database import atomic
from money_manager.models.enums import TransactionKind
from money_manager.models.investment import Investment
from money_manager.models.transaction import Transaction, balance_delta
from money_manager.services.notifier import LEDGER_EVENTS, Notifier, notify
from money_manager.services.transfers import reverse_transfer
from money_manager.utils.account_helpers import (
    apply_balance_delta,
    get_owned_account,
    get_owned_category,
)
from money_manager.utils.money import parse_amount
from money_manager.utils.time_helpers import to_utc, utcnow

logger = get_logger(__name__)

EDITABLE_FIELDS = ("note", "amount", "created_at", "category_id", "account_id")
PAIRED_KINDS = (TransactionKind.transfer, TransactionKind.investment)


def _get_owned_transaction(session: Session, owner_id: UUID, transaction_id: int) -> Transaction:
    tx = session.exec(
        select(Transaction).where(Transaction.id == transaction_id, Transaction.user_id == owner_id)
    ).first()
    if not tx:
        raise NotFound("Transaction not found")
    return tx


def _post_entry(
    session: Session,
    owner_id: UUID,
    account_id: int,
    kind: TransactionKind,
    amount: Decimal,
    category_id: Optional[int],
    note: Optional[str],
    created_at: datetime,
    reference_id: Optional[int] = None,
) -> Transaction:
    apply_balance_delta(session, owner_id, account_id, balance_delta(kind, amount))
    tx = Transaction(
        user_id=owner_id,
        account_id=account_id,
        category_id=category_id,
        kind=kind,
        amount=amount,
        note=note,
        reference_id=reference_id,
        created_at=created_at,
    )
    session.add(tx)
    return tx


def apply_ledger_entry(
    session: Session,
    owner_id: UUID,
    account_id: int,
    kind,
    amount,
    category_id: Optional[int] = None,
    note: Optional[str] = None,
    occurred_at: Optional[datetime] = None,
    notifier: Optional[Notifier] = None,
) -> Transaction:
    """Post one income/expense/bill/investment row and move the balance.

    Debits use a conditional update, so ``InsufficientFunds`` is raised when
    the balance no longer covers ``amount`` at write time.
    """
    kind = TransactionKind(kind)
    if kind == TransactionKind.transfer:
        raise InvalidOperation("Transfers must go through the transfer operation")

    amount = parse_amount(amount)
    created_at = to_utc(occurred_at) or utcnow()
    note = (note or "").strip() or None

    with atomic(session):
        get_owned_account(session, owner_id, account_id)
        if category_id is not None:
            get_owned_category(session, owner_id, category_id)
        tx = _post_entry(session, owner_id, account_id, kind, amount, category_id, note, created_at)

    session.refresh(tx)
    logger.info(
        "ledger_entry_applied",
        user_id=str(owner_id),
        transaction_id=tx.id,
        account_id=account_id,
        kind=kind.value,
        amount=str(amount),
    )
    notify(notifier, owner_id, LEDGER_EVENTS, {"account_id": account_id})
    return tx


def record_investment(
    session: Session,
    owner_id: UUID,
    account_id: int,
    investment_type: str,
    amount,
    name: str,
    note: Optional[str] = None,
    occurred_at: Optional[datetime] = None,
    notifier: Optional[Notifier] = None,
) -> Investment:
    name = (name or "").strip()
    if not name:
        raise InvalidOperation("Investment name is required")
    if investment_type not in INVESTMENT_TYPE_IDS:
        raise InvalidOperation("Unknown investment type")

    amount = parse_amount(amount)
    created_at = to_utc(occurred_at) or utcnow()

    with atomic(session):
        get_owned_account(session, owner_id, account_id)
        apply_balance_delta(session, owner_id, account_id, balance_delta(TransactionKind.investment, amount))

        investment = Investment(
            user_id=owner_id,
            account_id=account_id,
            investment_type=investment_type,
            amount=amount,
            note=(note or "").strip() or name,
            created_at=created_at,
        )
        session.add(investment)
        session.flush()

        session.add(
            Transaction(
                user_id=owner_id,
                account_id=account_id,
                kind=TransactionKind.investment,
                amount=amount,
                note=f"Investment: {name}",
                reference_id=investment.id,
                created_at=created_at,
            )
        )

    session.refresh(investment)
    logger.info(
        "investment_recorded",
        user_id=str(owner_id),
        investment_id=investment.id,
        account_id=account_id,
        amount=str(amount),
    )
    notify(notifier, owner_id, LEDGER_EVENTS, {"account_id": account_id})
    return investment


def update_transaction(
    session: Session,
    owner_id: UUID,
    transaction_id: int,
    changes: dict,
    notifier: Optional[Notifier] = None,
) -> Transaction:
    """Partially update a row.

    Amount or account changes on income/expense/bill rows re-balance the
    affected accounts in the same transaction. Transfer and investment rows
    are paired with other records, so only note, date and category may change.
    """
    changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
    if not changes:
        raise InvalidOperation("No valid fields to update")

    with atomic(session):
        tx = _get_owned_transaction(session, owner_id, transaction_id)

        if "note" in changes:
            tx.note = (changes["note"] or "").strip() or None

        if "created_at" in changes:
            if changes["created_at"] is None:
                raise InvalidOperation("Invalid date/time")
            tx.created_at = to_utc(changes["created_at"])

        if "category_id" in changes:
            if changes["category_id"] is None:
                raise InvalidOperation("Category is required")
            tx.category_id = get_owned_category(session, owner_id, changes["category_id"]).id

        new_amount = tx.amount
        new_account_id = tx.account_id
        if "amount" in changes:
            new_amount = parse_amount(changes["amount"])
        if "account_id" in changes:
            if changes["account_id"] is None:
                raise InvalidOperation("Account is required")
            new_account_id = get_owned_account(session, owner_id, changes["account_id"]).id

        if new_amount != tx.amount or new_account_id != tx.account_id:
            if tx.kind in PAIRED_KINDS:
                raise InvalidOperation("Only note, date and category can change on transfer or investment rows")

            old_delta = balance_delta(tx.kind, tx.amount)
            new_delta = balance_delta(tx.kind, new_amount)
            if new_account_id == tx.account_id:
                apply_balance_delta(session, owner_id, tx.account_id, new_delta - old_delta)
            else:
                apply_balance_delta(session, owner_id, tx.account_id, -old_delta)
                apply_balance_delta(session, owner_id, new_account_id, new_delta)
            tx.amount = new_amount
            tx.account_id = new_account_id

        session.add(tx)

    session.refresh(tx)
    logger.info("transaction_updated", user_id=str(owner_id), transaction_id=tx.id, fields=sorted(changes))
    notify(notifier, owner_id, LEDGER_EVENTS, {"transaction_id": tx.id})
    return tx


def delete_transaction(
    session: Session,
    owner_id: UUID,
    transaction_id: int,
    notifier: Optional[Notifier] = None,
) -> Transaction:
    """Reverse a row's balance effect and delete it.

    A transfer leg takes the whole transfer with it; an investment row takes
    its ``Investment`` record. Returns a transient copy of the deleted row.
    """
    with atomic(session):
        tx = _get_owned_transaction(session, owner_id, transaction_id)
        kind = tx.kind
        deleted = Transaction(**tx.model_dump())

        if kind == TransactionKind.transfer and tx.reference_id is not None:
            reverse_transfer(session, owner_id, tx.reference_id)
        else:
            apply_balance_delta(session, owner_id, tx.account_id, -balance_delta(tx.kind, tx.amount))
            if tx.kind == TransactionKind.investment and tx.reference_id is not None:
                investment = session.exec(
                    select(Investment).where(
                        Investment.id == tx.reference_id,
                        Investment.user_id == owner_id,
                    )
                ).first()
                if investment:
                    session.delete(investment)
            session.delete(tx)

    logger.info("transaction_deleted", user_id=str(owner_id), transaction_id=transaction_id, kind=kind.value)
    notify(notifier, owner_id, LEDGER_EVENTS, {"transaction_id": transaction_id})
    return deleted
