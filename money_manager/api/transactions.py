from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, select

from money_manager.core.errors import InvalidOperation
from money_manager.core.security import get_current_user, get_optional_user
from money_manager.database import get_session
from money_manager.models.enums import TransactionKind
from money_manager.models.transaction import Transaction
from money_manager.schemas.transaction import (
    LedgerEntryCreate,
    MonthlySummary,
    TransactionRead,
    TransactionResult,
    TransactionUpdate,
)
from money_manager.services.ledger import apply_ledger_entry, delete_transaction, update_transaction
from money_manager.services.notifications import create_in_app_notification
from money_manager.services.notifier import Notifier
from money_manager.services.realtime import get_notifier
from money_manager.services.summary import monthly_totals
from money_manager.utils.account_helpers import get_owned_account
from money_manager.utils.time_helpers import month_window

router = APIRouter(prefix="/transactions", tags=["transactions"])

RECENT_LIMIT = 10

_ENTRY_TITLES = {
    TransactionKind.expense: ("Expense added", "receipt"),
    TransactionKind.income: ("Income added", "money-bill-wave"),
    TransactionKind.bill: ("Bill paid", "file-invoice-dollar"),
}


def _post(kind: TransactionKind, data: LedgerEntryCreate, user_id: UUID, session: Session, notifier: Notifier):
    tx = apply_ledger_entry(
        session,
        user_id,
        data.account_id,
        kind,
        data.amount,
        category_id=data.category_id,
        note=data.note,
        occurred_at=data.date,
        notifier=notifier,
    )
    title, icon = _ENTRY_TITLES[kind]
    create_in_app_notification(
        session,
        user_id,
        title=title,
        message=f"{tx.amount} {tx.note or ''}".strip(),
        type="success",
        icon=icon,
        meta={"transaction_id": tx.id, "account_id": tx.account_id},
    )
    return TransactionResult(transaction=tx)


@router.post("/expense", response_model=TransactionResult)
def add_expense(
    data: LedgerEntryCreate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    return _post(TransactionKind.expense, data, user_id, session, notifier)


@router.post("/income", response_model=TransactionResult)
def add_income(
    data: LedgerEntryCreate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    return _post(TransactionKind.income, data, user_id, session, notifier)


@router.post("/pay-bill", response_model=TransactionResult)
def pay_bill(
    data: LedgerEntryCreate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    return _post(TransactionKind.bill, data, user_id, session, notifier)


@router.get("", response_model=List[TransactionRead])
@router.get("/", response_model=List[TransactionRead])
def list_transactions(
    kind: Optional[TransactionKind] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    query = select(Transaction).where(Transaction.user_id == user_id)
    if kind is not None:
        query = query.where(Transaction.kind == kind)
    query = query.order_by(Transaction.created_at.desc(), Transaction.id.desc()).offset(offset).limit(limit)
    return session.exec(query).all()


@router.get("/recent", response_model=List[TransactionRead])
def recent_transactions(
    user_id: Optional[UUID] = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    if user_id is None:
        return []
    return session.exec(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .limit(RECENT_LIMIT)
    ).all()


@router.get("/summary/monthly", response_model=MonthlySummary)
def monthly_summary(
    month: Optional[str] = Query(None, description="YYYY-MM, current month when omitted"),
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    try:
        start, end = month_window(month)
    except ValueError:
        raise InvalidOperation("Invalid month, expected YYYY-MM")
    return MonthlySummary(month=start.strftime("%Y-%m"), **monthly_totals(session, user_id, start, end))


@router.get("/account/{account_id}", response_model=List[TransactionRead])
def account_transactions(
    account_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    get_owned_account(session, user_id, account_id)
    return session.exec(
        select(Transaction)
        .where(Transaction.user_id == user_id, Transaction.account_id == account_id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
    ).all()


@router.put("/{transaction_id}", response_model=TransactionResult)
def edit_transaction(
    transaction_id: int,
    data: TransactionUpdate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    tx = update_transaction(
        session,
        user_id,
        transaction_id,
        data.model_dump(exclude_unset=True),
        notifier=notifier,
    )
    return TransactionResult(transaction=tx)


@router.delete("/{transaction_id}")
def remove_transaction(
    transaction_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    """Revierte el efecto en el saldo y elimina el movimiento."""
    tx = delete_transaction(session, user_id, transaction_id, notifier=notifier)
    create_in_app_notification(
        session,
        user_id,
        title="Transaction deleted",
        message=f"{tx.kind.value} of {abs(tx.amount)} was reverted",
        type="info",
        icon="rotate-left",
        meta={"transaction_id": transaction_id},
    )
    return {"success": True}
