"""Read-only aggregates for the dashboard, stats and shared views."""

from datetime import datetime
from decimal import Decimal
from typing import Dict, Tuple
from uuid import UUID

from sqlmodel import Session, func, select

from money_manager.models.account import Account
from money_manager.models.enums import LIQUID_ACCOUNT_KINDS, AccountKind, TransactionKind
from money_manager.models.transaction import Transaction
from money_manager.utils.money import CENTS

ZERO = Decimal("0.00")


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENTS)


def account_totals(session: Session, owner_id: UUID) -> Dict[str, object]:
    accounts = session.exec(
        select(Account).where(Account.user_id == owner_id, Account.is_active == True)  # noqa: E712
    ).all()

    net = liquid = credit_used = ZERO
    for account in accounts:
        net += account.balance
        if account.kind in LIQUID_ACCOUNT_KINDS:
            liquid += account.balance
        elif account.kind == AccountKind.credit and account.credit_limit is not None:
            # en tarjetas de crédito el saldo es el cupo disponible
            credit_used += max(ZERO, account.credit_limit - account.balance)

    return {
        "net_balance": _money(net),
        "liquid_balance": _money(liquid),
        "credit_used": _money(credit_used),
        "active_accounts": len(accounts),
    }


def totals_by_kind(
    session: Session, owner_id: UUID, start: datetime, end: datetime
) -> Tuple[Dict[TransactionKind, Decimal], int]:
    """Sum of stored amounts per kind in ``[start, end)`` plus the row count."""
    rows = session.exec(
        select(Transaction.kind, func.sum(Transaction.amount), func.count(Transaction.id))
        .where(
            Transaction.user_id == owner_id,
            Transaction.created_at >= start,
            Transaction.created_at < end,
        )
        .group_by(Transaction.kind)
    ).all()
    totals = {kind: ZERO for kind in TransactionKind}
    count = 0
    for kind, total, rows_for_kind in rows:
        totals[TransactionKind(kind)] = _money(total)
        count += rows_for_kind
    return totals, count


def monthly_totals(session: Session, owner_id: UUID, start: datetime, end: datetime) -> Dict[str, object]:
    totals, count = totals_by_kind(session, owner_id, start, end)
    income = totals[TransactionKind.income]
    expense = totals[TransactionKind.expense]
    bill = totals[TransactionKind.bill]
    investment = totals[TransactionKind.investment]
    return {
        "income": income,
        "expense": expense,
        "bill": bill,
        "investment": investment,
        "net": _money(income - expense - bill - investment),
        "transactions": count,
    }
