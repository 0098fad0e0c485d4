from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import func, update
from sqlmodel import Session, select

from money_manager.core.errors import InsufficientFunds, NotFound
from money_manager.models.account import Account
from money_manager.models.category import Category


def get_owned_account(
    session: Session,
    owner_id: UUID,
    account_id: Optional[int],
    message: str = "Account not found",
) -> Account:
    account = None
    if account_id is not None:
        account = session.exec(
            select(Account).where(Account.id == account_id, Account.user_id == owner_id)
        ).first()
    if not account:
        raise NotFound(message)
    return account


def get_owned_category(session: Session, owner_id: UUID, category_id: int) -> Category:
    category = session.exec(
        select(Category).where(Category.id == category_id, Category.user_id == owner_id)
    ).first()
    if not category:
        raise NotFound("Category not found")
    return category


def debit_account(session: Session, owner_id: UUID, account_id: int, amount: Decimal) -> None:
    """Subtract ``amount`` only if the stored balance still covers it.

    The check and the write are one statement, so two concurrent debits can
    never both pass against the same balance. Both sides are rounded to cents
    in SQL: SQLite keeps Numeric as REAL and would otherwise drift.
    """
    remaining = func.round(Account.balance - amount, 2)
    result = session.execute(
        update(Account)
        .where(
            Account.id == account_id,
            Account.user_id == owner_id,
            remaining >= 0,
        )
        .values(balance=remaining)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InsufficientFunds()


def credit_account(session: Session, owner_id: UUID, account_id: int, amount: Decimal) -> None:
    result = session.execute(
        update(Account)
        .where(Account.id == account_id, Account.user_id == owner_id)
        .values(balance=func.round(Account.balance + amount, 2))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise NotFound("Account not found")


def apply_balance_delta(session: Session, owner_id: UUID, account_id: int, delta: Decimal) -> None:
    if delta < 0:
        debit_account(session, owner_id, account_id, -delta)
    elif delta > 0:
        credit_account(session, owner_id, account_id, delta)
