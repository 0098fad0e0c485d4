from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import delete, or_
from sqlmodel import Session, col, select

from money_manager.core.logging_setup import get_logger
from money_manager.core.security import get_current_user, get_optional_user
from money_manager.database import atomic, get_session
from money_manager.models.account import Account
from money_manager.models.investment import Investment
from money_manager.models.transaction import Transaction
from money_manager.models.transfer import Transfer
from money_manager.schemas.account import AccountCreate, AccountRead, AccountUpdate
from money_manager.services.notifications import create_in_app_notification
from money_manager.services.notifier import ACCOUNTS_UPDATED, DASHBOARD_UPDATED, LEDGER_EVENTS, Notifier, notify
from money_manager.services.realtime import get_notifier
from money_manager.utils.account_helpers import get_owned_account

router = APIRouter(prefix="/accounts", tags=["accounts"])

logger = get_logger(__name__)


@router.get("", response_model=List[AccountRead])
@router.get("/", response_model=List[AccountRead])
def list_accounts(
    user_id: Optional[UUID] = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    if user_id is None:
        return []
    return session.exec(
        select(Account).where(Account.user_id == user_id).order_by(Account.created_at, Account.id)
    ).all()


@router.post("", response_model=AccountRead, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=AccountRead, status_code=status.HTTP_201_CREATED)
def create_account(
    data: AccountCreate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    # El saldo inicial es el estado de partida, no un movimiento del ledger
    with atomic(session):
        account = Account(
            user_id=user_id,
            name=data.name.strip(),
            kind=data.kind,
            balance=data.balance,
            credit_limit=data.credit_limit,
        )
        session.add(account)

    session.refresh(account)
    logger.info("account_created", user_id=str(user_id), account_id=account.id, kind=account.kind.value)
    notify(notifier, user_id, [ACCOUNTS_UPDATED, DASHBOARD_UPDATED], {"account_id": account.id})
    create_in_app_notification(
        session,
        user_id,
        title="Account created",
        message=f"{account.name} was added",
        type="success",
        icon="wallet",
        meta={"account_id": account.id},
    )
    return account


@router.get("/{account_id}", response_model=AccountRead)
def get_account(
    account_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return get_owned_account(session, user_id, account_id)


@router.put("/{account_id}", response_model=AccountRead)
def update_account(
    account_id: int,
    data: AccountUpdate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    """Rename or change the credit limit; the balance is never edited here."""
    changes = data.model_dump(exclude_unset=True)
    with atomic(session):
        account = get_owned_account(session, user_id, account_id)
        if changes.get("name"):
            account.name = changes["name"].strip()
        if "credit_limit" in changes:
            account.credit_limit = changes["credit_limit"]
        session.add(account)

    session.refresh(account)
    notify(notifier, user_id, [ACCOUNTS_UPDATED, DASHBOARD_UPDATED], {"account_id": account.id})
    return account


@router.delete("/{account_id}")
def delete_account(
    account_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    """Delete the account together with its rows, in one transaction."""
    with atomic(session):
        account = get_owned_account(session, user_id, account_id)
        name = account.name
        transfer_ids = session.exec(
            select(Transfer.id).where(
                Transfer.user_id == user_id,
                or_(Transfer.from_account_id == account_id, Transfer.to_account_id == account_id),
            )
        ).all()

        session.execute(
            delete(Transaction).where(Transaction.user_id == user_id, Transaction.account_id == account_id)
        )
        if transfer_ids:
            # las contrapartes en otras cuentas quedan como historial de su saldo
            session.execute(
                delete(Transfer).where(Transfer.user_id == user_id, col(Transfer.id).in_(transfer_ids))
            )
        session.execute(
            delete(Investment).where(Investment.user_id == user_id, Investment.account_id == account_id)
        )
        session.delete(account)

    logger.info("account_deleted", user_id=str(user_id), account_id=account_id)
    notify(notifier, user_id, LEDGER_EVENTS, {"account_id": account_id})
    create_in_app_notification(
        session,
        user_id,
        title="Account deleted",
        message=f"{name} and its transactions were removed",
        type="warning",
        icon="trash",
        meta={"account_id": account_id},
    )
    return {"success": True}
