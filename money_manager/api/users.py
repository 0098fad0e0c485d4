from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import delete
from sqlmodel import Session, func, select

from money_manager.core.errors import Forbidden, InvalidOperation, NotFound
from money_manager.core.logging_setup import get_logger
from money_manager.core.security import get_current_user, get_password_hash, get_token_claims, verify_password
from money_manager.database import atomic, get_session
from money_manager.models.account import Account
from money_manager.models.category import Category
from money_manager.models.investment import Investment
from money_manager.models.notification import Notification
from money_manager.models.transaction import Transaction
from money_manager.models.transfer import Transfer
from money_manager.models.user import User
from money_manager.schemas.account import AccountRead
from money_manager.schemas.backup import DataImport
from money_manager.schemas.category import CategoryRead
from money_manager.schemas.investment import InvestmentRead
from money_manager.schemas.transaction import TransactionRead
from money_manager.schemas.transfer import TransferRead
from money_manager.schemas.user import PasswordChange, ProfileUpdate, UserRead, UserStats
from money_manager.services.backup import clear_user_data, import_user_data
from money_manager.services.notifier import CATEGORIES_UPDATED, LEDGER_EVENTS, Notifier, notify
from money_manager.services.realtime import get_notifier
from money_manager.utils.time_helpers import utcnow

router = APIRouter(prefix="/users", tags=["users"])

logger = get_logger(__name__)

EXPORT_FORMAT = "money-manager-export"
EXPORT_VERSION = 2


def _get_user(session: Session, user_id: UUID) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def _count(session: Session, model, user_id: UUID) -> int:
    return session.exec(select(func.count()).select_from(model).where(model.user_id == user_id)).one()


def _rows(session: Session, model, user_id: UUID):
    return session.exec(select(model).where(model.user_id == user_id).order_by(model.id)).all()


@router.get("/profile", response_model=UserRead)
def get_profile(user_id: UUID = Depends(get_current_user), session: Session = Depends(get_session)):
    return _get_user(session, user_id)


@router.put("/profile", response_model=UserRead)
def update_profile(
    data: ProfileUpdate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise InvalidOperation("No valid fields to update")

    with atomic(session):
        user = _get_user(session, user_id)
        if "email" in changes:
            email = changes["email"].lower()
            taken = session.exec(select(User).where(User.email == email, User.id != user_id)).first()
            if taken:
                raise InvalidOperation("Email already registered")
            user.email = email
        if "name" in changes:
            user.name = changes["name"].strip()
        session.add(user)

    session.refresh(user)
    return user


@router.get("/stats", response_model=UserStats)
def user_stats(user_id: UUID = Depends(get_current_user), session: Session = Depends(get_session)):
    user = _get_user(session, user_id)
    return UserStats(
        accounts=_count(session, Account, user_id),
        transactions=_count(session, Transaction, user_id),
        categories=_count(session, Category, user_id),
        investments=_count(session, Investment, user_id),
        member_since=user.created_at,
    )


@router.put("/password")
def change_password(
    data: PasswordChange,
    claims: dict = Depends(get_token_claims),
    session: Session = Depends(get_session),
):
    if claims.get("shared_access"):
        raise Forbidden("Password change is blocked in shared access mode")

    with atomic(session):
        user = _get_user(session, claims["sub"])
        if not verify_password(data.current_password, user.hashed_password):
            raise InvalidOperation("Current password is incorrect")
        user.hashed_password = get_password_hash(data.new_password)
        session.add(user)

    logger.info("password_changed", user_id=str(user.id))
    return {"success": True}


@router.get("/export")
def export_data(user_id: UUID = Depends(get_current_user), session: Session = Depends(get_session)):
    user = _get_user(session, user_id)
    data = {
        "accounts": [AccountRead.model_validate(r) for r in _rows(session, Account, user_id)],
        "categories": [CategoryRead.model_validate(r) for r in _rows(session, Category, user_id)],
        "transactions": [TransactionRead.model_validate(r) for r in _rows(session, Transaction, user_id)],
        "transfers": [TransferRead.model_validate(r) for r in _rows(session, Transfer, user_id)],
        "investments": [InvestmentRead.model_validate(r) for r in _rows(session, Investment, user_id)],
    }
    return {
        "meta": {
            "format": EXPORT_FORMAT,
            "version": EXPORT_VERSION,
            "exported_at": utcnow(),
            "user": {"id": user.id, "name": user.name, "email": user.email},
        },
        "summary": {name: len(rows) for name, rows in data.items()},
        "data": data,
    }


@router.post("/import")
def import_data(
    payload: DataImport,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    """Reemplaza los datos del usuario con el contenido de un archivo exportado."""
    result = import_user_data(session, user_id, payload.sections())
    notify(notifier, user_id, [*LEDGER_EVENTS, CATEGORIES_UPDATED])
    return result

@router.post("/clear-data")
def clear_data(
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    """Borra todos los datos del usuario en una sola transacción; la cuenta de usuario se conserva."""
    deleted = clear_user_data(session, user_id)
    notify(notifier, user_id, [*LEDGER_EVENTS, CATEGORIES_UPDATED])
    return {"success": True, "deleted": deleted}


@router.get("/notifications", response_model=List[Notification])
def list_notifications(
    limit: int = Query(30, ge=1, le=100),
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return session.exec(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
    ).all()


@router.post("/notifications/clear")
def clear_notifications(user_id: UUID = Depends(get_current_user), session: Session = Depends(get_session)):
    with atomic(session):
        result = session.execute(delete(Notification).where(Notification.user_id == user_id))
    return {"success": True, "deleted": result.rowcount or 0}
