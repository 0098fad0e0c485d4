import secrets
from datetime import timedelta
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from money_manager.core.config import APP_BASE_URL, SHARE_LINK_TTL_HOURS
from money_manager.core.errors import NotFound
from money_manager.core.logging_setup import get_logger
from money_manager.core.security import SCOPE_SHARED, create_access_token, get_current_user, get_shared_owner
from money_manager.database import atomic, get_session
from money_manager.models.account import Account
from money_manager.models.share_link import ShareLink
from money_manager.models.transaction import Transaction
from money_manager.schemas.dashboard import AccountTotals
from money_manager.schemas.share import SharedAccess, ShareLinkCreated
from money_manager.services.summary import account_totals
from money_manager.utils.time_helpers import to_utc, utcnow

router = APIRouter(prefix="/share", tags=["share"])
shared_router = APIRouter(prefix="/shared", tags=["shared"])

logger = get_logger(__name__)

SHARED_TRANSACTIONS_LIMIT = 20


@router.post("/generate", response_model=ShareLinkCreated)
def generate_share_link(user_id: UUID = Depends(get_current_user), session: Session = Depends(get_session)):
    share_code = secrets.token_hex(16)
    expires_at = utcnow() + timedelta(hours=SHARE_LINK_TTL_HOURS)

    with atomic(session):
        session.add(ShareLink(user_id=user_id, share_code=share_code, expires_at=expires_at))

    logger.info("share_link_created", user_id=str(user_id), expires_at=expires_at.isoformat())
    return ShareLinkCreated(
        share_code=share_code,
        share_url=f"{APP_BASE_URL.rstrip('/')}/share/{share_code}",
        expires_at=expires_at,
    )


@router.get("/{code}", response_model=SharedAccess)
def open_share_link(code: str, session: Session = Depends(get_session)):
    """Canjea el código por un token de solo lectura válido hasta que vence el enlace."""
    link = session.exec(
        select(ShareLink).where(ShareLink.share_code == code, ShareLink.is_active == True)  # noqa: E712
    ).first()
    if not link:
        raise NotFound("Invalid or expired link")

    remaining = to_utc(link.expires_at) - utcnow()
    if remaining <= timedelta(0):
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="Share link expired")

    token = create_access_token(data={"sub": str(link.user_id), "scope": SCOPE_SHARED}, expires_delta=remaining)
    return SharedAccess(access_token=token, expires_at=link.expires_at)


@shared_router.get("/summary")
def shared_summary(owner_id: UUID = Depends(get_shared_owner), session: Session = Depends(get_session)):
    return {**AccountTotals(**account_totals(session, owner_id)).model_dump(mode="json"), "mode": "shared"}


@shared_router.get("/accounts")
def shared_accounts(owner_id: UUID = Depends(get_shared_owner), session: Session = Depends(get_session)):
    accounts = session.exec(
        select(Account)
        .where(Account.user_id == owner_id, Account.is_active == True)  # noqa: E712
        .order_by(Account.created_at.desc(), Account.id.desc())
    ).all()
    return {
        "accounts": [
            {"id": a.id, "name": a.name, "kind": a.kind, "balance": str(a.balance)} for a in accounts
        ],
        "mode": "shared",
    }


@shared_router.get("/transactions")
def shared_transactions(owner_id: UUID = Depends(get_shared_owner), session: Session = Depends(get_session)):
    rows = session.exec(
        select(Transaction)
        .where(Transaction.user_id == owner_id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .limit(SHARED_TRANSACTIONS_LIMIT)
    ).all()
    return {
        "transactions": [
            {
                "id": t.id,
                "kind": t.kind,
                "amount": str(t.amount),
                "note": t.note,
                "created_at": t.created_at,
                "account_id": t.account_id,
            }
            for t in rows
        ],
        "mode": "shared",
    }
