from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session

from money_manager.core.security import get_current_user
from money_manager.database import get_session
from money_manager.schemas.transfer import TransferCreate, TransferResult
from money_manager.services.notifications import create_in_app_notification
from money_manager.services.notifier import Notifier
from money_manager.services.realtime import get_notifier
from money_manager.services.transfers import transfer

router = APIRouter(tags=["transfers"])


@router.post("/transfer", response_model=TransferResult)
def create_transfer(
    data: TransferCreate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    """Mueve dinero entre dos cuentas propias, o hacia fuera sin destino."""
    record = transfer(
        session,
        user_id,
        data.from_account_id,
        data.to_account_id,
        data.amount,
        note=data.note,
        occurred_at=data.date,
        notifier=notifier,
    )
    create_in_app_notification(
        session,
        user_id,
        title="Transfer completed",
        message=f"{record.amount} moved",
        type="transfer",
        icon="right-left",
        meta={
            "transfer_id": record.id,
            "from_account_id": record.from_account_id,
            "to_account_id": record.to_account_id,
        },
    )
    return TransferResult(transfer_id=record.id, transfer=record)
