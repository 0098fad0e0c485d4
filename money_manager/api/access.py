from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session

from money_manager.core.config import ACCESS_GRANT_REDIRECT
from money_manager.core.errors import NotFound
from money_manager.core.security import create_access_token, get_current_user
from money_manager.database import get_session
from money_manager.models.user import User
from money_manager.schemas.access import (
    AccessApprove,
    AccessApproveResult,
    AccessRequestCreate,
    AccessRequestCreated,
    AccessStatus,
    AccessVerify,
    AccessVerifyResult,
)
from money_manager.services.access_grants import AccessGrantCoordinator, get_access_coordinator
from money_manager.services.notifications import create_in_app_notification
from money_manager.services.notifier import Notifier
from money_manager.services.realtime import get_notifier
from money_manager.utils.account_helpers import get_owned_account

router = APIRouter(prefix="/access", tags=["access"])


@router.post("/request", response_model=AccessRequestCreated)
def request_access(
    data: AccessRequestCreate,
    session: Session = Depends(get_session),
    coordinator: AccessGrantCoordinator = Depends(get_access_coordinator),
    notifier: Notifier = Depends(get_notifier),
):
    """Lo llama el dispositivo nuevo tras escanear el QR del dueño; no requiere sesión."""
    owner = session.get(User, data.owner_id)
    if not owner:
        raise NotFound("Owner not found")

    account_name = "Profile Access"
    if data.account_id is not None:
        account_name = get_owned_account(session, owner.id, data.account_id).name

    record = coordinator.request(
        owner.id,
        account_id=data.account_id,
        device_info=data.device_info,
        account_name=account_name,
        notifier=notifier,
    )
    create_in_app_notification(
        session,
        owner.id,
        title="Access request",
        message=f"A device is asking to access {account_name}",
        type="warning",
        icon="mobile-screen",
        meta={"request_id": record.request_id, "device_info": record.device_info},
    )
    return AccessRequestCreated(request_id=record.request_id, expires_at=record.expires_at)


@router.post("/approve", response_model=AccessApproveResult)
def approve_access(
    data: AccessApprove,
    user_id: UUID = Depends(get_current_user),
    coordinator: AccessGrantCoordinator = Depends(get_access_coordinator),
    notifier: Notifier = Depends(get_notifier),
):
    if not data.approve:
        coordinator.reject(user_id, data.request_id)
        return AccessApproveResult(approved=False)

    record = coordinator.approve(user_id, data.request_id, notifier=notifier)
    return AccessApproveResult(approved=True, code=record.code, expires_at=record.expires_at)


@router.get("/status/{request_id}", response_model=AccessStatus)
def access_status(
    request_id: str,
    coordinator: AccessGrantCoordinator = Depends(get_access_coordinator),
):
    record = coordinator.status(request_id)
    return AccessStatus(status=record.status, expires_at=record.expires_at)


@router.post("/verify", response_model=AccessVerifyResult)
def verify_access(
    data: AccessVerify,
    coordinator: AccessGrantCoordinator = Depends(get_access_coordinator),
):
    owner_id = coordinator.verify(data.request_id, data.code)
    # Sesión completa del dueño, marcada para bloquear el cambio de contraseña
    token = create_access_token(data={"sub": str(owner_id), "shared_access": True})
    return AccessVerifyResult(redirect=ACCESS_GRANT_REDIRECT, access_token=token)
