from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select

from money_manager.constants.investments import INVESTMENT_TYPES
from money_manager.core.security import get_current_user
from money_manager.database import get_session
from money_manager.models.investment import Investment
from money_manager.schemas.investment import InvestmentCreate, InvestmentRead, InvestmentResult, InvestmentType
from money_manager.services.ledger import record_investment
from money_manager.services.notifications import create_in_app_notification
from money_manager.services.notifier import Notifier
from money_manager.services.realtime import get_notifier

router = APIRouter(prefix="/investments", tags=["investments"])


@router.get("/types", response_model=List[InvestmentType])
def investment_types():
    return list(INVESTMENT_TYPES)


@router.get("", response_model=List[InvestmentRead])
@router.get("/", response_model=List[InvestmentRead])
def list_investments(
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return session.exec(
        select(Investment)
        .where(Investment.user_id == user_id)
        .order_by(Investment.created_at.desc(), Investment.id.desc())
    ).all()


@router.post("", response_model=InvestmentResult, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=InvestmentResult, status_code=status.HTTP_201_CREATED)
def create_investment(
    data: InvestmentCreate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
):
    investment = record_investment(
        session,
        user_id,
        data.account_id,
        data.type_id,
        data.amount,
        data.name,
        note=data.note,
        occurred_at=data.date,
        notifier=notifier,
    )
    create_in_app_notification(
        session,
        user_id,
        title="Investment recorded",
        message=f"{data.name}: {investment.amount}",
        type="success",
        icon="chart-line",
        meta={"investment_id": investment.id, "account_id": investment.account_id},
    )
    return InvestmentResult(investment=investment)
