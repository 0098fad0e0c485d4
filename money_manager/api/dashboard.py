from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session

from money_manager.core.security import get_optional_user
from money_manager.database import get_session
from money_manager.schemas.dashboard import DashboardSummary
from money_manager.services.summary import account_totals, monthly_totals
from money_manager.utils.time_helpers import month_window

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def build_dashboard_summary(session: Session, user_id: UUID) -> DashboardSummary:
    start, end = month_window()
    month = monthly_totals(session, user_id, start, end)
    return DashboardSummary(
        **account_totals(session, user_id),
        month_income=month["income"],
        month_expense=month["expense"],
        month_bills=month["bill"],
    )


@router.get("/summary", response_model=DashboardSummary)
def dashboard_summary(
    user_id: Optional[UUID] = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    # Sin sesión: resumen en cero en lugar de 401
    if user_id is None:
        return DashboardSummary()
    return build_dashboard_summary(session, user_id)
