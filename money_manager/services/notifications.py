from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from money_manager.core.logging_setup import get_logger
from money_manager.models.notification import Notification

logger = get_logger(__name__)


def create_in_app_notification(
    session: Session,
    user_id: UUID,
    *,
    title: str,
    message: str = "",
    type: str = "info",
    icon: Optional[str] = None,
    meta: Optional[dict] = None,
) -> None:
    """Persist a feed entry after a mutation has already committed.

    Failures are logged and rolled back; the mutation itself stays committed.
    """
    try:
        session.add(
            Notification(
                user_id=user_id,
                type=type,
                title=title,
                message=message,
                icon=icon,
                meta=meta or {},
            )
        )
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.warning("in_app_notification_failed", user_id=str(user_id), title=title, exc_info=True)
