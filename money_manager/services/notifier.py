"""Output port for "something changed" events.

The ledger services call ``notify`` after a successful commit. Delivery is
best effort: a failing notifier is logged and never fails the mutation.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional
from uuid import UUID

from money_manager.core.logging_setup import get_logger

logger = get_logger(__name__)

ACCOUNTS_UPDATED = "accounts:updated"
TRANSACTIONS_UPDATED = "transactions:updated"
DASHBOARD_UPDATED = "dashboard:updated"
CATEGORIES_UPDATED = "categories:updated"
ACCESS_REQUEST = "access:request"
ACCESS_CODE = "access:code"

LEDGER_EVENTS = (ACCOUNTS_UPDATED, TRANSACTIONS_UPDATED, DASHBOARD_UPDATED)


class Notifier(ABC):
    @abstractmethod
    def publish(self, user_id: UUID, event: str, payload: Optional[dict] = None) -> None:
        """Deliver ``event`` to every client of ``user_id``; must not block."""


def notify(
    notifier: Optional[Notifier],
    user_id: UUID,
    events: Iterable[str],
    payload: Optional[dict] = None,
) -> None:
    if notifier is None:
        return
    for event in events:
        try:
            notifier.publish(user_id, event, payload)
        except Exception:
            logger.warning("notifier_publish_failed", event_name=event, user_id=str(user_id), exc_info=True)
