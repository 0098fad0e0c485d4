"""Two-sided money movement between accounts of the same owner.

A transfer is one database transaction: the debit of the source, the credit
of the destination (when there is one), the ``Transfer`` row and its one or
two ``transfer`` transaction legs referencing it.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlmodel import Session, select

from money_manager.core.errors import InvalidOperation
from money_manager.core.logging_setup import get_logger
from money_manager.database import atomic
from money_manager.models.enums import TransactionKind
from money_manager.models.transaction import Transaction
from money_manager.models.transfer import Transfer
from money_manager.services.notifier import LEDGER_EVENTS, Notifier, notify
from money_manager.utils.account_helpers import apply_balance_delta, get_owned_account
from money_manager.utils.money import parse_amount
from money_manager.utils.time_helpers import to_utc, utcnow

logger = get_logger(__name__)


def _apply_in_account_order(session: Session, owner_id: UUID, deltas: dict) -> None:
    # Orden ascendente por id: dos transferencias opuestas no se bloquean entre sí
    for account_id in sorted(deltas):
        apply_balance_delta(session, owner_id, account_id, deltas[account_id])


def transfer(
    session: Session,
    owner_id: UUID,
    from_account_id: int,
    to_account_id: Optional[int],
    amount,
    note: Optional[str] = None,
    occurred_at: Optional[datetime] = None,
    notifier: Optional[Notifier] = None,
) -> Transfer:
    amount = parse_amount(amount)
    if to_account_id is not None and from_account_id == to_account_id:
        raise InvalidOperation("Cannot transfer to same account")

    created_at = to_utc(occurred_at) or utcnow()
    note = (note or "").strip() or None

    with atomic(session):
        source = get_owned_account(session, owner_id, from_account_id, "Source account not found")
        destination = None
        if to_account_id is not None:
            destination = get_owned_account(session, owner_id, to_account_id, "Destination account not found")

        deltas = {source.id: -amount}
        if destination is not None:
            deltas[destination.id] = amount
        _apply_in_account_order(session, owner_id, deltas)

        record = Transfer(
            user_id=owner_id,
            from_account_id=source.id,
            to_account_id=destination.id if destination else None,
            amount=amount,
            created_at=created_at,
        )
        session.add(record)
        session.flush()

        session.add(
            Transaction(
                user_id=owner_id,
                account_id=source.id,
                kind=TransactionKind.transfer,
                amount=-amount,
                note=note or "Transfer out",
                reference_id=record.id,
                created_at=created_at,
            )
        )
        if destination is not None:
            session.add(
                Transaction(
                    user_id=owner_id,
                    account_id=destination.id,
                    kind=TransactionKind.transfer,
                    amount=amount,
                    note=note or "Transfer in",
                    reference_id=record.id,
                    created_at=created_at,
                )
            )

    session.refresh(record)
    logger.info(
        "transfer_applied",
        user_id=str(owner_id),
        transfer_id=record.id,
        from_account_id=record.from_account_id,
        to_account_id=record.to_account_id,
        amount=str(amount),
    )
    notify(notifier, owner_id, LEDGER_EVENTS, {"transfer_id": record.id})
    return record


def reverse_transfer(session: Session, owner_id: UUID, transfer_id: int) -> None:
    """Undo both legs of a transfer and delete it. Caller owns the commit."""
    legs = session.exec(
        select(Transaction).where(
            Transaction.user_id == owner_id,
            Transaction.kind == TransactionKind.transfer,
            Transaction.reference_id == transfer_id,
        )
    ).all()

    deltas: dict = {}
    for leg in legs:
        deltas[leg.account_id] = deltas.get(leg.account_id, Decimal("0")) - leg.amount
    _apply_in_account_order(session, owner_id, deltas)

    for leg in legs:
        session.delete(leg)

    record = session.exec(
        select(Transfer).where(Transfer.id == transfer_id, Transfer.user_id == owner_id)
    ).first()
    if record:
        session.delete(record)
