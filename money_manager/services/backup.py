"""Export, replace-mode import and wipe of a user's data.

Import is a restore, not a replay: accounts come back with the balance the
file carries as their opening state, the same way account creation treats a
supplied balance. History rows are re-linked to the new ids and never move a
balance. Rows pointing at something the file does not contain are skipped.
"""

from typing import Dict, Optional
from uuid import UUID

from sqlalchemy import delete
from sqlmodel import Session

from money_manager.core.errors import InvalidOperation
from money_manager.core.logging_setup import get_logger
from money_manager.database import atomic
from money_manager.models.account import Account
from money_manager.models.category import Category
from money_manager.models.enums import TransactionKind
from money_manager.models.investment import Investment
from money_manager.models.notification import Notification
from money_manager.models.share_link import ShareLink
from money_manager.models.transaction import Transaction
from money_manager.models.transfer import Transfer
from money_manager.schemas.backup import BackupSections
from money_manager.utils.time_helpers import to_utc, utcnow

logger = get_logger(__name__)

# Orden de borrado: primero lo que referencia a cuentas y categorías
USER_DATA_DELETE_ORDER = (
    ("share_links", ShareLink),
    ("notifications", Notification),
    ("investments", Investment),
    ("transfers", Transfer),
    ("transactions", Transaction),
    ("categories", Category),
    ("accounts", Account),
)


def _delete_user_rows(session: Session, user_id: UUID) -> Dict[str, int]:
    deleted = {}
    for name, model in USER_DATA_DELETE_ORDER:
        result = session.execute(delete(model).where(model.user_id == user_id))
        deleted[name] = result.rowcount or 0
    return deleted


def clear_user_data(session: Session, user_id: UUID) -> Dict[str, int]:
    """Delete every row the user owns in one transaction; the user row stays."""
    with atomic(session):
        deleted = _delete_user_rows(session, user_id)
    logger.warning("user_data_cleared", user_id=str(user_id), **deleted)
    return deleted


def _created_at(value):
    return to_utc(value) or utcnow()


def _mapped(ids: Dict[int, int], old_id: Optional[int], required: bool = True):
    """New id for ``old_id``; ``False`` when the reference cannot be resolved."""
    if old_id is None:
        return False if required else None
    return ids.get(old_id, False)


def import_user_data(session: Session, user_id: UUID, sections: BackupSections) -> dict:
    """Replace the user's data with ``sections`` in a single transaction."""
    if sections.is_empty():
        raise InvalidOperation("Import file has no data sections")

    skipped = {
        "transactions_invalid_refs": 0,
        "transfers_invalid_refs": 0,
        "investments_invalid_refs": 0,
    }
    imported = dict.fromkeys(("accounts", "categories", "transactions", "transfers", "investments"), 0)

    with atomic(session):
        deleted = _delete_user_rows(session, user_id)

        account_ids: Dict[int, int] = {}
        for row in sections.accounts:
            if row.id in account_ids:
                continue
            account = Account(
                user_id=user_id,
                name=row.name.strip(),
                kind=row.kind,
                balance=row.balance,
                credit_limit=row.credit_limit,
                is_active=row.is_active,
                created_at=_created_at(row.created_at),
            )
            session.add(account)
            session.flush()
            account_ids[row.id] = account.id
        imported["accounts"] = len(account_ids)

        category_ids: Dict[int, int] = {}
        for row in sections.categories:
            if row.id in category_ids:
                continue
            category = Category(
                user_id=user_id,
                name=row.name.strip(),
                icon=row.icon,
                kind=row.kind,
                created_at=_created_at(row.created_at),
            )
            session.add(category)
            session.flush()
            category_ids[row.id] = category.id
        imported["categories"] = len(category_ids)

        transfer_ids: Dict[int, int] = {}
        for row in sections.transfers:
            source = _mapped(account_ids, row.from_account_id)
            destination = _mapped(account_ids, row.to_account_id, required=False)
            if source is False or destination is False or row.id in transfer_ids:
                skipped["transfers_invalid_refs"] += 1
                continue
            record = Transfer(
                user_id=user_id,
                from_account_id=source,
                to_account_id=destination,
                amount=row.amount,
                created_at=_created_at(row.created_at),
            )
            session.add(record)
            session.flush()
            transfer_ids[row.id] = record.id
        imported["transfers"] = len(transfer_ids)

        investment_ids: Dict[int, int] = {}
        for row in sections.investments:
            account_id = _mapped(account_ids, row.account_id)
            if account_id is False or row.id in investment_ids:
                skipped["investments_invalid_refs"] += 1
                continue
            investment = Investment(
                user_id=user_id,
                account_id=account_id,
                investment_type=row.investment_type,
                amount=row.amount,
                note=row.note,
                created_at=_created_at(row.created_at),
            )
            session.add(investment)
            session.flush()
            investment_ids[row.id] = investment.id
        imported["investments"] = len(investment_ids)

        references = {
            TransactionKind.transfer: transfer_ids,
            TransactionKind.investment: investment_ids,
        }
        for row in sections.transactions:
            account_id = _mapped(account_ids, row.account_id)
            category_id = _mapped(category_ids, row.category_id, required=False)
            reference_id = None
            if row.kind in references:
                reference_id = _mapped(references[row.kind], row.reference_id)
            # transfer: con signo; el resto: magnitud positiva
            bad_amount = row.amount == 0 or (row.kind != TransactionKind.transfer and row.amount < 0)
            if account_id is False or category_id is False or reference_id is False or bad_amount:
                skipped["transactions_invalid_refs"] += 1
                continue
            session.add(
                Transaction(
                    user_id=user_id,
                    account_id=account_id,
                    category_id=category_id,
                    kind=row.kind,
                    amount=row.amount,
                    note=row.note,
                    reference_id=reference_id,
                    created_at=_created_at(row.created_at),
                )
            )
            imported["transactions"] += 1

    logger.warning("user_data_imported", user_id=str(user_id), **imported, **skipped)
    return {
        "success": True,
        "mode": "replace",
        "deleted_before_import": deleted,
        "imported": imported,
        "skipped": skipped,
    }
