from decimal import Decimal

import pytest
from sqlmodel import select

from conftest import balance_of, make_account, make_user
from money_manager.core.errors import InsufficientFunds, InvalidOperation, NotFound
from money_manager.models.enums import TransactionKind
from money_manager.models.transaction import Transaction
from money_manager.models.transfer import Transfer
from money_manager.services.ledger import delete_transaction, update_transaction
from money_manager.services.notifier import LEDGER_EVENTS
from money_manager.services.transfers import transfer


def _legs(session, transfer_id):
    return session.exec(
        select(Transaction)
        .where(Transaction.kind == TransactionKind.transfer, Transaction.reference_id == transfer_id)
        .order_by(Transaction.amount)
    ).all()


def test_two_sided_transfer(session, engine, user, notifier):
    a = make_account(session, user.id, "60.00", name="A")
    b = make_account(session, user.id, "10.00", name="B")

    record = transfer(session, user.id, a.id, b.id, "30.00", notifier=notifier)

    assert balance_of(engine, a.id) == Decimal("30.00")
    assert balance_of(engine, b.id) == Decimal("40.00")
    assert len(session.exec(select(Transfer)).all()) == 1
    out_leg, in_leg = _legs(session, record.id)
    assert (out_leg.account_id, out_leg.amount, out_leg.note) == (a.id, Decimal("-30.00"), "Transfer out")
    assert (in_leg.account_id, in_leg.amount, in_leg.note) == (b.id, Decimal("30.00"), "Transfer in")
    assert notifier.names(user.id) == list(LEDGER_EVENTS)


def test_balance_is_conserved(session, engine, user):
    a = make_account(session, user.id, "123.45", name="A")
    b = make_account(session, user.id, "0.55", name="B")
    before = balance_of(engine, a.id) + balance_of(engine, b.id)

    for amount in ("10.10", "0.05", "99.99"):
        transfer(session, user.id, a.id, b.id, amount)
    transfer(session, user.id, b.id, a.id, "50.00")

    assert balance_of(engine, a.id) + balance_of(engine, b.id) == before


def test_transfer_without_destination_has_one_leg(session, engine, user):
    a = make_account(session, user.id, "100.00")

    record = transfer(session, user.id, a.id, None, "25.00", note="Rent to landlord")

    assert record.to_account_id is None
    assert balance_of(engine, a.id) == Decimal("75.00")
    legs = _legs(session, record.id)
    assert len(legs) == 1
    assert legs[0].note == "Rent to landlord"


def test_self_transfer_is_invalid(session, user):
    a = make_account(session, user.id, "100.00")

    with pytest.raises(InvalidOperation):
        transfer(session, user.id, a.id, a.id, "1.00")


def test_insufficient_source_leaves_everything_untouched(session, engine, user, notifier):
    a = make_account(session, user.id, "20.00", name="A")
    b = make_account(session, user.id, "0.00", name="B")

    with pytest.raises(InsufficientFunds):
        transfer(session, user.id, a.id, b.id, "20.01", notifier=notifier)

    assert balance_of(engine, a.id) == Decimal("20.00")
    assert balance_of(engine, b.id) == Decimal("0.00")
    assert session.exec(select(Transfer)).all() == []
    assert session.exec(select(Transaction)).all() == []
    assert notifier.events == []


def test_destination_of_another_owner_is_not_found(session, engine, user):
    other = make_user(session, "other@finmail.io")
    a = make_account(session, user.id, "50.00")
    foreign = make_account(session, other.id, "0.00")

    with pytest.raises(NotFound) as exc:
        transfer(session, user.id, a.id, foreign.id, "10.00")

    assert exc.value.message == "Destination account not found"
    assert balance_of(engine, a.id) == Decimal("50.00")
    assert balance_of(engine, foreign.id) == Decimal("0.00")


def test_missing_source_is_not_found(session, user):
    b = make_account(session, user.id, "0.00")

    with pytest.raises(NotFound) as exc:
        transfer(session, user.id, 9999, b.id, "10.00")

    assert exc.value.message == "Source account not found"


def test_deleting_one_leg_reverses_the_whole_transfer(session, engine, user):
    a = make_account(session, user.id, "60.00", name="A")
    b = make_account(session, user.id, "10.00", name="B")
    record = transfer(session, user.id, a.id, b.id, "30.00")
    in_leg = _legs(session, record.id)[1]

    delete_transaction(session, user.id, in_leg.id)

    assert balance_of(engine, a.id) == Decimal("60.00")
    assert balance_of(engine, b.id) == Decimal("10.00")
    assert session.exec(select(Transfer)).all() == []
    assert session.exec(select(Transaction)).all() == []


def test_transfer_legs_reject_amount_edits(session, user):
    a = make_account(session, user.id, "60.00", name="A")
    b = make_account(session, user.id, "10.00", name="B")
    record = transfer(session, user.id, a.id, b.id, "30.00")
    out_leg = _legs(session, record.id)[0]

    with pytest.raises(InvalidOperation):
        update_transaction(session, user.id, out_leg.id, {"amount": "5.00"})
