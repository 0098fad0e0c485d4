from datetime import datetime, timedelta, timezone

import pytest

from conftest import make_account
from money_manager.models.user import User
from money_manager.services.ledger import apply_ledger_entry
from money_manager.services.summary import monthly_totals
from money_manager.utils.time_helpers import month_window, to_utc, utcnow


def test_utcnow_and_model_defaults_carry_a_timezone():
    assert utcnow().tzinfo is not None
    user = User(name="Ana", email="ana@finmail.io", hashed_password="x")
    assert user.created_at.utcoffset() == timedelta(0)


def test_to_utc_normalises_offsets_and_assumes_utc_for_naive_values():
    local = datetime(2026, 3, 10, 10, 0, tzinfo=timezone(timedelta(hours=2)))

    assert to_utc(local) == datetime(2026, 3, 10, 8, 0, tzinfo=timezone.utc)
    assert to_utc(datetime(2026, 3, 10, 8, 0)) == datetime(2026, 3, 10, 8, 0, tzinfo=timezone.utc)
    assert to_utc(None) is None


def test_month_window_is_utc_and_rolls_over_the_year():
    start, end = month_window("2026-12")

    assert start == datetime(2026, 12, 1, tzinfo=timezone.utc)
    assert end == datetime(2027, 1, 1, tzinfo=timezone.utc)
    with pytest.raises(ValueError):
        month_window("2026-00")


def test_entries_with_offsets_land_in_the_utc_month(session, user):
    account = make_account(session, user.id, "100.00")
    # 31 de marzo 23:30 en UTC-3 ya es abril en UTC
    late_march = datetime(2026, 3, 31, 23, 30, tzinfo=timezone(timedelta(hours=-3)))

    apply_ledger_entry(session, user.id, account.id, "expense", "10.00", occurred_at=late_march)

    march = monthly_totals(session, user.id, *month_window("2026-03"))
    april = monthly_totals(session, user.id, *month_window("2026-04"))
    assert march["transactions"] == 0
    assert april["transactions"] == 1
