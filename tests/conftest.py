"""Shared fixtures: a throwaway SQLite file per test and an app wired to it.

Each test gets its own database file so SQLAlchemy connections opened from
different threads (TestClient's worker pool, the concurrency tests) share the
same state. The notifier and the access coordinator are replaced with
in-test instances so assertions can inspect what was published.
"""

import os
import tempfile
import threading
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

# Antes de importar la app: el engine global nunca debe tocar una base real
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.gettempdir(), "money_manager_unused.db")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session  # noqa: E402

from money_manager.database import build_engine, create_db_and_tables, get_session  # noqa: E402
from money_manager.main import app  # noqa: E402
from money_manager.models.account import Account  # noqa: E402
from money_manager.models.enums import AccountKind  # noqa: E402
from money_manager.models.user import User  # noqa: E402
from money_manager.services.access_grants import (  # noqa: E402
    AccessGrantCoordinator,
    InMemoryAccessGrantStore,
    get_access_coordinator,
)
from money_manager.services.notifier import Notifier  # noqa: E402
from money_manager.services.realtime import get_notifier  # noqa: E402


class RecordingNotifier(Notifier):
    def __init__(self):
        self.events = []
        self._lock = threading.Lock()

    def publish(self, user_id, event, payload=None):
        with self._lock:
            self.events.append((user_id, event, payload or {}))

    def names(self, user_id=None):
        return [e for uid, e, _ in self.events if user_id is None or uid == user_id]


class FakeClock:
    def __init__(self, start=datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def engine(tmp_path: Path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    create_db_and_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def coordinator(clock):
    return AccessGrantCoordinator(
        InMemoryAccessGrantStore(clock=clock),
        ttl=timedelta(minutes=15),
        max_attempts=3,
        clock=clock,
        code_factory=lambda: "123456",
    )


@pytest.fixture
def client(engine, notifier, coordinator):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_access_coordinator] = lambda: coordinator
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---- Helpers -----------------------------------------------------------------


def make_user(session: Session, email: str = "owner@finmail.io") -> User:
    user = User(name="Owner", email=email, hashed_password="not-a-real-hash")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_account(session: Session, user_id, balance="0.00", kind=AccountKind.bank, name="Main") -> Account:
    account = Account(user_id=user_id, name=name, kind=kind, balance=Decimal(balance))
    session.add(account)
    session.commit()
    session.refresh(account)
    return account


def balance_of(engine, account_id: int) -> Decimal:
    with Session(engine) as fresh:
        return fresh.get(Account, account_id).balance


def register(client: TestClient, email: str = "owner@finmail.io", password: str = "secret123", name: str = "Owner"):
    """Register and log in; returns ``(user_json, headers)``."""
    resp = client.post("/auth/register", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    token = client.post("/auth/login", data={"username": email, "password": password}).json()["access_token"]
    return resp.json(), {"Authorization": f"Bearer {token}"}


def create_account(client: TestClient, headers, balance="0.00", kind="bank", name="Main") -> dict:
    resp = client.post("/accounts", json={"name": name, "type": kind, "balance": balance}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def user(session):
    return make_user(session)


@pytest.fixture
def owner(client):
    user_json, headers = register(client)
    return {"id": user_json["id"], "headers": headers}
