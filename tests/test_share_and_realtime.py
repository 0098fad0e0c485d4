import asyncio
from datetime import timedelta
from uuid import uuid4

import pytest
from sqlmodel import Session, select
from starlette.websockets import WebSocketDisconnect

from conftest import create_account
from money_manager.main import app
from money_manager.models.share_link import ShareLink
from money_manager.services.notifier import LEDGER_EVENTS
from money_manager.services.realtime import ConnectionHub, get_notifier, hub
from money_manager.utils.time_helpers import utcnow


def _shared_headers(client, owner):
    code = client.post("/share/generate", headers=owner["headers"]).json()["share_code"]
    token = client.get(f"/share/{code}").json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


def test_share_link_gives_read_only_views(client, owner):
    account = create_account(client, owner["headers"], "80.00", kind="cash", name="Wallet")
    client.post("/transactions/expense", json={"account_id": account["id"], "amount": "5.00"}, headers=owner["headers"])

    generated = client.post("/share/generate", headers=owner["headers"]).json()
    assert generated["share_url"].endswith(f"/share/{generated['share_code']}")
    shared = _shared_headers(client, owner)

    summary = client.get("/shared/summary", headers=shared).json()
    accounts = client.get("/shared/accounts", headers=shared).json()
    transactions = client.get("/shared/transactions", headers=shared).json()

    assert summary["mode"] == "shared"
    assert summary["liquid_balance"] == "75.00"
    assert [a["name"] for a in accounts["accounts"]] == ["Wallet"]
    assert transactions["transactions"][0]["amount"] == "5.00"


def test_shared_token_cannot_reach_owner_endpoints(client, owner):
    shared = _shared_headers(client, owner)

    assert client.get("/accounts", headers=shared).json() == []
    assert client.post("/accounts", json={"name": "X", "type": "cash"}, headers=shared).status_code == 401
    assert client.get("/shared/summary", headers=owner["headers"]).status_code == 401


def test_unknown_and_expired_share_codes(client, owner, engine):
    code = client.post("/share/generate", headers=owner["headers"]).json()["share_code"]
    with Session(engine) as session:
        link = session.exec(select(ShareLink).where(ShareLink.share_code == code)).one()
        link.expires_at = utcnow() - timedelta(hours=1)
        session.add(link)
        session.commit()

    assert client.get("/share/does-not-exist").status_code == 404
    expired = client.get(f"/share/{code}")
    assert expired.status_code == 410
    assert expired.json() == {"error": "Share link expired"}


def test_websocket_rejects_missing_token(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()


def test_websocket_receives_owner_events(client, owner):
    app.dependency_overrides[get_notifier] = lambda: hub
    account = create_account(client, owner["headers"], "10.00")
    token = owner["headers"]["Authorization"].split()[1]

    with client.websocket_connect(f"/ws?token={token}") as ws:
        assert ws.receive_json()["event"] == "connected"
        client.post(
            "/transactions/income", json={"account_id": account["id"], "amount": "1.00"}, headers=owner["headers"]
        )
        received = [ws.receive_json() for _ in LEDGER_EVENTS]

    assert {m["event"] for m in received} == set(LEDGER_EVENTS)
    assert all(m["data"]["user_id"] == owner["id"] for m in received)


class _DeadSocket:
    async def accept(self):
        pass

    async def send_json(self, message):
        raise RuntimeError("connection closed")


def test_hub_drops_sockets_that_fail_to_send():
    connections = ConnectionHub()
    user_id = uuid4()
    socket = _DeadSocket()

    async def scenario():
        await connections.connect(user_id, socket)
        connections.publish(user_id, "accounts:updated")
        for _ in range(5):
            await asyncio.sleep(0)

    asyncio.run(scenario())

    assert user_id not in connections._connections
