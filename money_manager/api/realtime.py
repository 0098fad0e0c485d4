from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from money_manager.core.errors import Unauthorized
from money_manager.core.security import SCOPE_FULL, decode_token
from money_manager.services.realtime import hub

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, token: Optional[str] = Query(None)):
    try:
        claims = decode_token(token)
    except Unauthorized:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    if claims.get("scope", SCOPE_FULL) != SCOPE_FULL:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    user_id = claims["sub"]
    await hub.connect(user_id, websocket)
    try:
        await websocket.send_json({"event": "connected", "data": {"user_id": str(user_id)}})
        while True:
            # el cliente solo escucha; cualquier mensaje entrante se ignora
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        hub.disconnect(user_id, websocket)
