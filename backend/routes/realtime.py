# backend/routes/realtime.py
import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from database import SessionLocal
from utils.changefeed import ChangeFeed
from utils.tokenJWT import user_from_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


def _authorized(token: Optional[str]) -> bool:
    db = SessionLocal()
    try:
        user = user_from_token(token, db)
        return user is not None and bool(user.is_authorized)
    finally:
        db.close()


# Pushes {"table": name} every time a write commits; clients refetch that table
@router.websocket("/ws/changes")
async def changes(websocket: WebSocket, token: Optional[str] = Query(None)):
    if not _authorized(token):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    feed: ChangeFeed = websocket.app.state.change_feed
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    # publish() is called from the request threadpool
    subscription = feed.open(lambda table: loop.call_soon_threadsafe(queue.put_nowait, table))
    await websocket.accept()

    async def forward():
        while True:
            table = await queue.get()
            await websocket.send_json({"table": table})

    sender = asyncio.create_task(forward())
    try:
        # Clients never send; reading only detects the disconnect
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("Change feed client disconnected")
    finally:
        sender.cancel()
        subscription.close()
