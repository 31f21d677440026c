import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession

from staffpanel.auth.dependencies import get_session_user
from staffpanel.core.broadcaster import Broadcaster
from staffpanel.core.config import settings
from staffpanel.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live"])


@router.websocket("/ws")
async def live_updates(
    websocket: WebSocket,
    db: AsyncSession = Depends(get_db),
) -> None:
    """Push channel for chat events ({"type": "new_message"|"delete_message", "data": ...}).

    Needs the same session cookie as the HTTP API. Incoming frames are ignored.
    """
    cookie_value = websocket.cookies.get(settings.session_cookie_name)
    if not cookie_value:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    user, _ = await get_session_user(db, cookie_value)
    # Release the connection; the socket may stay open for hours
    await db.close()
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    broadcaster: Broadcaster = websocket.app.state.broadcaster
    await websocket.accept()
    await broadcaster.register(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("Live connection for user %s failed", user.id)
    finally:
        await broadcaster.unregister(websocket)
