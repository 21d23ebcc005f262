"""
Routes for collaborative rooms.

Provides:
- WebSocket endpoint for room channels (/ws/room)
- REST endpoints for listing and describing active rooms
"""

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.websockets import WebSocket, WebSocketDisconnect

from coderoom.logger import get_logger
from coderoom.rooms.models import ErrorEvent, RoomInfo, RoomListResponse

logger = get_logger(__name__)


def _get_relay(request_or_ws):
    """Get EventRelay from app state."""
    app = getattr(request_or_ws, "app", None)
    if app is None:
        return None
    return getattr(app.state, "relay", None)


async def room_websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for room participants.

    1. Client connects to /ws/room
    2. Server sends: {"type": "connected", "connId": "..."}
    3. Client sends join / code-change / language-change / sync-code messages
    4. On close, remaining room members receive "disconnected"
    """
    relay = _get_relay(websocket)
    if not relay:
        await websocket.close(code=1011, reason="Room system not initialized")
        return

    await websocket.accept()
    conn = None

    try:
        conn = await relay.connect(websocket)

        while True:
            try:
                data = await websocket.receive_json()
            except ValueError:
                await conn.send(ErrorEvent(message="Invalid JSON"))
                continue
            await relay.dispatch(conn.conn_id, data)

    except WebSocketDisconnect:
        logger.debug(
            f"Room WebSocket disconnected: {conn.conn_id if conn else 'unknown'}"
        )
    except Exception as e:
        logger.error(f"Room WebSocket error: {e}")
    finally:
        if conn:
            await relay.disconnect(conn.conn_id)


async def list_rooms(request: Request) -> JSONResponse:
    """GET /rooms — List rooms that currently have members."""
    relay = _get_relay(request)
    if not relay:
        return JSONResponse({"rooms": [], "error": "Room system not initialized"})

    rooms = relay.directory.list_sessions()
    resp = RoomListResponse(rooms=[RoomInfo(**r) for r in rooms], count=len(rooms))
    return JSONResponse(resp.to_wire())


async def describe_room(request: Request) -> JSONResponse:
    """GET /rooms/{session_id} — Members and language of one room."""
    relay = _get_relay(request)
    session_id = request.path_params.get("session_id", "")

    if not relay:
        return JSONResponse({"error": "Room system not initialized"}, status_code=503)

    info = relay.directory.describe_session(session_id)
    if not info:
        return JSONResponse({"error": f"Room not found: {session_id}"}, status_code=404)

    return JSONResponse(RoomInfo(**info).to_wire())
