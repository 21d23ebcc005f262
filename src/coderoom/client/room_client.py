"""
Room client — joins a coderoom session over WebSocket and keeps a local
buffer in step with the other participants.

Usage:
    client = RoomClient(session_id="abc", display_name="Ada")
    await client.run()
"""

import asyncio
import json
from typing import Any, Awaitable, Callable, Optional

import websockets

from coderoom.client.buffer import SharedBuffer
from coderoom.config import CONFIG
from coderoom.errors import ChannelConnectError
from coderoom.logger import get_logger
from coderoom.rooms.models import (
    CodeChangeMessage,
    EventType,
    JoinMessage,
    LanguageChangeMessage,
    SyncCodeMessage,
    WireModel,
)

logger = get_logger(__name__)

EventListener = Callable[[dict[str, Any]], Awaitable[None] | None]


def websocket_url(server_url: str) -> str:
    """Turn an http(s) server URL into the room channel URL."""
    url = server_url.rstrip("/")
    if url.startswith("https://"):
        url = "wss://" + url[len("https://") :]
    elif url.startswith("http://"):
        url = "ws://" + url[len("http://") :]
    if not url.endswith("/ws/room"):
        url = f"{url}/ws/room"
    return url


class RoomClient:
    """WebSocket participant for one room.

    Args:
        session_id: Room to join.
        display_name: Name shown to other participants.
        server_url: Base URL of the coderoom server.
        buffer: Local code buffer; a fresh one is created if omitted.
        connect_timeout: Per-attempt connection timeout in seconds.
        reconnect_delay: Seconds to wait between attempts.
        max_attempts: Give up after this many failed attempts (None = never).
    """

    def __init__(
        self,
        session_id: str,
        display_name: str,
        server_url: Optional[str] = None,
        buffer: Optional[SharedBuffer] = None,
        connect_timeout: Optional[float] = None,
        reconnect_delay: Optional[float] = None,
        max_attempts: Optional[int] = None,
    ):
        self.session_id = session_id
        self.display_name = display_name
        self.url = websocket_url(server_url or CONFIG.server_url)
        self.buffer = buffer or SharedBuffer()
        self.connect_timeout = connect_timeout or CONFIG.connect_timeout
        self.reconnect_delay = (
            CONFIG.reconnect_delay if reconnect_delay is None else reconnect_delay
        )
        self.max_attempts = max_attempts

        self.conn_id: Optional[str] = None
        self.language: Optional[str] = None
        self.members: dict[str, str] = {}
        self._ws = None
        self._stop = False
        self._listeners: list[EventListener] = []

    def on_event(self, listener: EventListener) -> None:
        """Register a callback invoked with every event after it is applied."""
        self._listeners.append(listener)

    # ─── Connection ──────────────────────────────────────────────────

    async def connect(self):
        """Open a fresh channel, retrying until connected or stopped."""
        attempts = 0
        while True:
            if self._stop:
                raise ChannelConnectError("Connection attempts stopped")
            attempts += 1
            try:
                logger.info(f"Connecting to {self.url} (attempt {attempts}) ...")
                return await websockets.connect(
                    self.url, open_timeout=self.connect_timeout
                )
            except (OSError, asyncio.TimeoutError, websockets.exceptions.WebSocketException) as e:
                if self.max_attempts is not None and attempts >= self.max_attempts:
                    raise ChannelConnectError(
                        f"Could not connect to {self.url} after {attempts} attempt(s): {e}"
                    ) from e
                logger.warning(
                    f"Connect failed: {e}. Retrying in {self.reconnect_delay}s..."
                )
                await asyncio.sleep(self.reconnect_delay)

    async def run_once(self) -> None:
        """Connect, join, and process events until the channel closes."""
        ws = await self.connect()
        self._ws = ws
        try:
            await self.send(
                JoinMessage(session_id=self.session_id, display_name=self.display_name)
            )
            async for message in ws:
                if self._stop:
                    break
                await self.handle_event(json.loads(message))
        finally:
            self._ws = None
            await ws.close()

    async def run(self) -> None:
        """Run with automatic reconnection; every reconnect is a new channel."""
        while not self._stop:
            try:
                await self.run_once()
            except websockets.exceptions.ConnectionClosed as e:
                if self._stop:
                    break
                logger.warning(f"Connection closed: {e}. Reconnecting...")
                await asyncio.sleep(self.reconnect_delay)
        logger.info("Room client stopped.")

    def stop(self) -> None:
        """Signal the client to stop."""
        self._stop = True

    # ─── Outgoing ────────────────────────────────────────────────────

    async def send(self, message: WireModel) -> None:
        if self._ws is None:
            raise ChannelConnectError("Not connected")
        await self._ws.send(json.dumps(message.to_wire()))

    async def edit(self, code: str) -> bool:
        """Apply a local edit and broadcast it if the text changed."""
        if not self.buffer.edit(code):
            return False
        await self.send(CodeChangeMessage(session_id=self.session_id, code=code))
        return True

    async def set_language(self, language: str) -> None:
        self.language = language
        await self.send(
            LanguageChangeMessage(session_id=self.session_id, language=language)
        )

    # ─── Incoming ────────────────────────────────────────────────────

    async def handle_event(self, data: dict[str, Any]) -> None:
        """Apply one server event to local state."""
        msg_type = data.get("type")

        if msg_type == EventType.CONNECTED.value:
            self.conn_id = data.get("connId")

        elif msg_type == EventType.JOINED.value:
            self.members = {
                m["connId"]: m["displayName"] for m in data.get("members", [])
            }
            self.language = data.get("currentLanguage", self.language)
            if data.get("connId") != self.conn_id:
                logger.info(f"{data.get('displayName')} joined the room")
            # Every recipient, the newcomer included, pushes its buffer to the newcomer
            await self.send(
                SyncCodeMessage(target_conn_id=data["connId"], code=self.buffer.text)
            )

        elif msg_type == EventType.CODE_CHANGE.value:
            self.buffer.apply_remote(data.get("code"))

        elif msg_type == EventType.LANGUAGE_CHANGE.value:
            self.language = data.get("language", self.language)

        elif msg_type == EventType.DISCONNECTED.value:
            self.members.pop(data.get("connId"), None)
            logger.info(f"{data.get('displayName')} left the room")

        elif msg_type == EventType.ERROR.value:
            logger.warning(f"Server error: {data.get('message')}")

        else:
            logger.debug(f"Unhandled event type: {msg_type}")

        for listener in self._listeners:
            result = listener(data)
            if asyncio.iscoroutine(result):
                await result
