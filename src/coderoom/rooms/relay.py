"""
Event relay for room channels.

One RoomConnection per WebSocket. The relay owns the connection table and a
dispatch table from event type to handler, and offers three kinds of send:

    send_to(conn_id, event)                       direct
    broadcast(session_id, event, exclude=conn_id) everyone but the sender
    broadcast(session_id, event)                  everyone, sender included

The server holds no copy of any code buffer. ``sync-code`` messages from
existing members are forwarded to the newcomer as plain ``code-change``
events, and whichever arrives last wins on the receiving side.

Protocol:
    Server -> Client (on accept):
        {"type": "connected", "connId": "..."}

    Client -> Server:
        {"type": "join", "sessionId": "...", "displayName": "..."}
        {"type": "code-change", "sessionId": "...", "code": "..."}
        {"type": "language-change", "sessionId": "...", "language": "python"}
        {"type": "sync-code", "targetConnId": "...", "code": "..."}

    Server -> Client:
        {"type": "joined", "members": [...], "displayName": "...",
         "connId": "...", "currentLanguage": "..."}
        {"type": "code-change", "code": "..."}
        {"type": "language-change", "language": "..."}
        {"type": "disconnected", "connId": "...", "displayName": "..."}
        {"type": "error", "message": "..."}
"""

import uuid
from typing import Any, Awaitable, Callable, Optional, Protocol

from pydantic import BaseModel, ValidationError

from coderoom.logger import get_logger
from coderoom.rooms.directory import Departure, SessionDirectory
from coderoom.rooms.models import (
    CodeChangeEvent,
    CodeChangeMessage,
    ConnectedEvent,
    DisconnectedEvent,
    ErrorEvent,
    EventType,
    JoinedEvent,
    JoinMessage,
    LanguageChangeEvent,
    LanguageChangeMessage,
    MemberInfo,
    SyncCodeMessage,
    WireModel,
)
from coderoom.sandbox.languages import is_supported, supported_languages

logger = get_logger(__name__)


class JsonChannel(Protocol):
    async def send_json(self, data: Any) -> None: ...


class RoomConnection:
    """A single client channel. Sends on one channel are delivered in order."""

    def __init__(self, conn_id: str, channel: JsonChannel):
        self.conn_id = conn_id
        self._channel = channel
        self.open = True

    async def send(self, event: WireModel) -> bool:
        """Send an event; returns False instead of raising if the peer is gone."""
        if not self.open:
            return False
        try:
            await self._channel.send_json(event.to_wire())
            return True
        except Exception as e:
            self.open = False
            logger.warning(f"Dropping {event.type.value} for {self.conn_id}: {e}")
            return False


Handler = Callable[[RoomConnection, BaseModel], Awaitable[None]]


class EventRelay:
    """
    Coordinates presence, buffer and language events across connections.

    Everything runs on the event loop; directory and language updates happen
    synchronously before the first await of each handler.
    """

    def __init__(self, directory: Optional[SessionDirectory] = None):
        self.directory = directory or SessionDirectory()
        self.connections: dict[str, RoomConnection] = {}
        self._handlers: dict[EventType, tuple[type[BaseModel], Handler]] = {
            EventType.JOIN: (JoinMessage, self._on_join),
            EventType.CODE_CHANGE: (CodeChangeMessage, self._on_code_change),
            EventType.LANGUAGE_CHANGE: (LanguageChangeMessage, self._on_language_change),
            EventType.SYNC_CODE: (SyncCodeMessage, self._on_sync_code),
        }

    @property
    def languages(self):
        return self.directory.languages

    # ─── Connection lifecycle ────────────────────────────────────────

    async def connect(self, channel: JsonChannel, conn_id: Optional[str] = None) -> RoomConnection:
        """Register an accepted channel and tell the client its id."""
        conn = RoomConnection(conn_id or uuid.uuid4().hex, channel)
        self.connections[conn.conn_id] = conn
        logger.info(f"Connection opened: {conn.conn_id}")
        await conn.send(ConnectedEvent(conn_id=conn.conn_id))
        return conn

    async def disconnect(self, conn_id: str) -> None:
        """Drop a connection and notify every session it was part of."""
        conn = self.connections.pop(conn_id, None)
        if conn:
            conn.open = False
        for departure in self.directory.on_disconnect(conn_id):
            await self._announce_departure(departure)
        logger.info(f"Connection closed: {conn_id}")

    # ─── Sends ───────────────────────────────────────────────────────

    async def send_to(self, conn_id: str, event: WireModel) -> bool:
        conn = self.connections.get(conn_id)
        if conn is None:
            logger.debug(f"No connection {conn_id} for {event.type.value}")
            return False
        return await conn.send(event)

    async def broadcast(
        self,
        session_id: str,
        event: WireModel,
        exclude: Optional[str] = None,
    ) -> int:
        """Send to every member of a session except ``exclude``; returns delivered count."""
        delivered = 0
        for conn_id in self.directory.member_ids(session_id):
            if conn_id == exclude:
                continue
            if await self.send_to(conn_id, event):
                delivered += 1
        return delivered

    # ─── Dispatch ────────────────────────────────────────────────────

    async def dispatch(self, conn_id: str, data: Any) -> None:
        """Validate one incoming message and route it to its handler."""
        conn = self.connections.get(conn_id)
        if conn is None:
            logger.warning(f"Message from unknown connection {conn_id}")
            return

        if not isinstance(data, dict):
            await conn.send(ErrorEvent(message="Messages must be JSON objects"))
            return

        raw_type = data.get("type")
        try:
            event_type = EventType(raw_type)
            model, handler = self._handlers[event_type]
        except (ValueError, KeyError):
            logger.warning(f"Unknown message type '{raw_type}' from {conn_id}")
            await conn.send(ErrorEvent(message=f"Unknown message type: {raw_type}"))
            return

        try:
            message = model(**data)
        except ValidationError as e:
            logger.warning(f"Malformed {event_type.value} message from {conn_id}")
            await conn.send(
                ErrorEvent(message=f"Invalid {event_type.value} message: {e}")
            )
            return

        await handler(conn, message)

    # ─── Handlers ────────────────────────────────────────────────────

    async def _on_join(self, conn: RoomConnection, message: JoinMessage) -> None:
        outcome = self.directory.join(
            conn.conn_id, message.session_id, message.display_name
        )

        if outcome.previous:
            await self._announce_departure(outcome.previous)

        joined = JoinedEvent(
            members=[MemberInfo(**m.to_member()) for m in outcome.members],
            display_name=message.display_name,
            conn_id=conn.conn_id,
            current_language=outcome.language,
        )
        await self.broadcast(message.session_id, joined)
        await conn.send(LanguageChangeEvent(language=outcome.language))

    async def _on_code_change(
        self, conn: RoomConnection, message: CodeChangeMessage
    ) -> None:
        await self.broadcast(
            message.session_id, CodeChangeEvent(code=message.code), exclude=conn.conn_id
        )

    async def _on_language_change(
        self, conn: RoomConnection, message: LanguageChangeMessage
    ) -> None:
        if not is_supported(message.language):
            await conn.send(
                ErrorEvent(
                    message=(
                        f"Unsupported language: {message.language}. "
                        f"Available: {', '.join(supported_languages())}"
                    )
                )
            )
            return

        self.languages.set(message.session_id, message.language)
        await self.broadcast(
            message.session_id,
            LanguageChangeEvent(language=message.language),
            exclude=conn.conn_id,
        )

    async def _on_sync_code(self, conn: RoomConnection, message: SyncCodeMessage) -> None:
        await self.send_to(message.target_conn_id, CodeChangeEvent(code=message.code))

    async def _announce_departure(self, departure: Departure) -> None:
        event = DisconnectedEvent(
            conn_id=departure.participant.conn_id,
            display_name=departure.participant.display_name,
        )
        for conn_id in departure.remaining:
            await self.send_to(conn_id, event)

    async def close_all(self) -> None:
        """Forget every connection (used on shutdown)."""
        for conn_id in list(self.connections):
            await self.disconnect(conn_id)
