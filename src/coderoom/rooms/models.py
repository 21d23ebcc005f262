"""
Pydantic models for the room channel.

Covers:
- Client -> Server messages (join, code-change, language-change, sync-code)
- Server -> Client events (connected, joined, code-change, language-change,
  disconnected, error)
- REST API response schemas for room listing

Field names are snake_case in Python and camelCase on the wire.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EventType(str, Enum):
    """Every event kind that crosses the room channel."""

    JOIN = "join"
    JOINED = "joined"
    CODE_CHANGE = "code-change"
    LANGUAGE_CHANGE = "language-change"
    SYNC_CODE = "sync-code"
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    ERROR = "error"


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# ─── Client -> Server ────────────────────────────────────────────────


class JoinMessage(WireModel):
    type: EventType = EventType.JOIN
    session_id: str = Field(min_length=1)
    display_name: str


class CodeChangeMessage(WireModel):
    type: EventType = EventType.CODE_CHANGE
    session_id: str = Field(min_length=1)
    code: str


class LanguageChangeMessage(WireModel):
    type: EventType = EventType.LANGUAGE_CHANGE
    session_id: str = Field(min_length=1)
    language: str


class SyncCodeMessage(WireModel):
    type: EventType = EventType.SYNC_CODE
    target_conn_id: str
    code: str


# ─── Server -> Client ────────────────────────────────────────────────


class MemberInfo(WireModel):
    conn_id: str
    display_name: str


class ConnectedEvent(WireModel):
    """Sent once on accept so the client learns its connection id."""

    type: EventType = EventType.CONNECTED
    conn_id: str


class JoinedEvent(WireModel):
    type: EventType = EventType.JOINED
    members: list[MemberInfo]
    display_name: str
    conn_id: str
    current_language: str


class CodeChangeEvent(WireModel):
    type: EventType = EventType.CODE_CHANGE
    code: str


class LanguageChangeEvent(WireModel):
    type: EventType = EventType.LANGUAGE_CHANGE
    language: str


class DisconnectedEvent(WireModel):
    type: EventType = EventType.DISCONNECTED
    conn_id: str
    display_name: str | None = None


class ErrorEvent(WireModel):
    type: EventType = EventType.ERROR
    message: str


# ─── REST API Models ─────────────────────────────────────────────────


class RoomInfo(WireModel):
    session_id: str
    language: str
    member_count: int
    members: list[MemberInfo] = Field(default_factory=list)


class RoomListResponse(WireModel):
    rooms: list[RoomInfo]
    count: int
