"""
Room coordination for coderoom.

A room (session) is a set of connected participants sharing one selected
language. Code buffers live only on the participants; the server relays.
"""

from coderoom.rooms.base import Participant
from coderoom.rooms.directory import Departure, JoinOutcome, SessionDirectory
from coderoom.rooms.language import SessionLanguageState
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
    RoomInfo,
    RoomListResponse,
    SyncCodeMessage,
)
from coderoom.rooms.relay import EventRelay, RoomConnection

__all__ = [
    "Participant",
    "Departure",
    "JoinOutcome",
    "SessionDirectory",
    "SessionLanguageState",
    "CodeChangeEvent",
    "CodeChangeMessage",
    "ConnectedEvent",
    "DisconnectedEvent",
    "ErrorEvent",
    "EventType",
    "JoinedEvent",
    "JoinMessage",
    "LanguageChangeEvent",
    "LanguageChangeMessage",
    "MemberInfo",
    "RoomInfo",
    "RoomListResponse",
    "SyncCodeMessage",
    "EventRelay",
    "RoomConnection",
]
