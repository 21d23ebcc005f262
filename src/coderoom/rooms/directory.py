"""
Session directory: who is in which session.

All mutation happens on the event loop between awaits, so the maps below
need no locking. The directory never performs I/O; it returns what changed
and the relay decides who to notify.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from coderoom.logger import get_logger
from coderoom.rooms.base import Participant
from coderoom.rooms.language import SessionLanguageState

logger = get_logger(__name__)


@dataclass
class Departure:
    """A participant leaving one session, with whoever is still there."""

    session_id: str
    participant: Participant
    remaining: list[str] = field(default_factory=list)


@dataclass
class JoinOutcome:
    """Result of a join: the snapshot to broadcast and any session left behind."""

    participant: Participant
    members: list[Participant]
    language: str
    previous: Optional[Departure] = None


class SessionDirectory:
    """
    Owns session -> members and connection -> participant mappings.

    A participant is in at most one session. Session member sets keep join
    order and disappear once empty; the session language is kept in
    ``languages``.
    """

    def __init__(self, languages: Optional[SessionLanguageState] = None):
        self.languages = languages or SessionLanguageState()
        self.participants: dict[str, Participant] = {}
        self._sessions: dict[str, dict[str, None]] = {}

    def join(self, conn_id: str, session_id: str, display_name: str) -> JoinOutcome:
        """
        Register ``conn_id`` in ``session_id`` under ``display_name``.

        Joining a different session first leaves the current one. Joining the
        same session again only refreshes the display name.
        """
        previous = None
        participant = self.participants.get(conn_id)

        if participant and participant.session_id not in (None, session_id):
            previous = self._remove(conn_id, participant.session_id)

        if participant is None:
            participant = Participant(conn_id=conn_id, display_name=display_name)
            self.participants[conn_id] = participant
        participant.display_name = display_name
        participant.session_id = session_id

        self._sessions.setdefault(session_id, {})[conn_id] = None
        language = self.languages.ensure(session_id)
        members = self.get_members(session_id)

        logger.info(
            f"{display_name} ({conn_id}) joined session {session_id} "
            f"[{len(members)} member(s), language={language}]"
        )
        return JoinOutcome(
            participant=participant,
            members=members,
            language=language,
            previous=previous,
        )

    def on_disconnect(self, conn_id: str) -> list[Departure]:
        """
        Forget ``conn_id`` entirely.

        Returns:
            One Departure per session the connection belonged to.
        """
        participant = self.participants.pop(conn_id, None)
        if participant is None:
            return []

        departures = []
        for session_id in self._sessions_of(conn_id):
            departures.append(self._remove(conn_id, session_id, participant))

        if departures:
            logger.info(
                f"{participant.display_name} ({conn_id}) disconnected from "
                f"{', '.join(d.session_id for d in departures)}"
            )
        return departures

    def get_members(self, session_id: str) -> list[Participant]:
        """Current membership snapshot in join order."""
        return [
            self.participants[conn_id]
            for conn_id in self._sessions.get(session_id, {})
            if conn_id in self.participants
        ]

    def member_ids(self, session_id: str) -> list[str]:
        return list(self._sessions.get(session_id, {}))

    def get_participant(self, conn_id: str) -> Optional[Participant]:
        return self.participants.get(conn_id)

    def session_of(self, conn_id: str) -> Optional[str]:
        participant = self.participants.get(conn_id)
        return participant.session_id if participant else None

    def has_session(self, session_id: str) -> bool:
        return bool(self._sessions.get(session_id))

    def describe_session(self, session_id: str) -> Optional[dict[str, Any]]:
        """Summary of one live session, or None if it has no members."""
        if not self.has_session(session_id):
            return None
        members = self.get_members(session_id)
        return {
            "session_id": session_id,
            "language": self.languages.ensure(session_id),
            "member_count": len(members),
            "members": [m.to_member() for m in members],
        }

    def list_sessions(self) -> list[dict[str, Any]]:
        return [
            self.describe_session(session_id)
            for session_id in self._sessions
            if self.has_session(session_id)
        ]

    @property
    def connected_count(self) -> int:
        return len(self.participants)

    def _sessions_of(self, conn_id: str) -> list[str]:
        return [sid for sid, members in self._sessions.items() if conn_id in members]

    def _remove(
        self,
        conn_id: str,
        session_id: str,
        participant: Optional[Participant] = None,
    ) -> Departure:
        # Snapshot so the departure keeps the name used in this session
        participant = replace(participant or self.participants[conn_id])
        members = self._sessions.get(session_id, {})
        members.pop(conn_id, None)
        if not members:
            self._sessions.pop(session_id, None)
            logger.debug(f"Session {session_id} is now empty")
        return Departure(
            session_id=session_id,
            participant=participant,
            remaining=list(members),
        )
