"""
Unit tests for the session directory and language state.
"""

from coderoom.rooms.base import Participant
from coderoom.rooms.directory import SessionDirectory
from coderoom.rooms.language import SessionLanguageState


class TestSessionLanguageState:
    def test_ensure_assigns_default_once(self):
        state = SessionLanguageState(default_language="java")
        assert state.get("room") is None
        assert state.ensure("room") == "java"

        state.set("room", "python")
        assert state.ensure("room") == "python"

    def test_last_write_wins(self):
        state = SessionLanguageState(default_language="java")
        state.ensure("room")
        state.set("room", "python")
        state.set("room", "java")
        assert state.get("room") == "java"

    def test_contains(self):
        state = SessionLanguageState(default_language="java")
        assert "room" not in state
        state.ensure("room")
        assert "room" in state


class TestParticipant:
    def test_to_member(self):
        p = Participant(conn_id="c1", display_name="Ada", session_id="r")
        assert p.to_member() == {"conn_id": "c1", "display_name": "Ada"}


class TestSessionDirectory:
    def test_language_defined_after_first_join(self, directory):
        outcome = directory.join("c1", "room", "Ada")
        assert outcome.language == "java"
        assert directory.languages.get("room") == "java"

    def test_snapshot_contains_exactly_current_members(self, directory):
        directory.join("c1", "room", "Ada")
        directory.join("c2", "room", "Bob")
        outcome = directory.join("c3", "room", "Cy")

        assert [m.conn_id for m in outcome.members] == ["c1", "c2", "c3"]
        assert directory.member_ids("room") == ["c1", "c2", "c3"]

    def test_duplicate_display_names_allowed(self, directory):
        directory.join("c1", "room", "Ada")
        outcome = directory.join("c2", "room", "Ada")

        assert len(outcome.members) == 2
        assert {m.conn_id for m in outcome.members} == {"c1", "c2"}

    def test_sessions_are_independent(self, directory):
        directory.join("c1", "room-a", "Ada")
        directory.join("c2", "room-b", "Bob")

        assert directory.member_ids("room-a") == ["c1"]
        assert directory.member_ids("room-b") == ["c2"]

    def test_disconnect_reports_remaining_members(self, directory):
        directory.join("c1", "room", "Ada")
        directory.join("c2", "room", "Bob")
        directory.join("c3", "room", "Cy")

        departures = directory.on_disconnect("c2")

        assert len(departures) == 1
        assert departures[0].session_id == "room"
        assert departures[0].participant.display_name == "Bob"
        assert departures[0].remaining == ["c1", "c3"]
        assert directory.get_participant("c2") is None

    def test_disconnect_unknown_connection(self, directory):
        assert directory.on_disconnect("nobody") == []

    def test_disconnect_twice_reports_once(self, directory):
        directory.join("c1", "room", "Ada")
        directory.join("c2", "room", "Bob")

        assert len(directory.on_disconnect("c2")) == 1
        assert directory.on_disconnect("c2") == []

    def test_empty_session_is_dropped_but_language_kept(self, directory):
        directory.join("c1", "room", "Ada")
        directory.languages.set("room", "python")
        directory.on_disconnect("c1")

        assert not directory.has_session("room")
        assert directory.list_sessions() == []

        outcome = directory.join("c2", "room", "Bob")
        assert outcome.language == "python"

    def test_join_other_session_moves_participant(self, directory):
        directory.join("c1", "room-a", "Ada")
        directory.join("c2", "room-a", "Bob")

        outcome = directory.join("c1", "room-b", "Ada")

        assert outcome.previous is not None
        assert outcome.previous.session_id == "room-a"
        assert outcome.previous.remaining == ["c2"]
        assert directory.member_ids("room-a") == ["c2"]
        assert directory.member_ids("room-b") == ["c1"]
        assert directory.session_of("c1") == "room-b"

    def test_rejoin_same_session_updates_name(self, directory):
        directory.join("c1", "room", "Ada")
        outcome = directory.join("c1", "room", "Ada L.")

        assert outcome.previous is None
        assert [m.display_name for m in outcome.members] == ["Ada L."]

    def test_departure_keeps_name_used_in_old_session(self, directory):
        directory.join("c1", "room-a", "Ada")
        directory.join("c2", "room-a", "Bob")

        outcome = directory.join("c1", "room-b", "Countess")
        assert outcome.previous.participant.display_name == "Ada"

    def test_describe_and_list_sessions(self, directory):
        directory.join("c1", "room", "Ada")
        directory.join("c2", "room", "Bob")

        info = directory.describe_session("room")
        assert info["session_id"] == "room"
        assert info["language"] == "java"
        assert info["member_count"] == 2
        assert info["members"][1] == {"conn_id": "c2", "display_name": "Bob"}

        assert len(directory.list_sessions()) == 1
        assert directory.describe_session("missing") is None

    def test_connected_count(self, directory):
        directory.join("c1", "room", "Ada")
        directory.join("c2", "other", "Bob")
        assert directory.connected_count == 2

    def test_default_language_from_config(self):
        directory = SessionDirectory()
        outcome = directory.join("c1", "room", "Ada")
        assert outcome.language
