"""Shared pytest fixtures and configuration."""

import uuid

import pytest

from coderoom.rooms.directory import SessionDirectory
from coderoom.rooms.language import SessionLanguageState
from coderoom.rooms.relay import EventRelay
from coderoom.sandbox.orchestrator import SandboxOrchestrator
from coderoom.sandbox.runtimes.local_runtime import LocalSandboxRuntime


class FakeChannel:
    """Stands in for a WebSocket; records everything sent to it."""

    def __init__(self, fail: bool = False):
        self.sent: list[dict] = []
        self.fail = fail

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)

    def of_type(self, event_type: str) -> list[dict]:
        return [m for m in self.sent if m["type"] == event_type]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture
def directory():
    return SessionDirectory(SessionLanguageState(default_language="java"))


@pytest.fixture
def relay(directory):
    return EventRelay(directory)


@pytest.fixture
def sandbox_root(tmp_path):
    root = tmp_path / "sandboxes"
    root.mkdir()
    return root


@pytest.fixture
def local_orchestrator(sandbox_root):
    """Orchestrator on the local subprocess runtime with a short budget."""
    return SandboxOrchestrator(
        runtime=LocalSandboxRuntime(), sandbox_root=sandbox_root, timeout=2.0
    )


@pytest.fixture
def unique_id():
    """Generate a unique test ID."""
    return f"test-{uuid.uuid4().hex[:12]}"


@pytest.fixture
def make_channel():
    """Factory for FakeChannel instances."""
    return FakeChannel
