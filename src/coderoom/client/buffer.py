"""
Participant-side code buffer.

Every mutation is tagged with its origin. Local edits are the only ones that
should be broadcast; remote updates replace the text wholesale and are
reported with ``Origin.REMOTE`` so nothing echoes them back.
"""

from enum import Enum
from typing import Callable, Optional


class Origin(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"


ChangeListener = Callable[[str, Origin], None]


class SharedBuffer:
    """Last-write-wins text buffer held by one participant."""

    def __init__(self, text: str = ""):
        self.text = text
        self.version = 0
        self._listeners: list[ChangeListener] = []

    def on_change(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def edit(self, text: str) -> bool:
        """Apply a local edit. Returns True if the text changed."""
        return self._replace(text, Origin.LOCAL)

    def apply_remote(self, text: Optional[str]) -> bool:
        """
        Apply text received from a peer.

        Identical text is ignored, so re-delivery is a no-op.
        """
        if text is None:
            return False
        return self._replace(text, Origin.REMOTE)

    def _replace(self, text: str, origin: Origin) -> bool:
        if text == self.text:
            return False
        self.text = text
        self.version += 1
        for listener in self._listeners:
            listener(text, origin)
        return True
