"""
Participant record for the session directory.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass
class Participant:
    """One connection's identity. Identity is ``conn_id``; names may repeat."""

    conn_id: str
    display_name: str
    session_id: Optional[str] = None
    joined_at: datetime = field(default_factory=datetime.now)

    def to_member(self) -> dict[str, Any]:
        return {"conn_id": self.conn_id, "display_name": self.display_name}
