"""
Reference participant for coderoom rooms.

- buffer: origin-tagged, last-write-wins code buffer
- room_client: WebSocket client that joins a room and keeps the buffer in step
"""

from coderoom.client.buffer import Origin, SharedBuffer
from coderoom.client.room_client import RoomClient, websocket_url

__all__ = ["Origin", "SharedBuffer", "RoomClient", "websocket_url"]
