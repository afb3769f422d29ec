"""
Session Module - Live rooms and their connections.

A room is one isolated match context, reached by its room code:
- Created empty when the first connection arrives
- Holds exactly two seats
- Processes every inbound frame sequentially
- Pushes a masked snapshot to each seat after every change

Rooms are EPHEMERAL: nothing survives a restart.
"""

from .coordinator import RoomCoordinator, Connection
from .manager import RoomManager
from .protocol import parse_client_message, ProtocolError

__all__ = [
    "RoomCoordinator",
    "Connection",
    "RoomManager",
    "parse_client_message",
    "ProtocolError",
]
