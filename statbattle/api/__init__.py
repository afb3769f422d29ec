"""
API Module - Network interface for rooms.

Exposes rooms over a FastAPI WebSocket. Clients:
1. Connect to /ws/{room_code}
2. Join with a display name
3. Start the match once both seats are filled
4. Take turns choosing stats
5. Request a rematch after game over

All state is room-scoped and in-memory. No accounts.
"""

from .schemas import HealthResponse, RoomStatusResponse
from .app import create_app

__all__ = [
    "HealthResponse",
    "RoomStatusResponse",
    "create_app",
]
