"""
Pydantic Schemas for the HTTP side of the API.

The WebSocket envelopes live in session.protocol; this module only covers
the plain HTTP endpoints.
"""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="healthy or unhealthy")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Package version")
    rooms: int = Field(0, description="Rooms currently held in memory")


class RoomStatusResponse(BaseModel):
    """Public summary of one room. Carries no card data."""
    room_code: str
    phase: str
    players: dict[str, str] = Field(default_factory=dict)
    connections: int = 0
