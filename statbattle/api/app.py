"""
FastAPI Application - WebSocket entry point for rooms.

Endpoints:
    WS     /ws/{room_code}              Join a room's live connection
    GET    /api/v1/rooms/{room_code}    Public room summary (no cards)
    GET    /health                      Health check
    GET    /ping                        Liveness probe ("pong")

Every WebSocket frame is a JSON envelope with a `type` field.
See statbattle.session.protocol for the message shapes.
"""

import logging
import uuid

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .. import __version__
from .. import config
from ..session import RoomManager
from .schemas import HealthResponse, RoomStatusResponse

logger = logging.getLogger(__name__)


def create_app(manager: RoomManager | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        manager: Optional RoomManager (creates one from config if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Stat Battle Room API",
        description="""
Two-player stat battle rooms over WebSocket.

Connect to `/ws/{room_code}`, send `{"type": "join", "name": "..."}` and
follow the `state` snapshots. The room accepts exactly two seated players.

## Error Codes

| Code | Description |
|------|-------------|
| `BAD_JSON` | Frame is not valid JSON |
| `UNKNOWN` | Unknown or malformed message type |
| `ROOM_FULL` | Both seats are taken |
| `NOT_READY` | Start or rematch without two seated players |
| `NOT_SEATED` | Action requires joining first |
| `WRONG_PHASE` | Action not allowed in the current phase |
| `NOT_YOUR_TURN` | The other seat is choosing |
| `INVALID_STAT` | Stat name is not one of the card stats |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    room_manager = manager or RoomManager(
        reveal_step=config.REVEAL_STEP,
        random_seed=config.RANDOM_SEED,
    )
    app.state.room_manager = room_manager

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/ws/{room_code}")
    async def room_socket(websocket: WebSocket, room_code: str):
        """
        Live connection to one room.

        Messages from client:
        - join, start, chooseStat, next, requestRematch, leave, ping

        Messages from server:
        - state: masked snapshot plus the room log
        - error: rejection of the last message (sender only)
        - gameOver: match winner and summary
        - pong: keep-alive answer
        """
        await websocket.accept()

        coordinator = room_manager.get_or_create(room_code)
        connection_id = uuid.uuid4().hex
        await coordinator.connect(connection_id, websocket)

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                text = message.get("text")
                if text is None:
                    text = (message.get("bytes") or b"").decode("utf-8", errors="replace")
                await coordinator.receive(connection_id, text)
        except WebSocketDisconnect:
            pass
        finally:
            await coordinator.disconnect(connection_id)

    # =========================================================================
    # HTTP Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/rooms/{room_code}",
        response_model=RoomStatusResponse,
        tags=["Rooms"],
        summary="Get room status",
    )
    async def get_room(room_code: str) -> RoomStatusResponse:
        """Phase, player names and connection count of a room."""
        coordinator = room_manager.get(room_code)
        if coordinator is None:
            raise HTTPException(status_code=404, detail=f"Room {room_code} not found")
        state = coordinator.state
        return RoomStatusResponse(
            room_code=room_code,
            phase=state.phase.value,
            players={seat.value: name for seat, name in state.players.items()},
            connections=coordinator.connection_count,
        )

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="statbattle",
            version=__version__,
            rooms=len(room_manager.list_rooms()),
        )

    @app.get("/ping", response_class=PlainTextResponse, tags=["System"])
    async def ping() -> str:
        return "pong"

    return app


# For running directly: uvicorn statbattle.api.app:app
app = create_app()
