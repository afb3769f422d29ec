"""
Room Coordinator - The sequential actor that owns one room.

The coordinator:
1. Registers live connections
2. Feeds each inbound frame through the reducer, one at a time
3. Swaps in the new RoomState when an action is accepted
4. Sends a masked `state` snapshot to every seated connection
5. Sends `gameOver` when a match ends
6. Reports rejections to the sender only

Messages are serialized by an asyncio.Lock. Waiters acquire it in FIFO
order, so frames from both connections are processed in arrival order and
RoomState is never mutated concurrently.

Delivery is the only I/O. A failed or stalled send is logged and the
connection is dropped as if it had disconnected; it never propagates to the
room. Each send is bounded by send_timeout so a client that stops reading
cannot hold the lock.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Any, Protocol

from .. import config
from ..engine_core.action import Action, ActionResult
from ..engine_core.reducer import Reducer
from ..engine_core.state import RoomState, RoomPhase, Seat
from ..engine_core.view import project_all
from .protocol import (
    ProtocolError,
    GameOverMessage,
    GameSummary,
    PongMessage,
    SeatId,
    error_message,
    parse_client_message,
    state_message,
    to_action,
)

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """Anything that can deliver a JSON envelope (a WebSocket, a test fake)."""

    async def send_json(self, data: Any) -> None:
        ...


class RoomCoordinator:
    """
    Owns the RoomState of one room.

    Usage:
        coordinator = RoomCoordinator("ABCD", reducer)
        await coordinator.connect(connection_id, websocket)
        await coordinator.receive(connection_id, text)
        await coordinator.disconnect(connection_id)
    """

    def __init__(
        self,
        room_code: str,
        reducer: Reducer,
        send_timeout: float = config.SEND_TIMEOUT,
    ):
        self.room_code = room_code
        self.reducer = reducer
        self.send_timeout = send_timeout
        self.state = RoomState(room_code=room_code)
        self._connections: dict[str, Connection] = {}
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, connection_id: str, connection: Connection) -> None:
        """Register a live connection. It stays unseated until it joins."""
        async with self._lock:
            self._connections[connection_id] = connection
        logger.debug("room %s: connection %s opened", self.room_code, connection_id)

    async def disconnect(self, connection_id: str) -> None:
        """A closed connection is handled exactly like an explicit leave."""
        async with self._lock:
            self._connections.pop(connection_id, None)
            await self._apply(connection_id, Action.leave(connection_id))
        logger.debug("room %s: connection %s closed", self.room_code, connection_id)

    async def receive(self, connection_id: str, text: str) -> None:
        """Process one inbound frame from a connection."""
        async with self._lock:
            try:
                message = parse_client_message(text)
            except ProtocolError as e:
                await self._reply(connection_id, error_message(e.code, e.message).to_wire())
                return

            action = to_action(message, connection_id)
            if action is None:
                await self._reply(connection_id, PongMessage().to_wire())
                return
            await self._apply(connection_id, action)

    async def submit(self, action: Action) -> ActionResult:
        """Apply an already-built action (used by tests and the CLI)."""
        async with self._lock:
            return await self._apply(action.payload.connection_id, action)

    # =========================================================================
    # Internals (caller holds the lock)
    # =========================================================================

    async def _apply(self, connection_id: str, action: Action) -> ActionResult:
        result = self.reducer.apply(self.state, action)
        if not result.success:
            logger.debug(
                "room %s: rejected %s from %s: %s",
                self.room_code,
                action.action_type.value,
                connection_id,
                result.error,
            )
            await self._reply(connection_id, error_message(result.error_code, result.error).to_wire())
            return result

        if result.changed:
            self.state = result.new_state
            for change in result.state_changes:
                logger.debug("room %s: %s", self.room_code, change)
            await self._broadcast_state()
            if result.match_ended:
                await self._broadcast_game_over()
        return result

    async def _broadcast_state(self) -> None:
        """Send every seated, connected seat its own masked view."""
        views = project_all(self.state)
        messages = {
            seat: state_message(view, self.state.log).to_wire()
            for seat, view in views.items()
        }
        await self._deliver_to_seats(messages)

    async def _broadcast_game_over(self) -> None:
        state = self.state
        if state.phase != RoomPhase.GAME_OVER or state.winner is None:
            return
        message = GameOverMessage(
            winner=SeatId(state.winner.value),
            summary=GameSummary(
                round_count=state.round_count,
                duration_seconds=round(self.reducer.match_duration(state), 3),
            ),
        ).to_wire()
        await self._deliver_to_seats({seat: message for seat in state.connections})

    async def _deliver_to_seats(self, messages: dict[Seat, dict]) -> None:
        dead: list[str] = []
        for seat, message in messages.items():
            connection_id = self.state.connections.get(seat)
            if connection_id is None or connection_id not in self._connections:
                continue
            if not await self._send(connection_id, message):
                dead.append(connection_id)

        # Dropping a dead seat changes the state, which triggers another
        # broadcast to whoever is left.
        for connection_id in dead:
            self._connections.pop(connection_id, None)
            await self._apply(connection_id, Action.leave(connection_id))

    async def _reply(self, connection_id: str, message: dict) -> None:
        if not await self._send(connection_id, message):
            self._connections.pop(connection_id, None)
            await self._apply(connection_id, Action.leave(connection_id))

    async def _send(self, connection_id: str, message: dict) -> bool:
        connection = self._connections.get(connection_id)
        if connection is None:
            return True
        try:
            await asyncio.wait_for(connection.send_json(message), self.send_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "room %s: delivery to %s timed out after %ss, dropping it",
                self.room_code,
                connection_id,
                self.send_timeout,
            )
            return False
        except Exception as e:
            logger.warning(
                "room %s: delivery to %s failed, dropping it: %s",
                self.room_code,
                connection_id,
                e,
            )
            return False
        return True
