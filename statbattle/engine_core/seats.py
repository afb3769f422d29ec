"""
Seat Manager - Binds connections to the two seats of a room.

A connection holds at most one seat and a seat is bound to at most one
connection. The binding lives in RoomState.connections so that the room
state stays the single source of truth.
"""

from __future__ import annotations

from .state import RoomState, Seat, SEAT_ORDER, LogEvent


def display_name(name: str | None, seat: Seat) -> str:
    """Strip the requested name, falling back to the seat's default label."""
    cleaned = (name or "").strip()
    return cleaned or seat.default_name


def join(state: RoomState, connection_id: str, name: str | None) -> tuple[Seat | None, RoomState]:
    """
    Seat a connection.

    Returns (seat, new_state). A connection that is already seated keeps its
    seat and only gets its name refreshed, without a new log entry.
    Returns (None, state) unchanged when both seats are taken.
    """
    current = state.seat_of(connection_id)
    if current is not None:
        new_state = state._copy_with()
        new_state.players[current] = display_name(name, current)
        return current, new_state

    for seat in SEAT_ORDER:
        if seat not in state.players:
            label = display_name(name, seat)
            new_state = state._copy_with()
            new_state.players[seat] = label
            new_state.connections[seat] = connection_id
            new_state.log.append(LogEvent.join(seat, label))
            return seat, new_state

    return None, state


def leave(state: RoomState, connection_id: str) -> tuple[Seat | None, RoomState]:
    """
    Vacate the seat held by a connection.

    Returns (vacated seat, new_state), or (None, state) when the connection
    holds no seat.
    """
    seat = state.seat_of(connection_id)
    if seat is None:
        return None, state

    new_state = state._copy_with()
    new_state.players.pop(seat, None)
    new_state.connections.pop(seat, None)
    return seat, new_state
