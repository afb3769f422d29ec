"""
Action System - Actions, payloads, and results.

Every inbound client message becomes one Action. A closed disconnect is
turned into a LEAVE action by the coordinator, so connection loss goes
through the same path as an explicit leave.

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionType(Enum):
    """Client actions the room understands."""
    JOIN = "join"
    START = "start"
    CHOOSE_STAT = "chooseStat"
    NEXT = "next"
    REQUEST_REMATCH = "requestRematch"
    LEAVE = "leave"


class ErrorCode(Enum):
    """Rejection reasons reported back to the offending connection."""
    BAD_JSON = "BAD_JSON"
    UNKNOWN = "UNKNOWN"
    ROOM_FULL = "ROOM_FULL"
    NOT_READY = "NOT_READY"
    NOT_SEATED = "NOT_SEATED"
    WRONG_PHASE = "WRONG_PHASE"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    INVALID_STAT = "INVALID_STAT"


@dataclass
class ActionPayload:
    """
    Parameters of an action.

    connection_id identifies the sender; the seat is looked up from the
    room state, never trusted from the client.
    """
    connection_id: str
    name: str | None = None
    stat: str | None = None


@dataclass
class Action:
    """A complete action to be applied to the room state."""
    action_type: ActionType
    payload: ActionPayload

    @classmethod
    def join(cls, connection_id: str, name: str = "") -> Action:
        return cls(ActionType.JOIN, ActionPayload(connection_id=connection_id, name=name))

    @classmethod
    def start(cls, connection_id: str) -> Action:
        return cls(ActionType.START, ActionPayload(connection_id=connection_id))

    @classmethod
    def choose_stat(cls, connection_id: str, stat: str) -> Action:
        return cls(ActionType.CHOOSE_STAT, ActionPayload(connection_id=connection_id, stat=stat))

    @classmethod
    def next(cls, connection_id: str) -> Action:
        return cls(ActionType.NEXT, ActionPayload(connection_id=connection_id))

    @classmethod
    def request_rematch(cls, connection_id: str) -> Action:
        return cls(ActionType.REQUEST_REMATCH, ActionPayload(connection_id=connection_id))

    @classmethod
    def leave(cls, connection_id: str) -> Action:
        return cls(ActionType.LEAVE, ActionPayload(connection_id=connection_id))


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action was accepted
    - New state (None when nothing changed, e.g. leave while unseated)
    - Error message and code (if rejected)
    - Whether this action finished the match
    """
    success: bool
    new_state: Any | None = None  # RoomState
    error: str | None = None
    error_code: str | None = None

    # Human-readable changes, for logging
    state_changes: list[str] = field(default_factory=list)
    match_ended: bool = False

    @property
    def changed(self) -> bool:
        return self.success and self.new_state is not None

    @classmethod
    def failure(cls, error: str, error_code: ErrorCode) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code.value)

    @classmethod
    def unchanged(cls) -> ActionResult:
        """Accepted, but there is nothing to broadcast."""
        return cls(success=True)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        match_ended: bool = False,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            match_ended=match_ended,
        )
