"""
Engine Core - Authoritative room state and its transitions.

The engine is the part that:
1. Holds the RoomState of one room
2. Seats connections
3. Deals and resolves rounds
4. Applies actions via the reducer
5. Projects per-seat masked views
"""

from .state import RoomState, RoomPhase, Seat, Stat, Card, RoundRecord, LogEvent, LogEventType
from .action import Action, ActionType, ActionPayload, ActionResult, ErrorCode
from .reducer import Reducer, apply_action
from .view import RoomView, project_view, project_all

__all__ = [
    "RoomState",
    "RoomPhase",
    "Seat",
    "Stat",
    "Card",
    "RoundRecord",
    "LogEvent",
    "LogEventType",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "ErrorCode",
    "Reducer",
    "apply_action",
    "RoomView",
    "project_view",
    "project_all",
]
