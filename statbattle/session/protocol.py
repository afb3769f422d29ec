"""
Wire Protocol - Pydantic models for the room WebSocket.

Every envelope is a JSON object with a `type` discriminant. Each direction
is a closed tagged union, so dispatch is exhaustive:

Client -> room:
    join, start, chooseStat, next, requestRematch, leave, ping

Room -> client:
    state, error, gameOver, pong

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations
from enum import Enum
import json
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from ..engine_core.action import Action, ErrorCode
from ..engine_core.state import LogEvent, LogEventType
from ..engine_core.view import RoomView, CardView, TopCardView, RoundView


class WireModel(BaseModel):
    """Base for every envelope: camelCase aliases, either name accepted."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Enums
# =============================================================================

class SeatId(str, Enum):
    P1 = "P1"
    P2 = "P2"


class Phase(str, Enum):
    WAITING = "WAITING"
    READY = "READY"
    CHOOSE = "CHOOSE"
    REVEAL = "REVEAL"
    GAME_OVER = "GAME_OVER"


# =============================================================================
# Client -> Room
# =============================================================================

class JoinMessage(WireModel):
    type: Literal["join"] = "join"
    name: str = ""


class StartMessage(WireModel):
    type: Literal["start"] = "start"


class ChooseStatMessage(WireModel):
    # Validated against the stat enum by the reducer, so an unknown stat
    # is reported as INVALID_STAT rather than a protocol error
    type: Literal["chooseStat"] = "chooseStat"
    stat: str


class NextMessage(WireModel):
    type: Literal["next"] = "next"


class RequestRematchMessage(WireModel):
    type: Literal["requestRematch"] = "requestRematch"


class LeaveMessage(WireModel):
    type: Literal["leave"] = "leave"


class PingMessage(WireModel):
    type: Literal["ping"] = "ping"


ClientMessage = Annotated[
    Union[
        JoinMessage,
        StartMessage,
        ChooseStatMessage,
        NextMessage,
        RequestRematchMessage,
        LeaveMessage,
        PingMessage,
    ],
    Field(discriminator="type"),
]

CLIENT_MESSAGE_ADAPTER: TypeAdapter = TypeAdapter(ClientMessage)


class ProtocolError(Exception):
    """An inbound frame that is not a valid client envelope."""

    def __init__(self, code: ErrorCode, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


def parse_client_message(text: str):
    """
    Decode one inbound frame.

    Raises ProtocolError with BAD_JSON for unparsable text and UNKNOWN for
    anything that is not one of the known envelopes.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise ProtocolError(ErrorCode.BAD_JSON, f"Invalid JSON: {e}") from e

    if not isinstance(data, dict) or "type" not in data:
        raise ProtocolError(ErrorCode.UNKNOWN, "Message must be an object with a 'type'")

    try:
        return CLIENT_MESSAGE_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise ProtocolError(
            ErrorCode.UNKNOWN,
            f"Unrecognised message of type {data.get('type')!r}",
        ) from e


def to_action(message, connection_id: str) -> Action | None:
    """
    Turn a parsed client envelope into an engine Action.

    Returns None for ping, which never reaches the reducer.
    """
    if isinstance(message, JoinMessage):
        return Action.join(connection_id, message.name)
    if isinstance(message, StartMessage):
        return Action.start(connection_id)
    if isinstance(message, ChooseStatMessage):
        return Action.choose_stat(connection_id, message.stat)
    if isinstance(message, NextMessage):
        return Action.next(connection_id)
    if isinstance(message, RequestRematchMessage):
        return Action.request_rematch(connection_id)
    if isinstance(message, LeaveMessage):
        return Action.leave(connection_id)
    if isinstance(message, PingMessage):
        return None
    raise TypeError(f"Unhandled client message: {type(message).__name__}")


# =============================================================================
# Room -> Client
# =============================================================================

class CardInfo(WireModel):
    card_id: str = Field(alias="id")
    name: str
    stats: dict[str, int] = Field(default_factory=dict)


class TopCardInfo(WireModel):
    revealed: bool
    card: Optional[CardInfo] = None


class TopCardsInfo(WireModel):
    you: Optional[TopCardInfo] = None
    opponent: Optional[TopCardInfo] = None


class RoundInfo(WireModel):
    stat: str
    cards: dict[str, CardInfo]
    winner: Literal["P1", "P2", "tie"]
    chooser: SeatId


class RoomViewInfo(WireModel):
    phase: Phase
    you: SeatId
    players: dict[str, str]
    turn: Optional[SeatId] = None
    your_deck_count: int
    opp_deck_count: int
    top_cards: TopCardsInfo
    last_round: Optional[RoundInfo] = None
    round_count: int = 0
    winner: Optional[SeatId] = None


class JoinEventInfo(WireModel):
    type: Literal["join"] = "join"
    seat: SeatId
    name: str


class RoundEventInfo(WireModel):
    type: Literal["round"] = "round"
    stat: str
    winner: Literal["P1", "P2", "tie"]


LogEventInfo = Annotated[Union[JoinEventInfo, RoundEventInfo], Field(discriminator="type")]


class StateMessage(WireModel):
    type: Literal["state"] = "state"
    view: RoomViewInfo
    log: list[LogEventInfo] = Field(default_factory=list)


class ErrorMessage(WireModel):
    type: Literal["error"] = "error"
    code: ErrorCode
    message: str


class GameSummary(WireModel):
    round_count: int
    duration_seconds: float


class GameOverMessage(WireModel):
    type: Literal["gameOver"] = "gameOver"
    winner: SeatId
    summary: GameSummary


class PongMessage(WireModel):
    type: Literal["pong"] = "pong"


# =============================================================================
# Conversion Helpers
# =============================================================================

def _convert_card(card: CardView) -> CardInfo:
    return CardInfo(card_id=card.card_id, name=card.name, stats=dict(card.stats))


def _convert_top_card(top: TopCardView | None) -> TopCardInfo | None:
    if top is None:
        return None
    return TopCardInfo(
        revealed=top.revealed,
        card=_convert_card(top.card) if top.card else None,
    )


def _convert_round(last_round: RoundView) -> RoundInfo:
    return RoundInfo(
        stat=last_round.stat,
        cards={seat: _convert_card(card) for seat, card in last_round.cards.items()},
        winner=last_round.winner,
        chooser=SeatId(last_round.chooser),
    )


def convert_view(view: RoomView) -> RoomViewInfo:
    """Convert an engine RoomView to its wire model."""
    return RoomViewInfo(
        phase=Phase(view.phase.value),
        you=SeatId(view.you.value),
        players=dict(view.players),
        turn=SeatId(view.turn.value) if view.turn else None,
        your_deck_count=view.your_deck_count,
        opp_deck_count=view.opp_deck_count,
        top_cards=TopCardsInfo(
            you=_convert_top_card(view.top_cards.you),
            opponent=_convert_top_card(view.top_cards.opponent),
        ),
        last_round=_convert_round(view.last_round) if view.last_round else None,
        round_count=view.round_count,
        winner=SeatId(view.winner.value) if view.winner else None,
    )


def convert_log(log: list[LogEvent]) -> list[JoinEventInfo | RoundEventInfo]:
    """Convert the room log to its wire models."""
    events: list[JoinEventInfo | RoundEventInfo] = []
    for event in log:
        if event.event_type == LogEventType.JOIN:
            events.append(JoinEventInfo(seat=SeatId(event.seat.value), name=event.name))
        else:
            events.append(RoundEventInfo(
                stat=event.stat.value,
                winner=event.winner.value if event.winner else "tie",
            ))
    return events


def state_message(view: RoomView, log: list[LogEvent]) -> StateMessage:
    return StateMessage(view=convert_view(view), log=convert_log(log))


def error_message(code: ErrorCode | str, message: str) -> ErrorMessage:
    return ErrorMessage(code=ErrorCode(code), message=message)
