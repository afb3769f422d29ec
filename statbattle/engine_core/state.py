"""
Room State - The single source of truth for one room.

Design principles:
- Owned by exactly one coordinator
- Immutable-friendly: the reducer returns a new RoomState per accepted action
- Serializable: plain dataclasses and enums only
- Hidden information lives here; masking happens in the view projector
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum


class Seat(Enum):
    """The two fixed player slots of a room."""
    P1 = "P1"
    P2 = "P2"

    @property
    def other(self) -> Seat:
        return Seat.P2 if self is Seat.P1 else Seat.P1

    @property
    def default_name(self) -> str:
        return "Player 1" if self is Seat.P1 else "Player 2"


SEAT_ORDER: tuple[Seat, ...] = (Seat.P1, Seat.P2)


class RoomPhase(Enum):
    """Stage of the match lifecycle."""
    WAITING = "WAITING"
    READY = "READY"
    CHOOSE = "CHOOSE"
    REVEAL = "REVEAL"
    GAME_OVER = "GAME_OVER"


class Stat(Enum):
    """Closed set of attributes every card carries."""
    SPEED = "speed"
    STRENGTH = "strength"
    SIZE = "size"
    INTELLIGENCE = "intelligence"

    @classmethod
    def parse(cls, value: str) -> Stat | None:
        """Look up a stat by wire name, None if unrecognised."""
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class Card:
    """
    An immutable catalog card.

    The same card appears once in each seat's deck, so equality is by value
    and decks are compared as multisets of card_id.
    """
    card_id: str
    name: str
    stats: dict[str, int] = field(default_factory=dict, hash=False)

    def value_of(self, stat: Stat) -> int:
        return self.stats[stat.value]


@dataclass(frozen=True)
class RoundRecord:
    """The most recently resolved round, shown to both seats alike."""
    stat: Stat
    card_p1: Card
    card_p2: Card
    winner: Seat | None  # None is a tie
    chooser: Seat


class LogEventType(Enum):
    JOIN = "join"
    ROUND = "round"


@dataclass(frozen=True)
class LogEvent:
    """
    One entry of the room log.

    join events carry seat and name; round events carry stat and winner
    ("tie" when nobody won).
    """
    event_type: LogEventType
    seat: Seat | None = None
    name: str | None = None
    stat: Stat | None = None
    winner: Seat | None = None

    @classmethod
    def join(cls, seat: Seat, name: str) -> LogEvent:
        return cls(event_type=LogEventType.JOIN, seat=seat, name=name)

    @classmethod
    def round(cls, stat: Stat, winner: Seat | None) -> LogEvent:
        return cls(event_type=LogEventType.ROUND, stat=stat, winner=winner)


@dataclass
class RoomState:
    """
    Complete room state at a point in time.

    All state changes go through the reducer. The coordinator swaps in the
    new value after each accepted action, so a rejected action never leaves
    a partial mutation behind.
    """
    room_code: str = ""
    phase: RoomPhase = RoomPhase.WAITING

    # Seats
    players: dict[Seat, str] = field(default_factory=dict)
    connections: dict[Seat, str] = field(default_factory=dict)  # seat -> connection id

    # Match
    turn: Seat | None = None
    deck_p1: list[Card] = field(default_factory=list)
    deck_p2: list[Card] = field(default_factory=list)
    last_round: RoundRecord | None = None
    next_starter: Seat = Seat.P1
    round_count: int = 0
    match_started_at: float | None = None
    winner: Seat | None = None

    log: list[LogEvent] = field(default_factory=list)

    @property
    def occupied_seats(self) -> list[Seat]:
        return [seat for seat in SEAT_ORDER if seat in self.players]

    @property
    def is_full(self) -> bool:
        return len(self.players) == len(SEAT_ORDER)

    @property
    def match_active(self) -> bool:
        return self.phase in {RoomPhase.CHOOSE, RoomPhase.REVEAL}

    def seat_of(self, connection_id: str) -> Seat | None:
        """Get the seat bound to a connection."""
        for seat, bound in self.connections.items():
            if bound == connection_id:
                return seat
        return None

    def deck(self, seat: Seat) -> list[Card]:
        return self.deck_p1 if seat is Seat.P1 else self.deck_p2

    def total_cards(self) -> int:
        return len(self.deck_p1) + len(self.deck_p2)

    def _copy_with(self, **kwargs) -> RoomState:
        """Create a copy with some fields replaced; containers are copied."""
        base = replace(
            self,
            players=dict(self.players),
            connections=dict(self.connections),
            deck_p1=list(self.deck_p1),
            deck_p2=list(self.deck_p2),
            log=list(self.log),
        )
        return replace(base, **kwargs) if kwargs else base
