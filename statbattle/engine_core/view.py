"""
View Projector - Per-seat masked snapshots of a room.

project_view() is a pure function of (RoomState, Seat). It never mutates
the state, so the order in which views are delivered cannot leak anything.

What a seat sees:
- its own top card, with stats
- the opponent's top card only as {revealed: False}
- deck counts for both sides, never deck order
- the last resolved round (both cards and the winner), identical for
  both seats
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .state import RoomState, RoomPhase, Seat, Card, RoundRecord


@dataclass
class CardView:
    card_id: str
    name: str
    stats: dict[str, int] = field(default_factory=dict)


@dataclass
class TopCardView:
    revealed: bool
    card: CardView | None = None


@dataclass
class TopCards:
    you: TopCardView | None = None
    opponent: TopCardView | None = None


@dataclass
class RoundView:
    stat: str
    cards: dict[str, CardView]  # seat value -> card
    winner: str  # "P1", "P2" or "tie"
    chooser: str


@dataclass
class RoomView:
    """Everything one seat is allowed to know about the room."""
    phase: RoomPhase
    you: Seat
    players: dict[str, str]
    turn: Seat | None
    your_deck_count: int
    opp_deck_count: int
    top_cards: TopCards
    last_round: RoundView | None = None
    round_count: int = 0
    winner: Seat | None = None


def card_view(card: Card) -> CardView:
    return CardView(card_id=card.card_id, name=card.name, stats=dict(card.stats))


def round_view(record: RoundRecord) -> RoundView:
    return RoundView(
        stat=record.stat.value,
        cards={
            Seat.P1.value: card_view(record.card_p1),
            Seat.P2.value: card_view(record.card_p2),
        },
        winner=record.winner.value if record.winner else "tie",
        chooser=record.chooser.value,
    )


def project_view(state: RoomState, seat: Seat) -> RoomView:
    """Build the masked view for one seat."""
    own_deck = state.deck(seat)
    opp_deck = state.deck(seat.other)

    top_cards = TopCards(
        you=TopCardView(revealed=True, card=card_view(own_deck[0])) if own_deck else None,
        opponent=TopCardView(revealed=False) if opp_deck else None,
    )

    return RoomView(
        phase=state.phase,
        you=seat,
        players={s.value: name for s, name in state.players.items()},
        turn=state.turn,
        your_deck_count=len(own_deck),
        opp_deck_count=len(opp_deck),
        top_cards=top_cards,
        last_round=round_view(state.last_round) if state.last_round else None,
        round_count=state.round_count,
        winner=state.winner if state.phase == RoomPhase.GAME_OVER else None,
    )


def project_all(state: RoomState) -> dict[Seat, RoomView]:
    """Views for every seat that currently has a live connection."""
    return {
        seat: project_view(state, seat)
        for seat in state.occupied_seats
        if seat in state.connections
    }
