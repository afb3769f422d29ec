"""
Deck Engine - Dealing, round resolution and the exhaustion check.

Index 0 of a deck is its top card; cards won or tied go to the bottom.
Every function returns new lists and never mutates its inputs, so the
reducer can build the next RoomState without touching the current one.

Conservation: a round moves exactly two cards, so len(p1) + len(p2) is the
same before and after resolve_round().
"""

from __future__ import annotations
from dataclasses import dataclass
import random
from typing import Sequence

from .state import Card, Seat, Stat


@dataclass(frozen=True)
class RoundOutcome:
    """Result of comparing the two top cards."""
    stat: Stat
    card_p1: Card
    card_p2: Card
    winner: Seat | None  # None is a tie
    deck_p1: list[Card]
    deck_p2: list[Card]


def deal(catalog: Sequence[Card], rng: random.Random) -> tuple[list[Card], list[Card]]:
    """
    Deal a fresh match.

    Each seat gets its own copy of the full catalog, shuffled independently.
    random.Random.shuffle is a Fisher-Yates shuffle, so every permutation is
    equally likely.
    """
    deck_p1 = list(catalog)
    deck_p2 = list(catalog)
    rng.shuffle(deck_p1)
    rng.shuffle(deck_p2)
    return deck_p1, deck_p2


def compare(stat: Stat, card_p1: Card, card_p2: Card) -> Seat | None:
    """Strictly greater wins; equal values tie."""
    value_p1 = card_p1.value_of(stat)
    value_p2 = card_p2.value_of(stat)
    if value_p1 > value_p2:
        return Seat.P1
    if value_p2 > value_p1:
        return Seat.P2
    return None


def resolve_round(stat: Stat, deck_p1: Sequence[Card], deck_p2: Sequence[Card]) -> RoundOutcome:
    """
    Play one round.

    The winner puts its own card, then the loser's, on the bottom of its
    deck. On a tie each card returns to the bottom of its own deck.
    """
    if not deck_p1 or not deck_p2:
        raise ValueError("Cannot resolve a round with an empty deck")

    card_p1, rest_p1 = deck_p1[0], list(deck_p1[1:])
    card_p2, rest_p2 = deck_p2[0], list(deck_p2[1:])

    winner = compare(stat, card_p1, card_p2)
    if winner is Seat.P1:
        rest_p1.extend([card_p1, card_p2])
    elif winner is Seat.P2:
        rest_p2.extend([card_p2, card_p1])
    else:
        rest_p1.append(card_p1)
        rest_p2.append(card_p2)

    return RoundOutcome(
        stat=stat,
        card_p1=card_p1,
        card_p2=card_p2,
        winner=winner,
        deck_p1=rest_p1,
        deck_p2=rest_p2,
    )


def match_winner(deck_p1: Sequence[Card], deck_p2: Sequence[Card]) -> Seat | None:
    """
    Return the match winner once a deck is exhausted, else None.

    Cards move in pairs and the total is fixed, so once one deck is empty
    the other holds everything and the counts cannot be equal.
    """
    if deck_p1 and deck_p2:
        return None
    return Seat.P1 if len(deck_p1) > len(deck_p2) else Seat.P2
