"""
Animal Cards - The built-in card catalog.

Every card carries the same four stats:
- speed (km/h, top recorded)
- strength (1-100 scale)
- size (1-100 scale)
- intelligence (1-100 scale)

Values are game values, not zoology. The catalog is read-only; each match
deals two full copies of it.
"""

from __future__ import annotations

from ...engine_core.state import Card, Stat


def _card(card_id: str, name: str, speed: int, strength: int, size: int, intelligence: int) -> Card:
    return Card(
        card_id=card_id,
        name=name,
        stats={
            Stat.SPEED.value: speed,
            Stat.STRENGTH.value: strength,
            Stat.SIZE.value: size,
            Stat.INTELLIGENCE.value: intelligence,
        },
    )


# ============================================================================
# Card Collection
# ============================================================================

ANIMAL_CARDS: list[Card] = [
    _card("cheetah", "Cheetah", speed=112, strength=38, size=30, intelligence=44),
    _card("elephant", "African Elephant", speed=40, strength=97, size=96, intelligence=78),
    _card("gorilla", "Gorilla", speed=40, strength=90, size=55, intelligence=82),
    _card("dolphin", "Bottlenose Dolphin", speed=35, strength=42, size=40, intelligence=91),
    _card("tiger", "Bengal Tiger", speed=65, strength=84, size=52, intelligence=57),
    _card("octopus", "Common Octopus", speed=40, strength=25, size=12, intelligence=76),
    _card("blue_whale", "Blue Whale", speed=50, strength=99, size=100, intelligence=63),
    _card("falcon", "Peregrine Falcon", speed=390, strength=15, size=5, intelligence=48),
    _card("crow", "Raven", speed=80, strength=6, size=4, intelligence=85),
    _card("grizzly", "Grizzly Bear", speed=56, strength=93, size=70, intelligence=55),
    _card("hippo", "Hippopotamus", speed=30, strength=88, size=85, intelligence=32),
    _card("wolf", "Grey Wolf", speed=60, strength=50, size=28, intelligence=66),
]


def get_card_by_id(card_id: str) -> Card | None:
    """Look up a card by ID."""
    for card in ANIMAL_CARDS:
        if card.card_id == card_id:
            return card
    return None
