"""
Animals - The default stat battle deck.

Twelve animals, four stats each. Both seats receive a full copy of the
catalog at every deal.
"""

from .cards import ANIMAL_CARDS, get_card_by_id

__all__ = [
    "ANIMAL_CARDS",
    "get_card_by_id",
]
