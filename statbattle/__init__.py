"""
Stat Battle - Two-player card comparison rooms

Each player holds a shuffled deck of animal cards with numeric stats. The
acting player picks a stat, the top cards are compared and the winner takes
both. The match ends when one deck is empty.

The package provides:
- The authoritative room state machine
- Deck dealing and round resolution
- Per-seat masked views
- A WebSocket coordinator per room
"""

__version__ = "0.1.0"
