"""
Room Manager - One coordinator per room code.

LIFECYCLE:
1. A connection arrives for a room code
2. The manager returns the existing coordinator, or creates an empty one
   (phase WAITING)
3. The coordinator lives as long as the process; nothing is persisted

Rooms are independent: each coordinator has its own lock and state, so
different rooms never wait on each other.
"""

from __future__ import annotations
import logging
import random
import time
from typing import Callable, Sequence

from .. import config
from ..engine_core.reducer import Reducer
from ..engine_core.state import Card
from ..games.animals import ANIMAL_CARDS
from .coordinator import RoomCoordinator

logger = logging.getLogger(__name__)


class RoomManager:
    """
    Tracks active rooms.

    Responsibilities:
    - Create coordinators on first use of a room code
    - Hand each room its own reducer (own rng, shared catalog)
    - Drop rooms nobody is connected to, on request

    No persistence - rooms are in-memory only.
    """

    def __init__(
        self,
        catalog: Sequence[Card] | None = None,
        reveal_step: bool = False,
        random_seed: int | None = None,
        clock: Callable[[], float] = time.time,
        send_timeout: float = config.SEND_TIMEOUT,
    ):
        self.catalog = list(catalog) if catalog is not None else list(ANIMAL_CARDS)
        self.reveal_step = reveal_step
        self.random_seed = random_seed
        self.clock = clock
        self.send_timeout = send_timeout
        self._rooms: dict[str, RoomCoordinator] = {}

    def _make_reducer(self) -> Reducer:
        return Reducer(
            catalog=self.catalog,
            rng=random.Random(self.random_seed),
            clock=self.clock,
            reveal_step=self.reveal_step,
        )

    def get_or_create(self, room_code: str) -> RoomCoordinator:
        """Get the coordinator for a room code, creating it on first use."""
        coordinator = self._rooms.get(room_code)
        if coordinator is None:
            coordinator = RoomCoordinator(room_code, self._make_reducer(), self.send_timeout)
            self._rooms[room_code] = coordinator
            logger.info("room %s: created", room_code)
        return coordinator

    def get(self, room_code: str) -> RoomCoordinator | None:
        """Get a room by code."""
        return self._rooms.get(room_code)

    def list_rooms(self) -> list[str]:
        """List codes of known rooms."""
        return list(self._rooms.keys())

    def discard_idle_rooms(self) -> list[str]:
        """
        Remove rooms with no live connection.

        Called by operators to free memory; the game flow never needs it.
        """
        idle = [code for code, room in self._rooms.items() if room.connection_count == 0]
        for code in idle:
            del self._rooms[code]
        if idle:
            logger.info("discarded %d idle room(s)", len(idle))
        return idle
