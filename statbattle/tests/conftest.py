"""
Pytest fixtures for Stat Battle tests.
"""

import asyncio
import random

import pytest

from ..engine_core.state import Card, RoomState, RoomPhase, Seat, Stat
from ..engine_core.action import Action
from ..engine_core.reducer import Reducer


P1_CONN = "conn-p1"
P2_CONN = "conn-p2"


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeConnection:
    """Records every envelope sent to it; can be told to fail."""

    def __init__(self, fail: bool = False):
        self.sent: list[dict] = []
        self.fail = fail

    async def send_json(self, data):
        if self.fail:
            raise ConnectionError("connection lost")
        self.sent.append(data)

    def of_type(self, message_type: str) -> list[dict]:
        return [m for m in self.sent if m["type"] == message_type]

    @property
    def last_state(self) -> dict:
        return self.of_type("state")[-1]


class StalledConnection(FakeConnection):
    """A client that stopped reading: every send waits forever."""

    async def send_json(self, data):
        await asyncio.Event().wait()


def make_card(index: int) -> Card:
    """
    Test card: speed rises with index, strength falls, size is always 50
    (every size comparison ties), intelligence rises.
    """
    return Card(
        card_id=f"card_{index}",
        name=f"Card {index}",
        stats={
            Stat.SPEED.value: 10 * (index + 1),
            Stat.STRENGTH.value: 80 - 10 * index,
            Stat.SIZE.value: 50,
            Stat.INTELLIGENCE.value: 3 * index,
        },
    )


@pytest.fixture
def catalog() -> list[Card]:
    """Eight-card catalog."""
    return [make_card(i) for i in range(8)]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def reducer(catalog, clock) -> Reducer:
    return Reducer(catalog=catalog, rng=random.Random(7), clock=clock)


@pytest.fixture
def ready_state(reducer) -> RoomState:
    """Both seats filled, phase READY."""
    state = RoomState(room_code="TEST")
    state = reducer.apply(state, Action.join(P1_CONN, "Alice")).new_state
    state = reducer.apply(state, Action.join(P2_CONN, "Bob")).new_state
    assert state.phase == RoomPhase.READY
    return state


@pytest.fixture
def dealt_state(reducer, ready_state) -> RoomState:
    """Match started, P1 to move."""
    state = reducer.apply(ready_state, Action.start(P1_CONN)).new_state
    assert state.turn == Seat.P1
    return state


@pytest.fixture
def p1_leads_state(dealt_state, catalog) -> RoomState:
    """
    Dealt state with rigged decks: P1 holds cards fastest first, P2 slowest
    first, so P1 wins the first speed comparison.
    """
    by_speed = sorted(catalog, key=lambda c: c.value_of(Stat.SPEED))
    return dealt_state._copy_with(
        deck_p1=list(reversed(by_speed)),
        deck_p2=list(by_speed),
    )
