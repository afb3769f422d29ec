"""
Reducer - The room state machine.

The reducer is the single point of state mutation.
All state changes must go through Reducer.apply().

Design principles:
- (state, action) -> ActionResult carrying a new state
- Validates before applying; a rejected action returns the reason and
  leaves the given state untouched
- Delegates seating to seats.py and card movement to deck.py

Phases:
    WAITING --second join--> READY --start--> CHOOSE
    CHOOSE --chooseStat--> CHOOSE | REVEAL | GAME_OVER
    REVEAL --next--> CHOOSE
    GAME_OVER | READY --requestRematch--> CHOOSE
    CHOOSE | REVEAL --seat vacated--> WAITING
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random
import time
from typing import Callable, Sequence

from .state import RoomState, RoomPhase, Stat, Card, RoundRecord, LogEvent
from .action import Action, ActionType, ActionResult, ErrorCode
from . import deck, seats

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to room state.

    Stateless apart from its collaborators - all game state is in RoomState.
    The catalog is dealt at every match start; rng and clock are injectable
    for deterministic tests.
    """
    catalog: Sequence[Card]
    rng: random.Random = field(default_factory=random.Random)
    clock: Callable[[], float] = time.time
    reveal_step: bool = False

    def __post_init__(self):
        if not self.catalog:
            raise ValueError("Card catalog must not be empty")

    def apply(self, state: RoomState, action: Action) -> ActionResult:
        """
        Apply an action to the room state.

        Returns ActionResult with new state or error.
        """
        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"Unknown action: {action.action_type}",
                ErrorCode.UNKNOWN,
            )
        return handler(state, action)

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.JOIN: self._handle_join,
            ActionType.START: self._handle_start,
            ActionType.CHOOSE_STAT: self._handle_choose_stat,
            ActionType.NEXT: self._handle_next,
            ActionType.REQUEST_REMATCH: self._handle_request_rematch,
            ActionType.LEAVE: self._handle_leave,
        }
        return handlers.get(action_type)

    # =========================================================================
    # Seating
    # =========================================================================

    def _handle_join(self, state: RoomState, action: Action) -> ActionResult:
        connection_id = action.payload.connection_id
        rejoin = state.seat_of(connection_id) is not None

        seat, new_state = seats.join(state, connection_id, action.payload.name)
        if seat is None:
            return ActionResult.failure("Room is full", ErrorCode.ROOM_FULL)

        new_state = self._settle_phase(new_state)
        name = new_state.players[seat]
        if rejoin:
            return ActionResult.success_with_state(new_state, [f"{seat.value} renamed to {name}"])
        logger.info("room %s: %s joined as %s", state.room_code, name, seat.value)
        return ActionResult.success_with_state(new_state, [f"{name} joined as {seat.value}"])

    def _handle_leave(self, state: RoomState, action: Action) -> ActionResult:
        seat, new_state = seats.leave(state, action.payload.connection_id)
        if seat is None:
            return ActionResult.unchanged()

        abandoned = new_state.match_active
        new_state = self._settle_phase(new_state)
        logger.info(
            "room %s: %s left%s",
            state.room_code,
            seat.value,
            " (match abandoned)" if abandoned else "",
        )
        return ActionResult.success_with_state(new_state, [f"{seat.value} left"])

    def _settle_phase(self, state: RoomState) -> RoomState:
        """
        Re-evaluate the phase after the seats changed.

        A vacancy mid-match abandons it. GAME_OVER is kept until a rematch.
        """
        if state.match_active:
            if state.is_full:
                return state
            return state._copy_with(
                phase=RoomPhase.WAITING,
                turn=None,
                deck_p1=[],
                deck_p2=[],
                last_round=None,
                match_started_at=None,
            )
        if state.phase == RoomPhase.GAME_OVER:
            return state
        return state._copy_with(phase=RoomPhase.READY if state.is_full else RoomPhase.WAITING)

    # =========================================================================
    # Match lifecycle
    # =========================================================================

    def _handle_start(self, state: RoomState, action: Action) -> ActionResult:
        if not state.is_full or state.phase != RoomPhase.READY:
            return ActionResult.failure("Room is not ready to start", ErrorCode.NOT_READY)
        return self._deal_match(state, reset_log=False)

    def _handle_request_rematch(self, state: RoomState, action: Action) -> ActionResult:
        if not state.is_full or state.phase not in {RoomPhase.READY, RoomPhase.GAME_OVER}:
            return ActionResult.failure("Room is not ready for a rematch", ErrorCode.NOT_READY)
        return self._deal_match(state, reset_log=True)

    def _deal_match(self, state: RoomState, reset_log: bool) -> ActionResult:
        deck_p1, deck_p2 = deck.deal(self.catalog, self.rng)
        starter = state.next_starter
        new_state = state._copy_with(
            phase=RoomPhase.CHOOSE,
            turn=starter,
            deck_p1=deck_p1,
            deck_p2=deck_p2,
            last_round=None,
            next_starter=starter.other,
            round_count=0,
            match_started_at=self.clock(),
            winner=None,
        )
        if reset_log:
            new_state.log = []
        logger.info("room %s: match dealt, %s to move", state.room_code, starter.value)
        return ActionResult.success_with_state(new_state, [f"Match started, {starter.value} to move"])

    # =========================================================================
    # Rounds
    # =========================================================================

    def _handle_choose_stat(self, state: RoomState, action: Action) -> ActionResult:
        seat = state.seat_of(action.payload.connection_id)
        if seat is None:
            return ActionResult.failure("Join the room first", ErrorCode.NOT_SEATED)
        if state.phase != RoomPhase.CHOOSE:
            return ActionResult.failure(
                f"Cannot choose a stat during {state.phase.value}",
                ErrorCode.WRONG_PHASE,
            )
        if seat != state.turn:
            return ActionResult.failure(f"Not {seat.value}'s turn", ErrorCode.NOT_YOUR_TURN)

        stat = Stat.parse(action.payload.stat or "")
        if stat is None:
            return ActionResult.failure(
                f"Unknown stat: {action.payload.stat!r}",
                ErrorCode.INVALID_STAT,
            )

        outcome = deck.resolve_round(stat, state.deck_p1, state.deck_p2)
        record = RoundRecord(
            stat=stat,
            card_p1=outcome.card_p1,
            card_p2=outcome.card_p2,
            winner=outcome.winner,
            chooser=seat,
        )
        new_state = state._copy_with(
            deck_p1=outcome.deck_p1,
            deck_p2=outcome.deck_p2,
            last_round=record,
            round_count=state.round_count + 1,
            turn=outcome.winner or seat.other,
        )
        new_state.log.append(LogEvent.round(stat, outcome.winner))
        logger.debug(
            "room %s: round %d on %s won by %s (%d/%d)",
            state.room_code,
            new_state.round_count,
            stat.value,
            outcome.winner.value if outcome.winner else "tie",
            len(new_state.deck_p1),
            len(new_state.deck_p2),
        )

        winner = deck.match_winner(new_state.deck_p1, new_state.deck_p2)
        if winner is not None:
            new_state.phase = RoomPhase.GAME_OVER
            new_state.turn = None
            new_state.winner = winner
            logger.info(
                "room %s: game over, %s wins after %d rounds",
                state.room_code,
                winner.value,
                new_state.round_count,
            )
            return ActionResult.success_with_state(
                new_state, [f"{winner.value} wins the match"], match_ended=True
            )

        new_state.phase = RoomPhase.REVEAL if self.reveal_step else RoomPhase.CHOOSE
        return ActionResult.success_with_state(new_state, [f"Round {new_state.round_count} resolved"])

    def _handle_next(self, state: RoomState, action: Action) -> ActionResult:
        if state.seat_of(action.payload.connection_id) is None:
            return ActionResult.failure("Join the room first", ErrorCode.NOT_SEATED)
        if state.phase != RoomPhase.REVEAL:
            return ActionResult.failure(
                f"Nothing to acknowledge during {state.phase.value}",
                ErrorCode.WRONG_PHASE,
            )
        return ActionResult.success_with_state(state._copy_with(phase=RoomPhase.CHOOSE))

    def match_duration(self, state: RoomState) -> float:
        """Seconds since the current match was dealt."""
        if state.match_started_at is None:
            return 0.0
        return max(0.0, self.clock() - state.match_started_at)


def apply_action(reducer: Reducer, state: RoomState, action: Action) -> ActionResult:
    """Convenience function to apply an action."""
    return reducer.apply(state, action)
