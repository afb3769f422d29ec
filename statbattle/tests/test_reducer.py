"""
Tests for the reducer (room state machine).

Tests:
- Seating and capacity
- Phase transitions
- Action validation
- Round resolution, turn order and game over
- Rematches
"""

import random

import pytest

from ..engine_core.state import RoomState, RoomPhase, Seat, Stat, LogEventType
from ..engine_core.action import Action, ErrorCode
from ..engine_core.reducer import Reducer, apply_action
from .conftest import P1_CONN, P2_CONN, make_card


def join_events(state):
    return [e for e in state.log if e.event_type == LogEventType.JOIN]


def round_events(state):
    return [e for e in state.log if e.event_type == LogEventType.ROUND]


class TestJoin:
    """Tests for seating."""

    def test_first_join_takes_p1(self, reducer):
        result = reducer.apply(RoomState(), Action.join(P1_CONN, "Alice"))

        assert result.success
        state = result.new_state
        assert state.players == {Seat.P1: "Alice"}
        assert state.seat_of(P1_CONN) == Seat.P1
        assert state.phase == RoomPhase.WAITING
        assert join_events(state)[0].name == "Alice"

    def test_second_join_makes_room_ready(self, ready_state):
        assert ready_state.players == {Seat.P1: "Alice", Seat.P2: "Bob"}
        assert ready_state.phase == RoomPhase.READY
        assert len(join_events(ready_state)) == 2

    def test_blank_name_gets_default_label(self, reducer):
        state = reducer.apply(RoomState(), Action.join(P1_CONN, "   ")).new_state
        state = reducer.apply(state, Action.join(P2_CONN, "")).new_state

        assert state.players == {Seat.P1: "Player 1", Seat.P2: "Player 2"}

    def test_name_is_stripped(self, reducer):
        state = reducer.apply(RoomState(), Action.join(P1_CONN, "  Alice ")).new_state
        assert state.players[Seat.P1] == "Alice"

    def test_rejoin_refreshes_name_only(self, reducer, ready_state):
        result = reducer.apply(ready_state, Action.join(P1_CONN, "Alicia"))

        assert result.success
        state = result.new_state
        assert state.players[Seat.P1] == "Alicia"
        assert state.seat_of(P1_CONN) == Seat.P1
        assert len(state.connections) == 2
        assert len(join_events(state)) == 2
        assert state.phase == RoomPhase.READY

    def test_third_join_rejected(self, reducer, ready_state):
        result = reducer.apply(ready_state, Action.join("conn-3", "Carol"))

        assert not result.success
        assert result.error_code == ErrorCode.ROOM_FULL.value
        assert ready_state.players == {Seat.P1: "Alice", Seat.P2: "Bob"}
        assert "conn-3" not in ready_state.connections.values()

    def test_vacated_p1_is_refilled_first(self, reducer, ready_state):
        state = reducer.apply(ready_state, Action.leave(P1_CONN)).new_state
        state = reducer.apply(state, Action.join("conn-3", "Carol")).new_state

        assert state.players[Seat.P1] == "Carol"
        assert state.seat_of("conn-3") == Seat.P1


class TestLeave:
    """Tests for leaving."""

    def test_leave_vacates_seat(self, reducer, ready_state):
        result = reducer.apply(ready_state, Action.leave(P2_CONN))

        assert result.success
        state = result.new_state
        assert state.players == {Seat.P1: "Alice"}
        assert state.seat_of(P2_CONN) is None
        assert state.phase == RoomPhase.WAITING

    def test_leave_when_unseated_is_noop(self, reducer, ready_state):
        result = reducer.apply(ready_state, Action.leave("stranger"))

        assert result.success
        assert not result.changed

    def test_leave_mid_match_abandons_it(self, reducer, dealt_state):
        state = reducer.apply(dealt_state, Action.choose_stat(P1_CONN, "speed")).new_state

        state = reducer.apply(state, Action.leave(P1_CONN)).new_state

        assert state.phase == RoomPhase.WAITING
        assert state.turn is None
        assert state.deck_p1 == [] and state.deck_p2 == []
        assert state.last_round is None

    def test_leave_after_game_over_keeps_game_over(self, reducer, dealt_state):
        state = dealt_state._copy_with(phase=RoomPhase.GAME_OVER, turn=None, winner=Seat.P1)

        state = reducer.apply(state, Action.leave(P2_CONN)).new_state
        assert state.phase == RoomPhase.GAME_OVER

        state = reducer.apply(state, Action.join("conn-3", "Carol")).new_state
        assert state.phase == RoomPhase.GAME_OVER
        assert state.players[Seat.P2] == "Carol"


class TestStart:
    """Tests for starting a match."""

    def test_start_deals_and_sets_turn(self, reducer, ready_state, catalog):
        result = reducer.apply(ready_state, Action.start(P2_CONN))

        assert result.success
        state = result.new_state
        assert state.phase == RoomPhase.CHOOSE
        assert state.turn == Seat.P1
        assert state.next_starter == Seat.P2
        assert len(state.deck_p1) == len(catalog)
        assert len(state.deck_p2) == len(catalog)
        assert state.match_started_at == 1000.0

    def test_start_with_one_player_rejected(self, reducer):
        state = reducer.apply(RoomState(), Action.join(P1_CONN, "Alice")).new_state

        result = reducer.apply(state, Action.start(P1_CONN))

        assert not result.success
        assert result.error_code == ErrorCode.NOT_READY.value

    def test_start_mid_match_rejected(self, reducer, dealt_state):
        result = reducer.apply(dealt_state, Action.start(P1_CONN))

        assert not result.success
        assert result.error_code == ErrorCode.NOT_READY.value

    def test_start_keeps_join_log(self, dealt_state):
        assert len(join_events(dealt_state)) == 2


class TestChooseStat:
    """Tests for round resolution through the reducer."""

    def test_first_round_example(self, reducer, p1_leads_state):
        """Eight cards each; P1 wins the first round -> 9 vs 7."""
        result = reducer.apply(p1_leads_state, Action.choose_stat(P1_CONN, "speed"))

        assert result.success
        state = result.new_state
        assert len(state.deck_p1) == 9
        assert len(state.deck_p2) == 7
        assert state.turn == Seat.P1
        rounds = round_events(state)
        assert len(rounds) == 1
        assert rounds[0].winner == Seat.P1
        assert rounds[0].stat == Stat.SPEED
        assert state.last_round.winner == Seat.P1
        assert state.round_count == 1

    def test_loser_does_not_get_turn(self, reducer, p1_leads_state):
        # P1 leads with its slowest-strength card, so strength goes to P2
        result = reducer.apply(p1_leads_state, Action.choose_stat(P1_CONN, "strength"))

        state = result.new_state
        assert state.last_round.winner == Seat.P2
        assert state.turn == Seat.P2

    def test_tie_passes_turn_to_other_seat(self, reducer, dealt_state):
        result = reducer.apply(dealt_state, Action.choose_stat(P1_CONN, "size"))

        state = result.new_state
        assert state.last_round.winner is None
        assert round_events(state)[0].winner is None
        assert state.turn == Seat.P2
        assert len(state.deck_p1) == len(state.deck_p2) == 8

    def test_out_of_turn_rejected(self, reducer, dealt_state):
        result = reducer.apply(dealt_state, Action.choose_stat(P2_CONN, "speed"))

        assert not result.success
        assert result.error_code == ErrorCode.NOT_YOUR_TURN.value

    def test_unknown_stat_rejected(self, reducer, dealt_state):
        result = reducer.apply(dealt_state, Action.choose_stat(P1_CONN, "charisma"))

        assert not result.success
        assert result.error_code == ErrorCode.INVALID_STAT.value

    def test_wrong_phase_rejected(self, reducer, ready_state):
        result = reducer.apply(ready_state, Action.choose_stat(P1_CONN, "speed"))

        assert not result.success
        assert result.error_code == ErrorCode.WRONG_PHASE.value

    def test_unseated_rejected(self, reducer, dealt_state):
        result = reducer.apply(dealt_state, Action.choose_stat("stranger", "speed"))

        assert not result.success
        assert result.error_code == ErrorCode.NOT_SEATED.value

    def test_rejection_leaves_state_untouched(self, reducer, dealt_state):
        snapshot = dealt_state._copy_with()

        for action in [
            Action.choose_stat(P2_CONN, "speed"),
            Action.choose_stat(P1_CONN, "charisma"),
            Action.start(P1_CONN),
            Action.next(P1_CONN),
        ]:
            result = reducer.apply(dealt_state, action)
            assert not result.success
            assert result.new_state is None

        assert dealt_state == snapshot

    def test_last_deck_card_ends_match(self, reducer, dealt_state):
        state = dealt_state._copy_with(
            deck_p1=[make_card(7), make_card(6)],
            deck_p2=[make_card(0)],
        )

        result = reducer.apply(state, Action.choose_stat(P1_CONN, "speed"))

        assert result.success
        assert result.match_ended
        state = result.new_state
        assert state.phase == RoomPhase.GAME_OVER
        assert state.winner == Seat.P1
        assert state.turn is None
        assert state.deck_p2 == []

    def test_choose_after_game_over_rejected(self, reducer, dealt_state):
        state = dealt_state._copy_with(deck_p1=[make_card(7)], deck_p2=[make_card(0)])
        state = reducer.apply(state, Action.choose_stat(P1_CONN, "speed")).new_state

        result = reducer.apply(state, Action.choose_stat(P1_CONN, "speed"))

        assert not result.success
        assert result.error_code == ErrorCode.WRONG_PHASE.value

    def test_dominant_deck_terminates(self, reducer, dealt_state, catalog):
        """Every P1 card is faster than every P2 card: four rounds end it."""
        state = dealt_state._copy_with(deck_p1=catalog[4:], deck_p2=catalog[:4])

        while state.phase == RoomPhase.CHOOSE:
            assert min(len(state.deck_p1), len(state.deck_p2)) > 0
            state = reducer.apply(state, Action.choose_stat(P1_CONN, "speed")).new_state

        assert state.phase == RoomPhase.GAME_OVER
        assert state.round_count == 4
        assert len(state.deck_p1) == 8 and state.deck_p2 == []

    def test_game_over_exactly_when_a_deck_empties(self, reducer, dealt_state):
        rng = random.Random(5)
        connections = {Seat.P1: P1_CONN, Seat.P2: P2_CONN}
        state = dealt_state

        for _ in range(2000):
            if state.phase != RoomPhase.CHOOSE:
                break
            stat = rng.choice(list(Stat)).value
            state = reducer.apply(state, Action.choose_stat(connections[state.turn], stat)).new_state
            assert state.total_cards() == 16
            exhausted = min(len(state.deck_p1), len(state.deck_p2)) == 0
            assert exhausted == (state.phase == RoomPhase.GAME_OVER)


class TestRematch:
    """Tests for consecutive matches."""

    def finish_match(self, reducer, state, connections):
        mover = connections[state.turn]
        state = state._copy_with(deck_p1=[make_card(7)], deck_p2=[make_card(0)])
        # Whoever moves, speed favours P1's card
        return reducer.apply(state, Action.choose_stat(mover, "speed")).new_state

    def test_starter_alternates(self, reducer, ready_state):
        connections = {Seat.P1: P1_CONN, Seat.P2: P2_CONN}
        state = reducer.apply(ready_state, Action.start(P1_CONN)).new_state
        starters = [state.turn]

        for _ in range(3):
            before = state.next_starter
            state = self.finish_match(reducer, state, connections)
            assert state.phase == RoomPhase.GAME_OVER
            state = reducer.apply(state, Action.request_rematch(P2_CONN)).new_state
            assert state.turn == before
            starters.append(state.turn)

        assert starters == [Seat.P1, Seat.P2, Seat.P1, Seat.P2]

    def test_rematch_resets_log_and_last_round(self, reducer, dealt_state):
        connections = {Seat.P1: P1_CONN, Seat.P2: P2_CONN}
        state = self.finish_match(reducer, dealt_state, connections)
        assert state.log

        state = reducer.apply(state, Action.request_rematch(P1_CONN)).new_state

        assert state.phase == RoomPhase.CHOOSE
        assert state.log == []
        assert state.last_round is None
        assert state.winner is None
        assert state.round_count == 0
        assert len(state.deck_p1) == len(state.deck_p2) == 8

    def test_rematch_needs_two_players(self, reducer, dealt_state):
        connections = {Seat.P1: P1_CONN, Seat.P2: P2_CONN}
        state = self.finish_match(reducer, dealt_state, connections)
        state = reducer.apply(state, Action.leave(P2_CONN)).new_state

        result = reducer.apply(state, Action.request_rematch(P1_CONN))

        assert not result.success
        assert result.error_code == ErrorCode.NOT_READY.value

    def test_rematch_mid_match_rejected(self, reducer, dealt_state):
        result = reducer.apply(dealt_state, Action.request_rematch(P1_CONN))
        assert result.error_code == ErrorCode.NOT_READY.value


class TestRevealStep:
    """Tests for the optional REVEAL acknowledgement."""

    @pytest.fixture
    def reveal_reducer(self, catalog, clock):
        return Reducer(catalog=catalog, rng=random.Random(7), clock=clock, reveal_step=True)

    def test_round_enters_reveal_then_next_returns_to_choose(self, reveal_reducer, p1_leads_state):
        state = reveal_reducer.apply(p1_leads_state, Action.choose_stat(P1_CONN, "speed")).new_state
        assert state.phase == RoomPhase.REVEAL

        rejected = reveal_reducer.apply(state, Action.choose_stat(P1_CONN, "speed"))
        assert rejected.error_code == ErrorCode.WRONG_PHASE.value

        state = reveal_reducer.apply(state, Action.next(P2_CONN)).new_state
        assert state.phase == RoomPhase.CHOOSE
        assert state.turn == Seat.P1

    def test_final_round_skips_reveal(self, reveal_reducer, dealt_state):
        state = dealt_state._copy_with(deck_p1=[make_card(7)], deck_p2=[make_card(0)])
        state = reveal_reducer.apply(state, Action.choose_stat(P1_CONN, "speed")).new_state
        assert state.phase == RoomPhase.GAME_OVER

    def test_next_without_reveal_rejected(self, reducer, dealt_state):
        result = reducer.apply(dealt_state, Action.next(P1_CONN))
        assert result.error_code == ErrorCode.WRONG_PHASE.value


def test_apply_action_helper(reducer):
    result = apply_action(reducer, RoomState(), Action.join(P1_CONN, "Alice"))
    assert result.success


def test_empty_catalog_rejected():
    with pytest.raises(ValueError):
        Reducer(catalog=[])
