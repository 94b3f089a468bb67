from __future__ import annotations

import pytest

from chiptracker_backend.engine import commands
from chiptracker_backend.engine.errors import (
    NoPlayersError,
    OutOfRangeError,
    SetupValidationError,
    UnknownEntityError,
)
from chiptracker_backend.engine.invariants import chips_on_table
from chiptracker_backend.engine.models import Bet, Blinds, GameState, PlayerSetup, Round
from chiptracker_backend.engine.views import active_players, is_round_complete, total_pot
from chiptracker_backend.utils.ids import SequentialIdGenerator

from test_utils import by_name, game_config, stacks


@pytest.fixture
def state() -> GameState:
    return commands.start_game(game_config(["A", "B", "C"]), SequentialIdGenerator())


def _basic_hand(state: GameState) -> GameState:
    a, b, c = (player.id for player in state.players)
    state = commands.add_bet(state, a, 1)
    state = commands.add_bet(state, b, 2)
    state = commands.update_current_bet(state, c, 2)
    return commands.submit_bet(state, c)


def test_start_game_seats_players_in_order(state: GameState) -> None:
    assert [player.name for player in state.players] == ["A", "B", "C"]
    assert stacks(state) == [50, 50, 50]
    assert all(player.bets == [] and player.total_bet == 0 for player in state.players)
    assert state.current_round == Round.PREFLOP
    assert state.current_hand == 1
    assert state.dealer_index == 0
    assert state.game_id == "game_1"
    assert state.invite_code == "INV001"
    assert state.start_time


def test_start_game_rejects_duplicate_names_case_insensitively() -> None:
    config = game_config(["Dana", "dana ", "Eli"])
    with pytest.raises(SetupValidationError):
        commands.start_game(config, SequentialIdGenerator())


@pytest.mark.parametrize(
    ("players", "min_players"),
    [
        ([PlayerSetup(name="A", buy_in=50), PlayerSetup(name="  ", buy_in=50)], 1),
        ([PlayerSetup(name="A", buy_in=0), PlayerSetup(name="B", buy_in=50)], 1),
        ([PlayerSetup(name="A", buy_in=50), PlayerSetup(name="B", buy_in=50)], 3),
        ([], 0),
    ],
)
def test_start_game_rejects_invalid_setup(players: list[PlayerSetup], min_players: int) -> None:
    config = game_config([])
    config.players = players
    with pytest.raises(SetupValidationError):
        commands.start_game(config, SequentialIdGenerator(), min_players=min_players)


def test_start_game_rejects_too_many_players() -> None:
    config = game_config([f"P{i}" for i in range(11)])
    with pytest.raises(SetupValidationError):
        commands.start_game(config, SequentialIdGenerator(), max_players=10)


def test_start_game_rejects_big_blind_not_above_small() -> None:
    config = game_config(["A", "B", "C"], blinds=Blinds(small=2, big=2))
    with pytest.raises(SetupValidationError):
        commands.start_game(config, SequentialIdGenerator())


def test_basic_hand_pot_and_stacks(state: GameState) -> None:
    state = _basic_hand(state)

    assert total_pot(state.players) == 5
    assert stacks(state) == [49, 48, 48]
    assert by_name(state, "C").bets == [Bet(round=1, amount=2)]
    assert by_name(state, "C").current_bet is None


def test_fold_reduces_active_set_and_completes_round(state: GameState) -> None:
    state = _basic_hand(state)
    state = commands.fold(state, by_name(state, "A").id)

    remaining = active_players(state)
    assert [player.name for player in remaining] == ["B", "C"]
    assert is_round_complete(state, remaining) is True
    # A's blind stays in the pot.
    assert total_pot(state.players) == 5


def test_winner_payout_and_hand_reset(state: GameState) -> None:
    state = _basic_hand(state)
    state = commands.fold(state, by_name(state, "A").id)
    b_id = by_name(state, "B").id

    state = commands.mark_winner(state, b_id)
    assert by_name(state, "B").current_stack == 53
    assert state.winner == b_id

    state = commands.reset_hand(state)
    assert state.current_hand == 2
    assert state.current_round == Round.PREFLOP
    assert state.winner is None
    assert state.dealer_index == 1
    for player in state.players:
        assert player.bets == []
        assert player.total_bet == 0
        assert player.folded is False
        assert player.current_bet is None
    assert chips_on_table(state) == 150


def test_bet_larger_than_stack_is_clamped_to_all_in(state: GameState) -> None:
    a_id = state.players[0].id
    state = commands.add_bet(state, a_id, 500)

    assert state.players[0].current_stack == 0
    assert state.players[0].total_bet == 50


def test_negative_bet_commits_nothing(state: GameState) -> None:
    a_id = state.players[0].id
    state = commands.add_bet(state, a_id, -5)

    assert state.players[0].current_stack == 50
    assert state.players[0].bets == [Bet(round=1, amount=0)]


def test_update_current_bet_is_clamped_and_moves_no_chips(state: GameState) -> None:
    a_id = state.players[0].id
    staged = commands.update_current_bet(state, a_id, 80)
    assert staged.players[0].current_bet == 50
    assert staged.players[0].current_stack == 50

    staged = commands.update_current_bet(state, a_id, -3)
    assert staged.players[0].current_bet == 0


def test_submit_without_staged_bet_is_noop(state: GameState) -> None:
    a_id = state.players[0].id
    assert commands.submit_bet(state, a_id) is state

    zero = commands.update_current_bet(state, a_id, 0)
    assert commands.submit_bet(zero, a_id) is zero


def test_commands_do_not_mutate_their_input(state: GameState) -> None:
    before = state.model_dump()
    commands.add_bet(state, state.players[0].id, 10)
    commands.next_round(state)
    commands.fold(state, state.players[1].id)
    assert state.model_dump() == before


def test_fold_clears_staged_bet_and_is_idempotent(state: GameState) -> None:
    b_id = state.players[1].id
    state = commands.update_current_bet(state, b_id, 10)
    folded = commands.fold(state, b_id)

    assert folded.players[1].folded is True
    assert folded.players[1].current_bet is None
    assert commands.fold(folded, b_id) is folded


def test_fold_persists_across_round_and_resets_at_hand(state: GameState) -> None:
    b_id = state.players[1].id
    state = commands.fold(state, b_id)
    state = commands.next_round(state)
    assert state.current_round == Round.FLOP
    assert state.players[1].folded is True

    state = commands.reset_hand(state)
    assert state.players[1].folded is False


def test_next_round_clears_staged_bets_but_keeps_history(state: GameState) -> None:
    a_id, b_id = state.players[0].id, state.players[1].id
    state = commands.add_bet(state, a_id, 4)
    state = commands.update_current_bet(state, b_id, 6)
    state = commands.next_round(state)

    assert state.players[0].bets == [Bet(round=1, amount=4)]
    assert state.players[0].total_bet == 4
    assert state.players[1].current_bet is None


def test_next_round_is_not_bounded(state: GameState) -> None:
    for _ in range(6):
        state = commands.next_round(state)
    assert state.current_round == 7


def test_dealer_rotates_modulo_player_count() -> None:
    state = commands.start_game(game_config(["A", "B", "C", "D"]), SequentialIdGenerator())
    state = commands.reset_hand(state)
    assert state.dealer_index == 1
    for _ in range(3):
        state = commands.reset_hand(state)
    assert state.dealer_index == 0
    assert state.current_hand == 5


def test_reset_hand_without_dealer_starts_at_seat_zero(state: GameState) -> None:
    state = state.model_copy(update={"dealer_index": None})
    assert commands.reset_hand(state).dealer_index == 0


def test_reset_hand_and_set_dealer_need_players() -> None:
    with pytest.raises(NoPlayersError):
        commands.reset_hand(GameState())
    with pytest.raises(NoPlayersError):
        commands.set_dealer(GameState(), 0)


def test_increase_blind_level_doubles_both(state: GameState) -> None:
    state = commands.increase_blind_level(state)
    assert state.blinds == Blinds(small=2, big=4)


def test_set_blinds_validates(state: GameState) -> None:
    assert commands.set_blinds(state, 5, 10).blinds == Blinds(small=5, big=10)
    with pytest.raises(SetupValidationError):
        commands.set_blinds(state, 5, 5)
    with pytest.raises(SetupValidationError):
        commands.set_blinds(state, 0, 2)


def test_mark_winner_counts_folded_players_chips(state: GameState) -> None:
    a_id, b_id, c_id = (player.id for player in state.players)
    state = commands.add_bet(state, a_id, 10)
    state = commands.add_bet(state, b_id, 10)
    state = commands.fold(state, a_id)
    state = commands.mark_winner(state, c_id)

    assert state.players[2].current_stack == 70


def test_mark_winner_unknown_player(state: GameState) -> None:
    with pytest.raises(UnknownEntityError):
        commands.mark_winner(state, "ghost")


def test_mark_winner_twice_in_one_hand_is_rejected(state: GameState) -> None:
    state = commands.mark_winner(state, state.players[0].id)
    with pytest.raises(SetupValidationError):
        commands.mark_winner(state, state.players[1].id)


def test_buy_in_defaults_to_reference_amount(state: GameState) -> None:
    a_id = state.players[0].id
    assert commands.buy_in(state, a_id).players[0].current_stack == 100
    assert commands.buy_in(state, a_id, 0).players[0].current_stack == 100
    assert commands.buy_in(state, a_id, 25).players[0].current_stack == 75


def test_set_dealer_bounds(state: GameState) -> None:
    assert commands.set_dealer(state, 2).dealer_index == 2
    with pytest.raises(OutOfRangeError):
        commands.set_dealer(state, 3)
    with pytest.raises(OutOfRangeError):
        commands.set_dealer(state, -1)


def test_anonymous_join_rejected_when_disabled(state: GameState) -> None:
    with pytest.raises(SetupValidationError, match="anonymous"):
        commands.add_anonymous_player(state, "Dana", 50, SequentialIdGenerator("anon-"))


def test_anonymous_join_appends_player() -> None:
    ids = SequentialIdGenerator()
    state = commands.start_game(game_config(["A", "B", "C"], allow_anonymous_join=True), ids)
    state = commands.add_anonymous_player(state, "  Dana ", 40, ids)

    dana = state.players[-1]
    assert dana.name == "Dana"
    assert dana.is_anonymous is True
    assert dana.current_stack == 40
    assert dana.id not in {player.id for player in state.players[:-1]}


@pytest.mark.parametrize(("name", "buy_in"), [("", 50), ("b", 50), ("Dana", 0), ("Dana", -5)])
def test_anonymous_join_validation(name: str, buy_in: int) -> None:
    ids = SequentialIdGenerator()
    state = commands.start_game(game_config(["A", "B", "C"], allow_anonymous_join=True), ids)
    with pytest.raises(SetupValidationError):
        commands.add_anonymous_player(state, name, buy_in, ids)


def test_unknown_player_is_rejected_by_player_commands(state: GameState) -> None:
    for transition in (
        lambda s: commands.add_bet(s, "ghost", 5),
        lambda s: commands.update_current_bet(s, "ghost", 5),
        lambda s: commands.submit_bet(s, "ghost"),
        lambda s: commands.fold(s, "ghost"),
        lambda s: commands.buy_in(s, "ghost"),
    ):
        with pytest.raises(UnknownEntityError):
            transition(state)


def test_end_game_returns_empty_stamped_document(state: GameState) -> None:
    ended = commands.end_game(state, ended_at="2024-01-01T00:00:00+00:00")

    assert ended.players == []
    assert ended.game_id is None
    assert ended.end_time == "2024-01-01T00:00:00+00:00"
    assert ended.blinds == Blinds(small=1, big=2)
