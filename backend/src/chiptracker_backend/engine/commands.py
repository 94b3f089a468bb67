"""Pure game-state transitions.

Every function takes a ``GameState`` and returns a new one; inputs are never
mutated. Expected misuse (stale ids, disabled features, bad setup) raises a
``CommandRejected`` subclass so the store can hand the prior state back.
"""

from __future__ import annotations

from datetime import datetime, timezone

from chiptracker_backend.engine.errors import (
    NoPlayersError,
    OutOfRangeError,
    SetupValidationError,
    UnknownEntityError,
)
from chiptracker_backend.engine.models import Bet, Blinds, GameConfig, GameState, Player, Round
from chiptracker_backend.engine.validation import (
    validate_anonymous_join,
    validate_blinds,
    validate_setup,
)
from chiptracker_backend.utils.ids import IdGenerator


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def start_game(
    config: GameConfig,
    ids: IdGenerator,
    *,
    min_players: int = 1,
    max_players: int | None = None,
    started_at: str | None = None,
) -> GameState:
    seating = validate_setup(config.players, min_players=min_players, max_players=max_players)
    blinds = validate_blinds(config.blinds)
    players = [
        Player(
            id=ids.player_id(),
            name=setup.name,
            buy_in=setup.buy_in,
            current_stack=setup.buy_in,
        )
        for setup in seating
    ]
    return GameState(
        players=players,
        blinds=blinds,
        current_round=Round.PREFLOP,
        current_hand=1,
        dealer_index=0,
        start_time=started_at or now_iso(),
        game_id=ids.game_id(),
        invite_code=ids.invite_code(),
        allow_anonymous_join=config.allow_anonymous_join,
    )


def _player_index(state: GameState, player_id: str) -> int:
    for index, player in enumerate(state.players):
        if player.id == player_id:
            return index
    raise UnknownEntityError(player_id)


def _with_player(state: GameState, index: int, player: Player) -> GameState:
    players = list(state.players)
    players[index] = player
    return state.model_copy(update={"players": players})


def _clamp_to_stack(player: Player, amount: int) -> int:
    return max(0, min(amount, player.current_stack))


def _commit(player: Player, amount: int, round_number: int) -> Player:
    committed = _clamp_to_stack(player, amount)
    return player.model_copy(
        update={
            "current_stack": player.current_stack - committed,
            "bets": [*player.bets, Bet(round=round_number, amount=committed)],
            "total_bet": player.total_bet + committed,
            "current_bet": None,
        },
    )


def add_bet(state: GameState, player_id: str, amount: int) -> GameState:
    index = _player_index(state, player_id)
    player = state.players[index]
    return _with_player(state, index, _commit(player, amount, state.current_round))


def update_current_bet(state: GameState, player_id: str, amount: int) -> GameState:
    index = _player_index(state, player_id)
    player = state.players[index]
    staged = player.model_copy(update={"current_bet": _clamp_to_stack(player, amount)})
    return _with_player(state, index, staged)


def submit_bet(state: GameState, player_id: str) -> GameState:
    index = _player_index(state, player_id)
    player = state.players[index]
    if not player.current_bet:
        return state
    return _with_player(state, index, _commit(player, player.current_bet, state.current_round))


def fold(state: GameState, player_id: str) -> GameState:
    index = _player_index(state, player_id)
    player = state.players[index]
    if player.folded:
        return state
    return _with_player(state, index, player.model_copy(update={"folded": True, "current_bet": None}))


def next_round(state: GameState) -> GameState:
    # Fold status is kept for the rest of the hand; only reset_hand clears it.
    players = [player.model_copy(update={"current_bet": None}) for player in state.players]
    return state.model_copy(update={"current_round": state.current_round + 1, "players": players})


def increase_blind_level(state: GameState) -> GameState:
    blinds = Blinds(small=state.blinds.small * 2, big=state.blinds.big * 2)
    return state.model_copy(update={"blinds": blinds})


def set_blinds(state: GameState, small: int, big: int) -> GameState:
    blinds = validate_blinds(Blinds(small=max(small, 0), big=max(big, 0)))
    return state.model_copy(update={"blinds": blinds})


def pot_size(state: GameState) -> int:
    return sum(player.total_bet for player in state.players)


def mark_winner(state: GameState, player_id: str) -> GameState:
    index = _player_index(state, player_id)
    if state.winner is not None:
        raise SetupValidationError("A winner was already marked for this hand.")
    winner = state.players[index]
    # Folded players' chips stay in the pot.
    paid = winner.model_copy(update={"current_stack": winner.current_stack + pot_size(state)})
    return _with_player(state, index, paid).model_copy(update={"winner": player_id})


def reset_hand(state: GameState) -> GameState:
    if not state.players:
        raise NoPlayersError()
    dealer = 0 if state.dealer_index is None else (state.dealer_index + 1) % len(state.players)
    players = [
        player.model_copy(update={"bets": [], "total_bet": 0, "current_bet": None, "folded": False})
        for player in state.players
    ]
    return state.model_copy(
        update={
            "players": players,
            "winner": None,
            "current_round": Round.PREFLOP,
            "current_hand": state.current_hand + 1,
            "dealer_index": dealer,
        },
    )


def buy_in(state: GameState, player_id: str, amount: int | None = None) -> GameState:
    index = _player_index(state, player_id)
    player = state.players[index]
    chips = amount if amount is not None and amount > 0 else player.buy_in
    return _with_player(state, index, player.model_copy(update={"current_stack": player.current_stack + chips}))


def set_dealer(state: GameState, player_index: int) -> GameState:
    if not state.players:
        raise NoPlayersError()
    if not 0 <= player_index < len(state.players):
        raise OutOfRangeError(
            f"Dealer index {player_index} outside [0, {len(state.players) - 1}].",
        )
    return state.model_copy(update={"dealer_index": player_index})


def add_anonymous_player(state: GameState, name: str, buy_in_amount: int, ids: IdGenerator) -> GameState:
    cleaned = validate_anonymous_join(
        name,
        buy_in_amount,
        allow_anonymous_join=state.allow_anonymous_join,
        players=state.players,
    )
    player = Player(
        id=ids.player_id(),
        name=cleaned,
        buy_in=buy_in_amount,
        current_stack=buy_in_amount,
        is_anonymous=True,
    )
    return state.model_copy(update={"players": [*state.players, player]})


def end_game(state: GameState, ended_at: str | None = None) -> GameState:
    return GameState(end_time=ended_at or now_iso())
