from __future__ import annotations

import logging
from collections.abc import Callable

from chiptracker_backend.engine import commands
from chiptracker_backend.engine.errors import CommandRejected
from chiptracker_backend.engine.invariants import check_invariants
from chiptracker_backend.engine.models import CommandResult, GameConfig, GameState
from chiptracker_backend.utils.ids import IdGenerator


logger = logging.getLogger(__name__)

StateHook = Callable[[GameState], None]


class GameStateStore:
    """Owner of one session's ``GameState``.

    Each command runs a pure transition from ``engine.commands``. Accepted
    results replace the held state and go to ``save_hook``; rejections leave
    the state untouched and come back as a ``CommandResult`` carrying the
    error, never as an exception.
    """

    def __init__(
        self,
        ids: IdGenerator,
        *,
        save_hook: StateHook | None = None,
        discard_hook: StateHook | None = None,
        initial_state: GameState | None = None,
        min_players: int = 1,
        max_players: int | None = None,
    ) -> None:
        self._ids = ids
        self._save_hook = save_hook
        self._discard_hook = discard_hook
        self._state = initial_state or GameState()
        self._min_players = min_players
        self._max_players = max_players

    @property
    def state(self) -> GameState:
        return self._state

    def _apply(self, command: str, transition: Callable[[GameState], GameState]) -> CommandResult:
        try:
            new_state = transition(self._state)
        except CommandRejected as exc:
            logger.info(
                "rejected %s for game %s: %s (%s)",
                command,
                self._state.game_id,
                exc.message,
                exc.code.value,
            )
            return CommandResult(accepted=False, error=exc.to_error(), state=self._state)

        if logger.isEnabledFor(logging.DEBUG):
            broken = [name for name, ok in check_invariants(new_state).items() if not ok]
            logger.debug(
                "applied %s to game %s (hand %s, round %s)%s",
                command,
                new_state.game_id,
                new_state.current_hand,
                new_state.current_round,
                f", broken invariants: {broken}" if broken else "",
            )
        self._state = new_state
        if self._save_hook is not None:
            self._save_hook(new_state)
        return CommandResult(accepted=True, state=new_state)

    def start_game(self, config: GameConfig) -> CommandResult:
        result = self._apply(
            "start_game",
            lambda _: commands.start_game(
                config,
                self._ids,
                min_players=self._min_players,
                max_players=self._max_players,
            ),
        )
        if result.accepted:
            logger.info(
                "started game %s with %d players",
                result.state.game_id,
                len(result.state.players),
            )
        return result

    def add_bet(self, player_id: str, amount: int) -> CommandResult:
        return self._apply("add_bet", lambda state: commands.add_bet(state, player_id, amount))

    def update_current_bet(self, player_id: str, amount: int) -> CommandResult:
        return self._apply(
            "update_current_bet",
            lambda state: commands.update_current_bet(state, player_id, amount),
        )

    def submit_bet(self, player_id: str) -> CommandResult:
        return self._apply("submit_bet", lambda state: commands.submit_bet(state, player_id))

    def fold(self, player_id: str) -> CommandResult:
        return self._apply("fold", lambda state: commands.fold(state, player_id))

    def next_round(self) -> CommandResult:
        return self._apply("next_round", commands.next_round)

    def increase_blind_level(self) -> CommandResult:
        return self._apply("increase_blind_level", commands.increase_blind_level)

    def set_blinds(self, small: int, big: int) -> CommandResult:
        return self._apply("set_blinds", lambda state: commands.set_blinds(state, small, big))

    def mark_winner(self, player_id: str) -> CommandResult:
        return self._apply("mark_winner", lambda state: commands.mark_winner(state, player_id))

    def reset_hand(self) -> CommandResult:
        return self._apply("reset_hand", commands.reset_hand)

    def buy_in(self, player_id: str, amount: int | None = None) -> CommandResult:
        return self._apply("buy_in", lambda state: commands.buy_in(state, player_id, amount))

    def set_dealer(self, player_index: int) -> CommandResult:
        return self._apply("set_dealer", lambda state: commands.set_dealer(state, player_index))

    def add_anonymous_player(self, name: str, buy_in: int) -> CommandResult:
        return self._apply(
            "add_anonymous_player",
            lambda state: commands.add_anonymous_player(state, name, buy_in, self._ids),
        )

    def end_game(self) -> CommandResult:
        ended = self._state
        self._state = commands.end_game(ended)
        logger.info("ended game %s", ended.game_id)
        if self._discard_hook is not None:
            self._discard_hook(ended)
        return CommandResult(accepted=True, state=self._state)
