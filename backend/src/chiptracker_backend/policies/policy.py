from __future__ import annotations

import logging
from dataclasses import dataclass

from chiptracker_backend.engine.models import CommandResult, GameState, Round
from chiptracker_backend.engine.store import GameStateStore
from chiptracker_backend.engine.views import active_players, blind_seat_indices, is_round_complete


logger = logging.getLogger(__name__)


@dataclass
class TablePolicy:
    """Optional automation layered on top of the store's commands.

    Both behaviours only issue ordinary commands; turning them off leaves the
    caller in charge of posting blinds and advancing rounds by hand.
    """

    auto_post_blinds: bool = False
    auto_advance: bool = False

    def post_blinds(self, store: GameStateStore) -> list[CommandResult]:
        state = store.state
        if state.current_round != Round.PREFLOP or state.winner is not None:
            return []
        if any(player.bets for player in state.players):
            return []
        seats = blind_seat_indices(state)
        if seats is None or len(state.players) < 2:
            return []

        small_index, big_index = seats
        small_player = state.players[small_index]
        big_player = state.players[big_index]
        logger.debug(
            "posting blinds %s/%s for %s and %s",
            state.blinds.small,
            state.blinds.big,
            small_player.name,
            big_player.name,
        )
        return [
            store.add_bet(small_player.id, state.blinds.small),
            store.add_bet(big_player.id, state.blinds.big),
        ]

    def advance_if_complete(self, store: GameStateStore) -> CommandResult | None:
        state = store.state
        remaining = active_players(state)
        if state.winner is not None or len(remaining) <= 1:
            return None
        if state.current_round >= Round.SHOWDOWN:
            return None
        if not is_round_complete(state, remaining):
            return None
        # Everyone still in must have acted at least once this round.
        if any(
            player.current_stack > 0
            and not any(bet.round == state.current_round for bet in player.bets)
            for player in remaining
        ):
            return None
        if self._big_blind_still_has_option(state):
            return None
        return store.next_round()

    def _big_blind_still_has_option(self, state: GameState) -> bool:
        # A posted big blind is forced, so it does not count as acting pre-flop.
        if not self.auto_post_blinds or state.current_round != Round.PREFLOP:
            return False
        seats = blind_seat_indices(state)
        if seats is None:
            return False
        big_blind = state.players[seats[1]]
        if big_blind.folded or big_blind.current_stack == 0:
            return False
        entries = [bet for bet in big_blind.bets if bet.round == Round.PREFLOP]
        return len(entries) < 2

    def on_hand_start(self, store: GameStateStore) -> list[CommandResult]:
        if not self.auto_post_blinds:
            return []
        return self.post_blinds(store)

    def after_action(self, store: GameStateStore) -> CommandResult | None:
        if not self.auto_advance:
            return None
        return self.advance_if_complete(store)
