from __future__ import annotations

from chiptracker_backend.engine.models import GameState


def chips_on_table(state: GameState) -> int:
    """Stacks plus everything committed this hand."""
    return sum(player.current_stack + player.total_bet for player in state.players)


def check_invariants(state: GameState) -> dict[str, bool]:
    player_ids = [player.id for player in state.players]
    return {
        "non_negative_stacks": all(player.current_stack >= 0 for player in state.players),
        "total_bet_consistency": all(
            player.total_bet == sum(bet.amount for bet in player.bets)
            for player in state.players
        ),
        "dealer_index_valid": state.dealer_index is None
        or 0 <= state.dealer_index < len(state.players),
        "winner_known": state.winner is None or state.winner in player_ids,
        "unique_player_ids": len(set(player_ids)) == len(player_ids),
        "unique_player_names": len({player.name.casefold() for player in state.players})
        == len(state.players),
    }
