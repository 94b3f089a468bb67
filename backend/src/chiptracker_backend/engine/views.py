"""Read-only facts derived from a ``GameState`` snapshot.

Nothing here mutates state or calls back into the command layer; the UI (or
a policy) reads these and decides which command to issue next.
"""

from __future__ import annotations

from collections.abc import Sequence

from chiptracker_backend.engine.models import (
    Blinds,
    GameState,
    Player,
    Round,
    SeatRole,
    SeatView,
    TableView,
)
from chiptracker_backend.utils.hashing import stable_hash


ROUND_LABELS = {
    Round.PREFLOP: "Pre-flop",
    Round.FLOP: "Flop",
    Round.TURN: "Turn",
    Round.RIVER: "River",
    Round.SHOWDOWN: "Showdown",
}

ROUND_INSTRUCTIONS = (
    "Pre-flop betting: Small blind ({small_name}) bet {small}, "
    "Big blind ({big_name}) bet {big}. Players must call, raise, or fold.",
    "Flop: First three community cards are dealt. Continue betting round.",
    "Turn: Fourth community card is dealt. Continue betting round.",
    "River: Final community card is dealt. Final betting round.",
    "Showdown: All players reveal their hands. Select the winner to award the pot.",
)

COMMON_BLIND_LEVELS = (
    Blinds(small=1, big=2),
    Blinds(small=2, big=5),
    Blinds(small=5, big=10),
    Blinds(small=10, big=20),
    Blinds(small=25, big=50),
)


def format_currency(amount: int) -> str:
    return f"${amount}"


def total_pot(players: Sequence[Player]) -> int:
    return sum(player.total_bet for player in players)


def round_label(round_number: int) -> str:
    try:
        return ROUND_LABELS[Round(round_number)]
    except ValueError:
        return f"Round {round_number}"


def stage_progress(round_number: int) -> int:
    return max(0, min(round_number * 20, 100))


def active_players(state: GameState) -> list[Player]:
    return [player for player in state.players if not player.folded]


def current_round_contribution(player: Player, round_number: int) -> int:
    return sum(bet.amount for bet in player.bets if bet.round == round_number)


def highest_current_round_bet(state: GameState, players: Sequence[Player]) -> int:
    return max(
        (current_round_contribution(player, state.current_round) for player in players),
        default=0,
    )


def is_round_complete(state: GameState, players: Sequence[Player]) -> bool:
    """True once every active player has matched the highest bet of the round.

    A set winner or a single remaining player also completes the round. All-in
    players (stack 0) cannot add chips and so never hold the round open.
    """
    if len(players) <= 1 or state.winner is not None:
        return True
    highest = highest_current_round_bet(state, players)
    return all(
        player.current_stack == 0
        or current_round_contribution(player, state.current_round) == highest
        for player in players
    )


def call_amount(player: Player, highest_round_bet: int, round_number: int) -> int:
    return max(0, highest_round_bet - current_round_contribution(player, round_number))


def min_raise_amount(call: int, big_blind: int) -> int:
    return call + big_blind


def suggested_bets(player: Player, big_blind: int) -> list[int]:
    options: list[int] = []
    for amount in (big_blind * 2, big_blind * 4, player.current_stack):
        if 0 < amount <= player.current_stack and amount not in options:
            options.append(amount)
    return options


def role_of(player_index: int, dealer_index: int | None, player_count: int) -> SeatRole:
    """Seat role by table position.

    Blinds sit one and two seats left of the dealer. With fewer than four
    players some roles coincide and the earlier role in dealer/SB/BB/UTG order
    wins. Heads-up the dealer posts the small blind, so the other seat is BB.
    """
    if dealer_index is None or player_count <= 0:
        return SeatRole.NONE
    offset = (player_index - dealer_index) % player_count
    if offset == 0:
        return SeatRole.DEALER
    if player_count == 2:
        return SeatRole.BIG_BLIND
    if offset == 1:
        return SeatRole.SMALL_BLIND
    if offset == 2:
        return SeatRole.BIG_BLIND
    if offset == 3:
        return SeatRole.UNDER_THE_GUN
    return SeatRole.NONE


def blind_seat_indices(state: GameState) -> tuple[int, int] | None:
    """(small blind, big blind) seat indices, or None before a dealer is set."""
    if state.dealer_index is None or not state.players:
        return None
    count = len(state.players)
    if count == 2:
        return state.dealer_index, (state.dealer_index + 1) % count
    return (state.dealer_index + 1) % count, (state.dealer_index + 2) % count


def next_active_index(players: Sequence[Player], index: int) -> int:
    if not players:
        return 0
    return (index + 1) % len(players)


def first_to_act_index(state: GameState) -> int | None:
    """Seat index of the first non-folded player to act this round.

    Pre-flop that is the seat after the big blind (UTG); on later rounds the
    first seat left of the dealer.
    """
    blind_seats = blind_seat_indices(state)
    if blind_seats is None:
        return None
    count = len(state.players)
    if state.current_round == Round.PREFLOP:
        start = blind_seats[1] + 1
    else:
        start = state.dealer_index + 1
    for step in range(count):
        index = (start + step) % count
        if not state.players[index].folded:
            return index
    return None


def dealer_name(state: GameState) -> str | None:
    if state.dealer_index is None or not 0 <= state.dealer_index < len(state.players):
        return None
    return state.players[state.dealer_index].name


def winner_name(state: GameState) -> str | None:
    if state.winner is None:
        return None
    for player in state.players:
        if player.id == state.winner:
            return player.name
    return None


def next_action_instructions(state: GameState, players: Sequence[Player]) -> str:
    if state.winner is not None:
        return "Hand complete! Click 'New Hand' to start the next hand."
    if len(players) <= 1:
        return "Only one player remains! End the hand and select the winner."
    blind_seats = blind_seat_indices(state)
    if blind_seats is None:
        return "Start the game by selecting a dealer."
    if state.current_round < Round.PREFLOP:
        return "Continue the current betting round."

    index = min(state.current_round, Round.SHOWDOWN) - 1
    small_index, big_index = blind_seats
    return ROUND_INSTRUCTIONS[index].format(
        small_name=state.players[small_index].name,
        big_name=state.players[big_index].name,
        small=format_currency(state.blinds.small),
        big=format_currency(state.blinds.big),
    )


def next_action_text(state: GameState, active_player: Player | None) -> str:
    if state.winner is not None:
        return "Start new hand"
    if state.current_round >= Round.SHOWDOWN:
        return "Select Winner"
    if active_player is not None:
        return f"{active_player.name}'s turn"
    return "Next player's turn"


def current_action_description(state: GameState, active_player: Player | None) -> str:
    if state.winner is not None:
        return "Hand complete. Start a new hand."
    if active_player is None:
        return "No active players. Start a new hand."
    return f"{active_player.name}'s turn to bet"


def build_table_view(state: GameState) -> TableView:
    remaining = active_players(state)
    highest = highest_current_round_bet(state, remaining)
    first_index = first_to_act_index(state)
    first_player = state.players[first_index] if first_index is not None else None
    seats = [
        SeatView(
            index=index,
            player_id=player.id,
            name=player.name,
            role=role_of(index, state.dealer_index, len(state.players)),
            current_stack=player.current_stack,
            total_bet=player.total_bet,
            round_contribution=current_round_contribution(player, state.current_round),
            call_amount=0 if player.folded else call_amount(player, highest, state.current_round),
            folded=player.folded,
            is_winner=state.winner == player.id,
        )
        for index, player in enumerate(state.players)
    ]
    first_call = call_amount(first_player, highest, state.current_round) if first_player else 0
    return TableView(
        game_id=state.game_id,
        invite_code=state.invite_code,
        state=state,
        seats=seats,
        pot=total_pot(state.players),
        round_label=round_label(state.current_round),
        stage_progress=stage_progress(state.current_round),
        round_complete=is_round_complete(state, remaining),
        active_player_ids=[player.id for player in remaining],
        first_to_act_id=first_player.id if first_player else None,
        highest_round_bet=highest,
        min_raise=min_raise_amount(first_call, state.blinds.big),
        instructions=next_action_instructions(state, remaining),
        next_action_text=next_action_text(state, first_player),
        state_hash=stable_hash(state),
    )
