from __future__ import annotations

from collections.abc import Iterable, Sequence

from chiptracker_backend.engine.errors import SetupValidationError
from chiptracker_backend.engine.models import Blinds, Player, PlayerSetup


def normalize_name(name: str) -> str:
    return name.strip().casefold()


def validate_player_name(name: str, existing: Iterable[str] = ()) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise SetupValidationError("Player names must not be empty.")
    taken = {normalize_name(other) for other in existing}
    if normalize_name(cleaned) in taken:
        raise SetupValidationError(f"A player named {cleaned!r} is already at the table.")
    return cleaned


def validate_buy_in(amount: int) -> int:
    if amount <= 0:
        raise SetupValidationError("Buy-in amount must be greater than 0.")
    return amount


def validate_setup(
    players: Sequence[PlayerSetup],
    *,
    min_players: int = 1,
    max_players: int | None = None,
) -> list[PlayerSetup]:
    """Check a seating list before a game starts and return it with trimmed names.

    ``min_players`` is the caller's policy (the UI asks for three); the floor of
    one player is what dealer rotation needs to stay well defined.
    """
    floor = max(min_players, 1)
    if len(players) < floor:
        raise SetupValidationError(f"At least {floor} players are required.")
    if max_players is not None and len(players) > max_players:
        raise SetupValidationError(f"Maximum {max_players} players allowed.")

    cleaned: list[PlayerSetup] = []
    seen: list[str] = []
    for setup in players:
        name = validate_player_name(setup.name, seen)
        validate_buy_in(setup.buy_in)
        seen.append(name)
        cleaned.append(PlayerSetup(name=name, buy_in=setup.buy_in))
    return cleaned


def validate_blinds(blinds: Blinds) -> Blinds:
    if blinds.small <= 0:
        raise SetupValidationError("Small blind must be greater than 0.")
    if blinds.big <= blinds.small:
        raise SetupValidationError("Big blind must be greater than small blind.")
    return blinds


def validate_anonymous_join(
    name: str,
    buy_in: int,
    *,
    allow_anonymous_join: bool,
    players: Sequence[Player],
) -> str:
    if not name.strip():
        raise SetupValidationError("Please enter your name.")
    validate_buy_in(buy_in)
    if not allow_anonymous_join:
        raise SetupValidationError("This game doesn't allow anonymous joining.")
    return validate_player_name(name, (player.name for player in players))
