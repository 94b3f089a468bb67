from __future__ import annotations

from chiptracker_backend.engine.models import GameState
from chiptracker_backend.repo.base import GameRepository


class InMemoryGameRepository(GameRepository):
    def __init__(self) -> None:
        self._games: dict[str, str] = {}

    def save(self, state: GameState) -> None:
        if state.game_id is None:
            raise ValueError("cannot save a game without a game_id")
        # Stored as JSON so callers never share a live object with the repository.
        self._games[state.game_id] = state.model_dump_json()

    def get(self, game_id: str) -> GameState:
        if game_id not in self._games:
            raise KeyError(f"game {game_id} not found")
        return GameState.model_validate_json(self._games[game_id])

    def get_by_invite_code(self, invite_code: str) -> GameState:
        code = invite_code.strip().upper()
        for game in self.all():
            if game.invite_code is not None and game.invite_code.upper() == code:
                return game
        raise KeyError(f"invite code {invite_code} not found")

    def delete(self, game_id: str) -> None:
        self._games.pop(game_id, None)

    def all(self) -> list[GameState]:
        return [GameState.model_validate_json(raw) for raw in self._games.values()]
