from __future__ import annotations

from abc import ABC, abstractmethod

from chiptracker_backend.engine.models import GameState


class GameRepository(ABC):
    @abstractmethod
    def save(self, state: GameState) -> None:
        raise NotImplementedError

    @abstractmethod
    def get(self, game_id: str) -> GameState:
        raise NotImplementedError

    @abstractmethod
    def get_by_invite_code(self, invite_code: str) -> GameState:
        raise NotImplementedError

    @abstractmethod
    def delete(self, game_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def all(self) -> list[GameState]:
        raise NotImplementedError
