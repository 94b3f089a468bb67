from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from enum import Enum
from typing import Any

from chiptracker_backend.engine.models import CommandResult, GameConfig, GameState, TableView
from chiptracker_backend.engine.store import GameStateStore
from chiptracker_backend.engine.views import build_table_view
from chiptracker_backend.policies.policy import TablePolicy
from chiptracker_backend.repo.base import GameRepository
from chiptracker_backend.utils.ids import IdGenerator, UuidIdGenerator


logger = logging.getLogger(__name__)


class CommandName(str, Enum):
    ADD_BET = "add_bet"
    UPDATE_CURRENT_BET = "update_current_bet"
    SUBMIT_BET = "submit_bet"
    FOLD = "fold"
    NEXT_ROUND = "next_round"
    INCREASE_BLIND_LEVEL = "increase_blind_level"
    SET_BLINDS = "set_blinds"
    MARK_WINNER = "mark_winner"
    RESET_HAND = "reset_hand"
    BUY_IN = "buy_in"
    SET_DEALER = "set_dealer"


# Commands after which the table policy may auto-advance the round.
BETTING_COMMANDS = {
    CommandName.ADD_BET,
    CommandName.SUBMIT_BET,
    CommandName.FOLD,
}


class GameSessionService:
    """Hosts one ``GameStateStore`` per running game.

    Stores are loaded from the repository on first use and write back to it
    through their save hook. Commands on the same game are serialized with a
    per-game ``asyncio.Lock``.
    """

    def __init__(
        self,
        repository: GameRepository,
        ids: IdGenerator | None = None,
        policy: TablePolicy | None = None,
        *,
        min_players: int = 1,
        max_players: int | None = None,
    ) -> None:
        self._repo = repository
        self._ids = ids or UuidIdGenerator()
        self._policy = policy or TablePolicy()
        self._min_players = min_players
        self._max_players = max_players
        self._stores: dict[str, GameStateStore] = {}
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def _build_store(self, initial_state: GameState | None = None) -> GameStateStore:
        return GameStateStore(
            self._ids,
            save_hook=self._repo.save,
            discard_hook=self._discard,
            initial_state=initial_state,
            min_players=self._min_players,
            max_players=self._max_players,
        )

    def _discard(self, state: GameState) -> None:
        if state.game_id is None:
            return
        self._repo.delete(state.game_id)
        self._stores.pop(state.game_id, None)

    def _store(self, game_id: str) -> GameStateStore:
        store = self._stores.get(game_id)
        if store is None:
            store = self._build_store(self._repo.get(game_id))
            self._stores[game_id] = store
        return store

    def _lock(self, game_id: str) -> asyncio.Lock:
        # Resolve the game first so unknown ids raise before a lock is created.
        self._store(game_id)
        return self._locks[game_id]

    async def create_game(self, config: GameConfig) -> CommandResult:
        store = self._build_store()
        result = store.start_game(config)
        if not result.accepted:
            return result

        game_id = result.state.game_id
        if game_id is None:
            raise RuntimeError("started game has no id")
        async with self._locks[game_id]:
            self._stores[game_id] = store
            self._policy.on_hand_start(store)
            return CommandResult(accepted=True, state=store.state)

    async def get_state(self, game_id: str) -> GameState:
        async with self._lock(game_id):
            return self._store(game_id).state

    async def get_view(self, game_id: str) -> TableView:
        async with self._lock(game_id):
            return build_table_view(self._store(game_id).state)

    async def execute(self, game_id: str, command: CommandName, **arguments: Any) -> CommandResult:
        async with self._lock(game_id):
            store = self._store(game_id)
            result: CommandResult = getattr(store, command.value)(**arguments)
            if not result.accepted:
                return result

            if command is CommandName.RESET_HAND:
                self._policy.on_hand_start(store)
            elif command in BETTING_COMMANDS:
                self._policy.after_action(store)
            return CommandResult(accepted=True, state=store.state)

    async def join(self, invite_code: str, name: str, buy_in: int) -> CommandResult:
        game_id = self._repo.get_by_invite_code(invite_code).game_id
        if game_id is None:
            raise KeyError(invite_code)
        async with self._lock(game_id):
            result = self._store(game_id).add_anonymous_player(name, buy_in)
            if result.accepted:
                logger.info("player %r joined game %s by invite", name.strip(), game_id)
            return result

    async def end_game(self, game_id: str) -> CommandResult:
        async with self._lock(game_id):
            result = self._store(game_id).end_game()
        self._locks.pop(game_id, None)
        return result
