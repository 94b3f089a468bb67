from __future__ import annotations

import pytest

from chiptracker_backend.engine.models import Blinds
from chiptracker_backend.engine.service import GameSessionService
from chiptracker_backend.engine.store import GameStateStore
from chiptracker_backend.repo.in_memory import InMemoryGameRepository
from chiptracker_backend.utils.ids import SequentialIdGenerator

from test_utils import game_config


@pytest.fixture
def repository() -> InMemoryGameRepository:
    return InMemoryGameRepository()


@pytest.fixture
def service(repository: InMemoryGameRepository) -> GameSessionService:
    return GameSessionService(repository, ids=SequentialIdGenerator(), min_players=3, max_players=10)


@pytest.fixture
def store() -> GameStateStore:
    """Three players A/B/C with 50 chips each, blinds 1/2, dealer at seat 0."""
    store = GameStateStore(SequentialIdGenerator())
    result = store.start_game(game_config(["A", "B", "C"], blinds=Blinds(small=1, big=2)))
    assert result.accepted
    return store
