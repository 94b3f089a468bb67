from __future__ import annotations

from chiptracker_backend.config import settings
from chiptracker_backend.engine.service import GameSessionService
from chiptracker_backend.policies.policy import TablePolicy
from chiptracker_backend.repo.in_memory import InMemoryGameRepository
from chiptracker_backend.utils.ids import UuidIdGenerator


repository = InMemoryGameRepository()
game_service = GameSessionService(
    repository,
    ids=UuidIdGenerator(invite_code_length=settings.invite_code_length),
    policy=TablePolicy(
        auto_post_blinds=settings.auto_post_blinds,
        auto_advance=settings.auto_advance,
    ),
    min_players=settings.min_players,
    max_players=settings.max_players,
)
