from __future__ import annotations

import secrets
from typing import Protocol
from uuid import uuid4


INVITE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


class IdGenerator(Protocol):
    def game_id(self) -> str: ...

    def invite_code(self) -> str: ...

    def player_id(self) -> str: ...


class UuidIdGenerator:
    """Default identity source: random uuids for ids, short codes for invites."""

    def __init__(self, invite_code_length: int = 6) -> None:
        self._invite_code_length = invite_code_length

    def game_id(self) -> str:
        return f"game_{uuid4().hex[:12]}"

    def invite_code(self) -> str:
        return "".join(secrets.choice(INVITE_ALPHABET) for _ in range(self._invite_code_length))

    def player_id(self) -> str:
        return f"plr_{uuid4().hex[:12]}"


class SequentialIdGenerator:
    """Deterministic ids, handy for replaying a session or for tests."""

    def __init__(self, prefix: str = "") -> None:
        self._prefix = prefix
        self._games = 0
        self._invites = 0
        self._players = 0

    def game_id(self) -> str:
        self._games += 1
        return f"{self._prefix}game_{self._games}"

    def invite_code(self) -> str:
        self._invites += 1
        return f"{self._prefix}INV{self._invites:03d}"

    def player_id(self) -> str:
        self._players += 1
        return f"{self._prefix}p{self._players}"
