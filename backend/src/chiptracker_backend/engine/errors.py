from __future__ import annotations

from chiptracker_backend.engine.models import CommandError, ErrorCode


class CommandRejected(Exception):
    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def to_error(self) -> CommandError:
        return CommandError(code=self.code, message=self.message)


class SetupValidationError(CommandRejected):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.VALIDATION_ERROR, message)


class UnknownEntityError(CommandRejected):
    def __init__(self, player_id: str) -> None:
        super().__init__(ErrorCode.UNKNOWN_PLAYER, f"Player {player_id} is not at this table.")
        self.player_id = player_id


class OutOfRangeError(CommandRejected):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.OUT_OF_RANGE, message)


class NoPlayersError(CommandRejected):
    def __init__(self) -> None:
        super().__init__(ErrorCode.NO_PLAYERS, "The table has no players.")
