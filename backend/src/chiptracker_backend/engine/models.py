from __future__ import annotations

from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field


ENGINE_VERSION = "0.1.0"


class Round(IntEnum):
    PREFLOP = 1
    FLOP = 2
    TURN = 3
    RIVER = 4
    SHOWDOWN = 5


class SeatRole(str, Enum):
    DEALER = "dealer"
    SMALL_BLIND = "small_blind"
    BIG_BLIND = "big_blind"
    UNDER_THE_GUN = "under_the_gun"
    NONE = "none"


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNKNOWN_PLAYER = "UNKNOWN_PLAYER"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    NO_PLAYERS = "NO_PLAYERS"


class Blinds(BaseModel):
    small: int = Field(default=1, ge=0)
    big: int = Field(default=2, ge=0)

    model_config = ConfigDict(extra="forbid")


class Bet(BaseModel):
    round: int
    amount: int = Field(ge=0)

    model_config = ConfigDict(extra="forbid")


class Player(BaseModel):
    id: str
    name: str
    buy_in: int
    current_stack: int = Field(ge=0)
    bets: list[Bet] = Field(default_factory=list)
    total_bet: int = 0
    current_bet: int | None = None
    folded: bool = False
    is_anonymous: bool = False

    model_config = ConfigDict(extra="forbid")


class GameState(BaseModel):
    players: list[Player] = Field(default_factory=list)
    blinds: Blinds = Field(default_factory=Blinds)
    current_round: int = Round.PREFLOP
    current_hand: int = 1
    dealer_index: int | None = None
    winner: str | None = None
    start_time: str = ""
    end_time: str | None = None
    game_id: str | None = None
    invite_code: str | None = None
    allow_anonymous_join: bool = False

    model_config = ConfigDict(extra="forbid")


class PlayerSetup(BaseModel):
    name: str
    buy_in: int

    model_config = ConfigDict(extra="forbid")


class GameConfig(BaseModel):
    players: list[PlayerSetup]
    blinds: Blinds = Field(default_factory=Blinds)
    allow_anonymous_join: bool = False

    model_config = ConfigDict(extra="forbid")


class CommandError(BaseModel):
    code: ErrorCode
    message: str

    model_config = ConfigDict(extra="forbid")


class CommandResult(BaseModel):
    accepted: bool
    error: CommandError | None = None
    state: GameState

    model_config = ConfigDict(extra="forbid")


class SeatView(BaseModel):
    index: int
    player_id: str
    name: str
    role: SeatRole
    current_stack: int
    total_bet: int
    round_contribution: int
    call_amount: int
    folded: bool
    is_winner: bool

    model_config = ConfigDict(extra="forbid")


class TableView(BaseModel):
    game_id: str | None
    invite_code: str | None
    state: GameState
    seats: list[SeatView]
    pot: int
    round_label: str
    stage_progress: int
    round_complete: bool
    active_player_ids: list[str]
    first_to_act_id: str | None
    highest_round_bet: int
    min_raise: int
    instructions: str
    next_action_text: str
    state_hash: str

    model_config = ConfigDict(extra="forbid")
