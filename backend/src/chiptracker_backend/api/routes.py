from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from chiptracker_backend.api.deps import game_service
from chiptracker_backend.config import settings
from chiptracker_backend.engine.models import (
    Blinds,
    CommandError,
    CommandResult,
    ErrorCode,
    GameConfig,
    GameState,
    PlayerSetup,
    TableView,
)
from chiptracker_backend.engine.service import CommandName
from chiptracker_backend.engine.views import build_table_view


router = APIRouter(prefix="/api")


def _default_blinds() -> Blinds:
    return Blinds(small=settings.default_small_blind, big=settings.default_big_blind)


class CreateGameRequest(BaseModel):
    players: list[PlayerSetup]
    blinds: Blinds = Field(default_factory=_default_blinds)
    allow_anonymous_join: bool = False


class CreateGameResponse(BaseModel):
    game_id: str
    invite_code: str
    view: TableView


class CommandResponse(BaseModel):
    accepted: bool
    error: CommandError | None = None
    view: TableView


class AmountRequest(BaseModel):
    amount: int


class BuyInRequest(BaseModel):
    amount: int | None = None


class BlindsRequest(BaseModel):
    small: int
    big: int


class DealerRequest(BaseModel):
    player_index: int


class JoinRequest(BaseModel):
    name: str
    buy_in: int = Field(default_factory=lambda: settings.default_buy_in)


class EndGameResponse(BaseModel):
    state: GameState


def _not_found(exc: KeyError) -> HTTPException:
    return HTTPException(status_code=404, detail={"code": "NOT_FOUND", "message": str(exc.args[0])})


def _respond(result: CommandResult) -> CommandResponse:
    return CommandResponse(
        accepted=result.accepted,
        error=result.error,
        view=build_table_view(result.state),
    )


async def _run(game_id: str, command: CommandName, **arguments: Any) -> CommandResponse:
    try:
        result = await game_service.execute(game_id, command, **arguments)
    except KeyError as exc:
        raise _not_found(exc) from exc
    return _respond(result)


@router.post("/games", response_model=CreateGameResponse)
async def create_game(request: CreateGameRequest) -> CreateGameResponse:
    config = GameConfig(
        players=request.players,
        blinds=request.blinds,
        allow_anonymous_join=request.allow_anonymous_join,
    )
    result = await game_service.create_game(config)
    if not result.accepted:
        error = result.error or CommandError(code=ErrorCode.VALIDATION_ERROR, message="Game setup rejected.")
        raise HTTPException(
            status_code=400,
            detail={"code": error.code.value, "message": error.message},
        )
    state = result.state
    return CreateGameResponse(
        game_id=state.game_id or "",
        invite_code=state.invite_code or "",
        view=build_table_view(state),
    )


@router.get("/games/{game_id}/view", response_model=TableView)
async def get_view(game_id: str) -> TableView:
    try:
        return await game_service.get_view(game_id)
    except KeyError as exc:
        raise _not_found(exc) from exc


@router.post("/games/{game_id}/players/{player_id}/bets", response_model=CommandResponse)
async def add_bet(game_id: str, player_id: str, request: AmountRequest) -> CommandResponse:
    return await _run(game_id, CommandName.ADD_BET, player_id=player_id, amount=request.amount)


@router.put("/games/{game_id}/players/{player_id}/current-bet", response_model=CommandResponse)
async def update_current_bet(game_id: str, player_id: str, request: AmountRequest) -> CommandResponse:
    return await _run(
        game_id,
        CommandName.UPDATE_CURRENT_BET,
        player_id=player_id,
        amount=request.amount,
    )


@router.post("/games/{game_id}/players/{player_id}/submit", response_model=CommandResponse)
async def submit_bet(game_id: str, player_id: str) -> CommandResponse:
    return await _run(game_id, CommandName.SUBMIT_BET, player_id=player_id)


@router.post("/games/{game_id}/players/{player_id}/fold", response_model=CommandResponse)
async def fold(game_id: str, player_id: str) -> CommandResponse:
    return await _run(game_id, CommandName.FOLD, player_id=player_id)


@router.post("/games/{game_id}/players/{player_id}/buy-in", response_model=CommandResponse)
async def buy_in(game_id: str, player_id: str, request: BuyInRequest) -> CommandResponse:
    return await _run(game_id, CommandName.BUY_IN, player_id=player_id, amount=request.amount)


@router.post("/games/{game_id}/players/{player_id}/winner", response_model=CommandResponse)
async def mark_winner(game_id: str, player_id: str) -> CommandResponse:
    return await _run(game_id, CommandName.MARK_WINNER, player_id=player_id)


@router.post("/games/{game_id}/next-round", response_model=CommandResponse)
async def next_round(game_id: str) -> CommandResponse:
    return await _run(game_id, CommandName.NEXT_ROUND)


@router.post("/games/{game_id}/blinds/increase", response_model=CommandResponse)
async def increase_blind_level(game_id: str) -> CommandResponse:
    return await _run(game_id, CommandName.INCREASE_BLIND_LEVEL)


@router.put("/games/{game_id}/blinds", response_model=CommandResponse)
async def set_blinds(game_id: str, request: BlindsRequest) -> CommandResponse:
    return await _run(game_id, CommandName.SET_BLINDS, small=request.small, big=request.big)


@router.post("/games/{game_id}/reset-hand", response_model=CommandResponse)
async def reset_hand(game_id: str) -> CommandResponse:
    return await _run(game_id, CommandName.RESET_HAND)


@router.put("/games/{game_id}/dealer", response_model=CommandResponse)
async def set_dealer(game_id: str, request: DealerRequest) -> CommandResponse:
    return await _run(game_id, CommandName.SET_DEALER, player_index=request.player_index)


@router.post("/join/{invite_code}", response_model=CommandResponse)
async def join_game(invite_code: str, request: JoinRequest) -> CommandResponse:
    try:
        result = await game_service.join(invite_code, request.name, request.buy_in)
    except KeyError as exc:
        raise _not_found(exc) from exc
    return _respond(result)


@router.delete("/games/{game_id}", response_model=EndGameResponse)
async def end_game(game_id: str) -> EndGameResponse:
    try:
        result = await game_service.end_game(game_id)
    except KeyError as exc:
        raise _not_found(exc) from exc
    return EndGameResponse(state=result.state)
