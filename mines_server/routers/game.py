import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from mines_server.exceptions import (
    CellAlreadyOpenedError,
    ConcurrentUpdateError,
    GameAlreadyFinishedError,
    GameNotFoundError,
    GameStoreError,
    InvalidIndexError,
    InvalidParametersError,
    MinesError,
)
from mines_server.models.dc_models import (
    CashoutModel,
    CashoutResponseModel,
    GameSummaryModel,
    RevealModel,
    RevealResponseModel,
    StartGameModel,
    StartGameResponseModel,
    VerifyModel,
)
from mines_server.services.mines_service import MinesEngine

game_router = APIRouter(prefix="/api")

ERROR_STATUS = [
    (InvalidParametersError, status.HTTP_400_BAD_REQUEST),
    (InvalidIndexError, status.HTTP_400_BAD_REQUEST),
    (GameNotFoundError, status.HTTP_404_NOT_FOUND),
    (GameAlreadyFinishedError, status.HTTP_409_CONFLICT),
    (CellAlreadyOpenedError, status.HTTP_409_CONFLICT),
    (ConcurrentUpdateError, status.HTTP_409_CONFLICT),
]


def get_mines_engine(request: Request) -> MinesEngine:
    return request.app.state.mines_engine


def to_http_exception(error: MinesError) -> HTTPException:
    """Map an engine error to the HTTP response sent to the client

    Args:
        error (MinesError): Error raised by the engine

    Returns:
        HTTPException: 4xx for caller mistakes, 500 for store failures
    """
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    if isinstance(error, GameStoreError):
        logging.error(f"Game store failure: {error}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="server error",
    )


class GameAPI:
    @staticmethod
    @game_router.post("/start", response_model=StartGameResponseModel)
    async def start_game(
        start: StartGameModel,
        engine: MinesEngine = Depends(get_mines_engine),
    ) -> StartGameResponseModel:
        """Start a game and commit its bomb layout

        Args:
            start (StartGameModel):
                    size: int
                    bomb_count: int
                    client_seed: str
                    bet: float

        Returns:
            StartGameResponseModel: game_id, server seed, its hash and nonce
        """
        try:
            return await engine.start_game(start.size, start.bomb_count, start.client_seed, start.bet)
        except MinesError as e:
            raise to_http_exception(e) from e

    @staticmethod
    @game_router.post("/reveal", response_model=RevealResponseModel)
    async def reveal_cell(
        reveal: RevealModel,
        engine: MinesEngine = Depends(get_mines_engine),
    ) -> RevealResponseModel:
        try:
            return await engine.reveal_cell(reveal.game_id, reveal.index)
        except MinesError as e:
            raise to_http_exception(e) from e

    @staticmethod
    @game_router.post("/cashout", response_model=CashoutResponseModel)
    async def cashout(
        cashout: CashoutModel,
        engine: MinesEngine = Depends(get_mines_engine),
    ) -> CashoutResponseModel:
        try:
            return await engine.cashout(cashout.game_id)
        except MinesError as e:
            raise to_http_exception(e) from e


class HistoryAPI:
    @staticmethod
    @game_router.get("/history", response_model=List[GameSummaryModel])
    async def get_history(
        limit: Optional[int] = Query(default=None, ge=1),
        engine: MinesEngine = Depends(get_mines_engine),
    ) -> List[GameSummaryModel]:
        try:
            return await engine.get_history(limit)
        except MinesError as e:
            raise to_http_exception(e) from e

    @staticmethod
    @game_router.get("/verify/{game_id}", response_model=VerifyModel)
    async def verify_game(
        game_id: UUID,
        engine: MinesEngine = Depends(get_mines_engine),
    ) -> VerifyModel:
        try:
            return await engine.verify_game(game_id)
        except MinesError as e:
            raise to_http_exception(e) from e
