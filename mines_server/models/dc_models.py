from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class GameResultModel(str, Enum):
    lost = "lost"  # a bomb was revealed
    cashed = "cashed"  # the player settled before hitting a bomb


class StartGameModel(BaseModel):
    size: int
    bomb_count: int
    client_seed: str
    bet: float = 0.0


class StartGameResponseModel(BaseModel):
    game_id: UUID
    server_seed_public: Optional[str] = None
    server_seed_hash: str
    nonce: int


class RevealModel(BaseModel):
    game_id: UUID
    index: int


class RevealResponseModel(BaseModel):
    is_bomb: bool
    opened_cells: List[int]
    multiplier: float
    finished: bool
    result: Optional[GameResultModel] = None
    bomb_positions: Optional[List[int]] = None


class CashoutModel(BaseModel):
    game_id: UUID


class CashoutResponseModel(BaseModel):
    success: bool = True
    payout_multiplier: float
    opened_cells: List[int]


class GameSummaryModel(BaseModel):
    game_id: UUID
    created_at: datetime
    size: int
    bomb_count: int
    bet: float
    result: Optional[GameResultModel] = None
    nonce: int

    class Config:
        from_attributes = True


class VerifyModel(BaseModel):
    game_id: UUID
    created_at: datetime
    size: int
    bomb_count: int
    total_cells: int
    client_seed: str
    server_seed: Optional[str] = None
    server_seed_hash: str
    nonce: int
    bomb_positions: Optional[List[int]] = None
    opened_cells: List[int]
    finished: bool
    result: Optional[GameResultModel] = None
    payout_multiplier: Optional[float] = None
    bet: float
