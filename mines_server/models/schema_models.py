from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from mines_server.models.dc_models import GameResultModel


class GameSchema(BaseModel):
    """One game record as persisted by a GameStore."""

    game_id: UUID
    created_at: datetime
    size: int
    bomb_count: int
    total_cells: int
    client_seed: str
    server_seed: str
    nonce: int
    bet: float = 0.0
    bomb_positions: List[int]
    opened_cells: List[int] = Field(default_factory=list)
    finished: bool = False
    result: Optional[GameResultModel] = None
    payout_multiplier: Optional[float] = None
    revision: int = 0

    class Config:
        from_attributes = True
