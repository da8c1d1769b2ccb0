from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.schema import Column
from sqlalchemy.types import JSON, Boolean, DateTime, Float, Integer, String, Uuid
from uuid6 import uuid7
from datetime import datetime


class Base(DeclarativeBase):
    pass


class Game(Base):
    __tablename__ = "mines_game"
    game_id = Column(Uuid, primary_key=True, default=uuid7)
    created_at = Column(DateTime, default=datetime.now)
    size = Column(Integer, nullable=False)
    bomb_count = Column(Integer, nullable=False)
    total_cells = Column(Integer, nullable=False)
    client_seed = Column(String, nullable=False)
    server_seed = Column(String, nullable=False)
    nonce = Column(Integer, nullable=False, unique=True, index=True)
    bet = Column(Float, default=0.0)
    bomb_positions = Column(JSON, nullable=False)
    opened_cells = Column(JSON, nullable=False, default=list)
    finished = Column(Boolean, nullable=False, default=False)
    result = Column(String, nullable=True)
    payout_multiplier = Column(Float, nullable=True)
    revision = Column(Integer, nullable=False, default=0)
