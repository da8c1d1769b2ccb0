"""Game Store implementations.

The engine only talks to the GameStore interface:
get(id), append(game), update(game), list(limit) and last_nonce().
Records are append-only: games are never deleted.
"""

from typing import Dict, List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from mines_server.crud import CreateData, ReadData, UpdateData
from mines_server.exceptions import ConcurrentUpdateError, GameStoreError
from mines_server.models.schema_models import GameSchema
from mines_server.models.schemas import Base


class GameStore:
    async def setup(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def get(self, game_id: UUID) -> GameSchema | None:
        raise NotImplementedError

    async def append(self, game: GameSchema) -> None:
        raise NotImplementedError

    async def update(self, game: GameSchema) -> None:
        """Persist a mutated game and bump game.revision.

        Raises ConcurrentUpdateError when the stored record is finished or no
        longer at game.revision.
        """
        raise NotImplementedError

    async def list(self, limit: int) -> List[GameSchema]:
        raise NotImplementedError

    async def last_nonce(self) -> int:
        raise NotImplementedError


class InMemoryGameStore(GameStore):
    def __init__(self):
        self.games: Dict[UUID, GameSchema] = {}
        self.order: List[UUID] = []

    async def get(self, game_id: UUID) -> GameSchema | None:
        game = self.games.get(game_id)
        return game.model_copy(deep=True) if game is not None else None

    async def append(self, game: GameSchema) -> None:
        if game.game_id in self.games:
            raise GameStoreError(f"duplicate game id {game.game_id}")
        if any(stored.nonce == game.nonce for stored in self.games.values()):
            raise GameStoreError(f"duplicate nonce {game.nonce}")
        self.games[game.game_id] = game.model_copy(deep=True)
        self.order.append(game.game_id)

    async def update(self, game: GameSchema) -> None:
        stored = self.games.get(game.game_id)
        if stored is None or stored.finished or stored.revision != game.revision:
            raise ConcurrentUpdateError(f"game {game.game_id} changed since revision {game.revision}")
        game.revision += 1
        self.games[game.game_id] = game.model_copy(deep=True)

    async def list(self, limit: int) -> List[GameSchema]:
        recent = self.order[::-1][:limit]
        return [self.games[game_id].model_copy(deep=True) for game_id in recent]

    async def last_nonce(self) -> int:
        return max((game.nonce for game in self.games.values()), default=0)


class SqlGameStore(GameStore):
    """GameStore on a SQLAlchemy async engine (sqlite+aiosqlite or postgresql+asyncpg)."""

    def __init__(self, engine: AsyncEngine, Session: async_sessionmaker | None = None):
        self.engine = engine
        self.Session = Session or async_sessionmaker(
            autocommit=False,
            class_=AsyncSession,
            autoflush=True,
            expire_on_commit=False,
            bind=engine,
        )

    async def setup(self) -> None:
        """Create table if not exists"""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            raise GameStoreError("failed to create tables") from e

    async def close(self) -> None:
        await self.engine.dispose()

    async def get(self, game_id: UUID) -> GameSchema | None:
        async with self.Session() as session:
            return await ReadData.read_game_data(game_id, session)

    async def append(self, game: GameSchema) -> None:
        async with self.Session() as session:
            await CreateData.create_game_data(game, session)

    async def update(self, game: GameSchema) -> None:
        async with self.Session() as session:
            game.revision = await UpdateData.update_game_data(game, session)

    async def list(self, limit: int) -> List[GameSchema]:
        async with self.Session() as session:
            return await ReadData.read_recent_games(limit, session)

    async def last_nonce(self) -> int:
        async with self.Session() as session:
            return await ReadData.read_last_nonce(session)
