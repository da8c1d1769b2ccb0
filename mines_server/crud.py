from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc, func, update
from typing import List
import logging

from mines_server.exceptions import ConcurrentUpdateError, GameStoreError
from mines_server.models.schema_models import GameSchema
from mines_server.models.schemas import Game
from uuid import UUID


class UpdateData:
    @staticmethod
    async def update_game_data(game: GameSchema, session: AsyncSession) -> int:
        """Write the mutable part of a game if nobody changed it since it was read

        Args:
            game (GameSchema): Game carrying the revision it was read at
            session (AsyncSession): AsyncSession object to interact with database

        Raises:
            ConcurrentUpdateError: The stored revision differs or the stored game is finished
            GameStoreError: The database failed

        Returns:
            int: New revision of the game
        """
        async with session:
            try:
                stmt = (
                    update(Game)
                    .where(Game.game_id == game.game_id)
                    .where(Game.revision == game.revision)
                    .where(Game.finished.is_(False))
                    .values(
                        opened_cells=list(game.opened_cells),
                        finished=game.finished,
                        result=game.result.value if game.result is not None else None,
                        payout_multiplier=game.payout_multiplier,
                        revision=game.revision + 1,
                    )
                )
                result = await session.execute(stmt)
                await session.commit()
            except Exception as e:
                logging.error(f"Failed to update game data: {e}")
                raise GameStoreError("failed to update game") from e

            if result.rowcount != 1:
                raise ConcurrentUpdateError(f"game {game.game_id} changed since revision {game.revision}")
            return game.revision + 1


class ReadData:
    @staticmethod
    async def read_game_data(game_id: UUID, session: AsyncSession) -> GameSchema | None:
        """Read one game from database

        Args:
            game_id (UUID): To identify the game

        Returns:
            GameSchema: Game data, None if there is no such game
        """
        async with session:
            try:
                stmt = select(Game).where(Game.game_id == game_id)
                result = await session.execute(stmt)
                result = result.scalars().first()
            except Exception as e:
                logging.error(f"Failed to read game data: {e}")
                raise GameStoreError("failed to read game") from e

            if result is None:
                return None
            return GameSchema.model_validate(result)

    @staticmethod
    async def read_recent_games(limit: int, session: AsyncSession) -> List[GameSchema]:
        """Read the latest games, most recent first

        Args:
            limit (int): Maximum number of games

        Returns:
            List[GameSchema]: Games ordered by descending nonce
        """
        async with session:
            try:
                stmt = select(Game).order_by(desc(Game.nonce)).limit(limit)
                result = await session.execute(stmt)
                games = result.scalars().all()
            except Exception as e:
                logging.error(f"Failed to read recent games: {e}")
                raise GameStoreError("failed to read history") from e
            return [GameSchema.model_validate(game) for game in games]

    @staticmethod
    async def read_last_nonce(session: AsyncSession) -> int:
        async with session:
            try:
                result = await session.execute(select(func.max(Game.nonce)))
                last_nonce = result.scalar()
            except Exception as e:
                logging.error(f"Failed to read last nonce: {e}")
                raise GameStoreError("failed to read last nonce") from e
            return last_nonce or 0


class CreateData:
    @staticmethod
    async def create_game_data(game: GameSchema, session: AsyncSession):
        """Create game data

        Args:
            game (GameSchema): New game with its committed bomb positions
            session (AsyncSession): AsyncSession object to interact with database
        """
        async with session:
            try:
                new_game = Game(
                    game_id=game.game_id,
                    created_at=game.created_at,
                    size=game.size,
                    bomb_count=game.bomb_count,
                    total_cells=game.total_cells,
                    client_seed=game.client_seed,
                    server_seed=game.server_seed,
                    nonce=game.nonce,
                    bet=game.bet,
                    bomb_positions=list(game.bomb_positions),
                    opened_cells=list(game.opened_cells),
                    finished=game.finished,
                    result=game.result.value if game.result is not None else None,
                    payout_multiplier=game.payout_multiplier,
                    revision=game.revision,
                )
                session.add(new_game)
                await session.commit()
            except Exception as e:
                logging.error(f"Failed to create game data: {e}")
                raise GameStoreError("failed to create game") from e
