"""Mines engine: the five operations of the game over a GameStore.

- Routers call this module; it never touches HTTP.
- Every reveal and cashout holds the game's lock across read, mutate and update.
- Nonce allocation and append happen under one start lock.
"""

import asyncio
import logging
from datetime import datetime
from typing import List
from uuid import UUID

from uuid6 import uuid7

from mines_server.converter import DataConverter
from mines_server.domain.fair_rng import generate_bomb_positions
from mines_server.domain.game_state import (
    cash_out,
    ensure_active,
    open_cell,
    validate_game_parameters,
)
from mines_server.entropy_provider import EntropyProvider, is_fallback_seed
from mines_server.exceptions import GameAlreadyFinishedError, GameNotFoundError
from mines_server.game_lock_manager import GameLockManager
from mines_server.models.dc_models import (
    CashoutResponseModel,
    GameSummaryModel,
    RevealResponseModel,
    StartGameResponseModel,
    VerifyModel,
)
from mines_server.models.schema_models import GameSchema
from mines_server.services.game_store import GameStore

DEFAULT_ENTROPY_TIMEOUT = 5.0
DEFAULT_HISTORY_LIMIT = 200


class MinesEngine:
    def __init__(
        self,
        store: GameStore,
        entropy_provider: EntropyProvider,
        *,
        lock_manager: GameLockManager | None = None,
        entropy_timeout: float = DEFAULT_ENTROPY_TIMEOUT,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        max_grid_size: int | None = None,
        hide_seed_until_finished: bool = False,
    ):
        self.store = store
        self.entropy_provider = entropy_provider
        self.lock_manager = lock_manager or GameLockManager()
        self.entropy_timeout = entropy_timeout
        self.history_limit = history_limit
        self.max_grid_size = max_grid_size
        self.data_converter = DataConverter(hide_seed_until_finished)
        self.start_lock = asyncio.Lock()

    async def _read_game(self, game_id: UUID) -> GameSchema:
        game = await self.store.get(game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        return game

    async def _read_game_locked(self, game_id: UUID) -> GameSchema:
        """Read under the game's lock; unknown or finished games must not leave a lock behind."""
        try:
            game = await self._read_game(game_id)
            ensure_active(game)
        except (GameNotFoundError, GameAlreadyFinishedError):
            await self.lock_manager.cleanup(game_id)
            raise
        return game

    async def start_game(
        self, size: int, bomb_count: int, client_seed: str, bet: float = 0.0
    ) -> StartGameResponseModel:
        """Create a game and commit its bomb layout

        Args:
            size (int): Grid side, the grid has size * size cells
            bomb_count (int): Bombs on the grid, 1 <= bomb_count < size * size
            client_seed (str): Seed chosen by the player
            bet (float, optional): Stake recorded with the game. Defaults to 0.0.

        Returns:
            StartGameResponseModel: game_id, server seed (or only its hash) and nonce
        """
        total_cells = validate_game_parameters(
            size, bomb_count, client_seed, bet, max_grid_size=self.max_grid_size
        )
        server_seed = await self.entropy_provider.fetch_public_seed(self.entropy_timeout)

        async with self.start_lock:
            nonce = await self.store.last_nonce() + 1
            game = GameSchema(
                game_id=uuid7(),
                created_at=datetime.now(),
                size=size,
                bomb_count=bomb_count,
                total_cells=total_cells,
                client_seed=client_seed,
                server_seed=server_seed,
                nonce=nonce,
                bet=float(bet),
                bomb_positions=generate_bomb_positions(
                    server_seed, client_seed, nonce, total_cells, bomb_count
                ),
            )
            await self.store.append(game)

        source = "fallback" if is_fallback_seed(server_seed) else "block"
        logging.info(
            f"Started game {game.game_id}: nonce={nonce} size={size} bombs={bomb_count} seed_source={source}"
        )
        return self.data_converter.convert_game_to_start_response(game)

    async def reveal_cell(self, game_id: UUID, index: int) -> RevealResponseModel:
        """Reveal one cell of an active game

        Args:
            game_id (UUID): To identify the game
            index (int): Cell index, 0 <= index < total_cells

        Raises:
            GameNotFoundError, GameAlreadyFinishedError, InvalidIndexError, CellAlreadyOpenedError

        Returns:
            RevealResponseModel: Outcome of the reveal
        """
        async with self.lock_manager.hold(game_id):
            game = await self._read_game_locked(game_id)
            is_bomb, multiplier = open_cell(game, index)
            await self.store.update(game)

        if game.finished:
            await self.lock_manager.cleanup(game_id)
        logging.info(
            f"Game {game_id}: revealed {index} bomb={is_bomb} opened={len(game.opened_cells)} multiplier={multiplier}"
        )
        return self.data_converter.convert_game_to_reveal_response(game, is_bomb, multiplier)

    async def cashout(self, game_id: UUID) -> CashoutResponseModel:
        async with self.lock_manager.hold(game_id):
            game = await self._read_game_locked(game_id)
            multiplier = cash_out(game)
            await self.store.update(game)

        await self.lock_manager.cleanup(game_id)
        logging.info(f"Game {game_id}: cashed out at {multiplier} after {len(game.opened_cells)} cells")
        return self.data_converter.convert_game_to_cashout_response(game)

    async def get_history(self, limit: int | None = None) -> List[GameSummaryModel]:
        """Summaries of the latest games, most recent first. limit is clamped to [1, history_limit]."""
        if limit is None:
            limit = self.history_limit
        limit = max(1, min(limit, self.history_limit))
        games = await self.store.list(limit)
        return [self.data_converter.convert_game_to_summary(game) for game in games]

    async def verify_game(self, game_id: UUID) -> VerifyModel:
        game = await self._read_game(game_id)
        return self.data_converter.convert_game_to_verify(game)
