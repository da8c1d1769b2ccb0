from asyncio import Lock
from contextlib import asynccontextmanager
from uuid import UUID


class GameLockManager:
    def __init__(self):
        self.locks: dict[UUID, Lock] = {}  # one Lock per game_id
        self.lock = Lock()  # protects access to locks

    async def get_lock(self, game_id: UUID) -> Lock:
        """Get the Lock of the specified game_id, creating it on first use

        Args:
            game_id (UUID): ID to identify this game

        Returns:
            Lock: Lock serializing every mutation of this game
        """
        async with self.lock:
            if game_id not in self.locks:
                self.locks[game_id] = Lock()
            return self.locks[game_id]

    @asynccontextmanager
    async def hold(self, game_id: UUID):
        """Hold the game's Lock for the duration of the block

        Args:
            game_id (UUID): ID to identify this game
        """
        game_lock = await self.get_lock(game_id)
        async with game_lock:
            yield

    async def cleanup(self, game_id: UUID):
        """Delete the Lock of a finished game

        Args:
            game_id (UUID): ID to identify this game
        """
        async with self.lock:
            self.locks.pop(game_id, None)

    def active_count(self) -> int:
        return len(self.locks)
