import asyncio

from mines_server.entropy_provider import StaticEntropyProvider
from mines_server.services.game_store import InMemoryGameStore
from mines_server.services.mines_service import MinesEngine


class SlowGameStore(InMemoryGameStore):
    """In-memory store that yields to the event loop on every read."""

    def __init__(self, delay: float = 0.01):
        super().__init__()
        self.delay = delay

    async def get(self, game_id):
        game = await super().get(game_id)
        await asyncio.sleep(self.delay)
        return game


def make_engine(store=None, seed: str = "seed123", **kwargs) -> MinesEngine:
    return MinesEngine(
        store if store is not None else InMemoryGameStore(),
        StaticEntropyProvider(seed),
        **kwargs,
    )
