import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from mines_server.entropy_provider import EntropyProvider, TronBlockEntropyProvider
from mines_server.load_secrets import (
    entropy_timeout,
    entropy_url,
    hide_seed_until_finished,
    history_limit,
    log_level,
    max_grid_size,
    server_host,
    server_port,
    server_seed_suffix,
)
from mines_server.routers import game
from mines_server.services.game_store import GameStore, SqlGameStore
from mines_server.services.mines_service import MinesEngine

logging.basicConfig(level=log_level)


def create_app(
    store: GameStore | None = None,
    entropy_provider: EntropyProvider | None = None,
    hide_seed: bool = hide_seed_until_finished,
) -> FastAPI:
    """Build the FastAPI application around one MinesEngine

    Args:
        store (GameStore, optional): Defaults to the configured SQL database.
        entropy_provider (EntropyProvider, optional): Defaults to the TRON block provider.
        hide_seed (bool, optional): Withhold the server seed until the game ends.

    Returns:
        FastAPI: Application with the /api routes
    """
    if store is None:
        from mines_server.db import Session, engine

        store = SqlGameStore(engine, Session)
    if entropy_provider is None:
        entropy_provider = TronBlockEntropyProvider(entropy_url, seed_suffix=server_seed_suffix)

    mines_engine = MinesEngine(
        store,
        entropy_provider,
        entropy_timeout=entropy_timeout,
        history_limit=history_limit,
        max_grid_size=max_grid_size,
        hide_seed_until_finished=hide_seed,
    )

    @asynccontextmanager
    async def lifespan(app):
        """Prepare the game store when the server starts."""
        await store.setup()
        logging.info("Start Server")
        try:
            yield
        finally:
            await entropy_provider.aclose()
            await store.close()
            logging.info("Stop Server")

    app = FastAPI(lifespan=lifespan)
    app.state.mines_engine = mines_engine
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(game.game_router)
    return app


def __getattr__(name: str):
    # `uvicorn mines_server.main:app` builds the default app on first access only.
    if name == "app":
        app = create_app()
        globals()["app"] = app
        return app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


if __name__ == "__main__":
    uvicorn.run(create_app(), host=server_host, port=server_port)
