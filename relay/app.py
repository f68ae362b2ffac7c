import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from relay.routes import move
from relay.settings import Settings
from relay.utils.llm import build_client

logger = logging.getLogger(__name__)


def create_app(settings: Settings, http_client: httpx.AsyncClient | None = None) -> FastAPI:
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set. Set environment variable before running the server.")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.llm_client.close()

    app = FastAPI(title="Chess Move Relay", lifespan=lifespan)
    app.state.settings = settings
    app.state.llm_client = build_client(settings, http_client=http_client)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(move.router)
    return app
