import logging

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

from relay.app import create_app
from relay.settings import Settings

logger = logging.getLogger(__name__)


def load_settings() -> Settings:
    load_dotenv()
    return Settings.from_env()


def build_app() -> FastAPI:
    """Factory for `uvicorn --factory relay.main:build_app`."""
    return create_app(load_settings())


def run():
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    app = create_app(settings)
    logger.info("AI server listening on %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
