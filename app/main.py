from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.web import router as web_router
from logging_config import configure_logging
from services.sampler import build_default_funding_sampler


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    sampler = build_default_funding_sampler()
    # The sampler thread is a daemon with no stop signal; it ends with the process.
    sampler.start()
    yield


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Funding Monitor",
        description="Latest mark price and funding rate of the monitored symbol.",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.include_router(web_router)
    return app
