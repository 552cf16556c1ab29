from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from app.web import router as web_router
from logging_config import configure_logging
from services.session import build_default_session
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    session = build_default_session()
    if get_settings().self_checks_on_startup:
        summary = session.run_self_checks()
        logger.info(summary.message, extra={"status": summary.status.value})
    try:
        yield
    finally:
        session.shutdown()
        build_default_session.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Calibration Setpoint Builder",
        description="Builds calibration setpoint JSON from temperature and humidity entries.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    app.include_router(web_router)
    return app


app = create_app()
