from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import health_router, router
from app.hierarchy import router as hierarchy_router
from logging_config import configure_logging
from services.measurements import build_default_measurement_service
from services.networks import build_default_network_service
from settings import get_settings


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    try:
        yield
    finally:
        build_default_measurement_service.cache_clear()
        build_default_network_service.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    networks_prefix = f"{settings.api_prefix}/networks"
    app = FastAPI(
        title="Sensor Network Measurements",
        description="Readings, statistics and outlier detection for sensor networks.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router, prefix=networks_prefix)
    app.include_router(hierarchy_router, prefix=networks_prefix)
    app.include_router(health_router)
    return app

app = create_app()
