"""
Entry point for the SolarWatch Anomaly Detection API server.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from api.routes import router
from config import HEALTH_PATH, settings
from database import connection_test, dispose_database, init_database, init_db
from services.detection_service import detection_service
from services.scheduler import DetectionScheduler

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    stream=sys.stdout,
)
log = logging.getLogger(__name__)

scheduler = DetectionScheduler(detection_service)

_database_ready = False
_component_status: Dict[str, str] = {}


def _init_storage() -> None:
    global _database_ready
    init_database(settings.database_url)
    init_db()
    _database_ready = connection_test()
    _component_status["database"] = "ready" if _database_ready else "unavailable"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if settings.database_url:
        await asyncio.to_thread(_init_storage)

    if settings.detection_enabled:
        scheduler.start()
        _component_status["scheduler"] = "running"
    else:
        log.info("Anomaly detection scheduler disabled")
        _component_status["scheduler"] = "disabled"
    try:
        yield
    finally:
        await scheduler.stop()
        dispose_database()


app = FastAPI(
    title="SolarWatch Anomaly Detection Engine",
    description="Daily production analysis and anomaly tracking for residential solar units.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router, prefix="/api/v1")


@app.get("/api/v1" + HEALTH_PATH, tags=["health"], summary="Readiness probe")
async def ready() -> JSONResponse:
    code = 200 if _database_ready else 503
    return JSONResponse(
        status_code=code,
        content={"ready": _database_ready, "components": _component_status},
    )


if __name__ == "__main__":
    uvicorn_kwargs = {
        "host": settings.host,
        "port": settings.port,
        "log_level": "info",
        "access_log": True,
    }
    if settings.ssl_enabled:
        uvicorn_kwargs["ssl_certfile"] = settings.ssl_certfile
        uvicorn_kwargs["ssl_keyfile"] = settings.ssl_keyfile

    uvicorn.run(
        "main:app",
        **uvicorn_kwargs,
    )
