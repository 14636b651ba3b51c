# -*- coding: utf-8 -*-
"""
Record write service API

Accepts heterogeneous health records, validates and converts them to
canonical units and persists them in one batch.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .app_db import init_app_db
from .config import settings
from .write.api import router as records_router

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="ConnectKit record write",
    description="Decode, validate, convert and persist health records",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Ensure the record store exists even when lifespan events are not triggered.
init_app_db(settings.db_path)

app.include_router(records_router)


@app.get("/api/health")
def health() -> dict:
    return {"status": "ok", "platform": settings.platform}


def run() -> None:
    import uvicorn

    logger.info("Starting record write API on %s:%d (%s)", settings.host, settings.port, settings.platform)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
