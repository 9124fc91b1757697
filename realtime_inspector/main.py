"""Realtime Inspector FastAPI backend: main application entry point."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from realtime_inspector import config
from realtime_inspector.routers.logs import logs_router
from realtime_inspector.observability import initialize as initialize_observability, shutdown as shutdown_observability

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("realtime_inspector")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    logger.info("Realtime Inspector backend starting up (log dir: %s)", config.LOG_DIR)
    initialize_observability(app)

    yield

    logger.info("Realtime Inspector backend shutting down")
    shutdown_observability(app)


app = FastAPI(
    title="Realtime Inspector API",
    description="Reconstructs realtime API session logs into conversation timelines",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS: allow the inspector frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        config.FRONTEND_ORIGIN,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(logs_router)


@app.get("/api/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "logDir": str(config.LOG_DIR)}


def run() -> None:
    import uvicorn

    uvicorn.run("realtime_inspector.main:app", host=config.HOST, port=config.PORT)
