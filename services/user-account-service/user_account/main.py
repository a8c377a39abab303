"""FastAPI application wiring for the user account service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .api.routes import router as v1_router
from .client import connect_client
from .config import get_settings
from .domain.service import UserAccountService
from .repository import UserAccountRepository

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect the Temporal client and build the user account service for the app lifecycle."""
    client = await connect_client(settings)
    app.state.user_account_service = UserAccountService(
        UserAccountRepository(client, task_queue=settings.task_queue)
    )
    yield


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


app.include_router(v1_router)


# Prometheus metrics endpoint for Prometheus scrapes
@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=settings.log_level)
    uvicorn.run(app, host=settings.http_host, port=settings.http_port)
