"""FastAPI application exposing ean-search lookups over HTTP."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eansearch import __version__
from eansearch.config import get_settings
from eansearch.dependencies import get_client
from eansearch.models import HealthResponse
from eansearch.routers import ean

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    """Configure logging on startup, close the upstream client on shutdown."""
    logging.basicConfig(level=get_settings().log_level.upper())
    logger.info("eansearch facade %s starting", __version__)
    yield
    if get_client.cache_info().currsize:
        get_client().close()


app = FastAPI(
    title="eansearch",
    description="Barcode lookup service backed by ean-search.org",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ean.router, prefix="/api", tags=["ean"])


@app.get("/health", response_model=HealthResponse)
async def health():
    """Liveness check."""
    return HealthResponse(version=__version__)
