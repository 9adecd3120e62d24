import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import exchange, health
from .config import settings
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware

API_NAME = "BITTY Exchange API"
API_VERSION = "0.1.0"
API_DESCRIPTION = "Portfolio, quote reconciliation and activity feed backend for the SOL/BITTY exchange"

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info(
        "Starting %s (rpc=%s, state=%s)",
        API_NAME,
        settings.solana_rpc_url,
        "redis" if settings.has_redis else "memory",
    )
    yield


app = FastAPI(
    title=API_NAME,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["Health"])
app.include_router(exchange.router, tags=["Exchange"])


@app.get("/")
async def root():
    """Service banner"""
    return {
        "name": API_NAME,
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/healthz",
        "wallet_routes": "/exchange/{wallet}/portfolio | activity | transactions",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bitty_exchange.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower(),
    )
