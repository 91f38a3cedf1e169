"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trade_journal.config import settings
from trade_journal.database import create_db_and_tables
from trade_journal.services.trade_store import TradeStoreError
from trade_journal.utils.logging import setup_logging
from trade_journal.api import auth, accounts, playbooks, trades, metrics, system

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging()
    create_db_and_tables()
    yield


app = FastAPI(
    title="Trade Journal",
    description="Trading journal with performance analytics",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TradeStoreError)
async def trade_store_error_handler(request: Request, exc: TradeStoreError):
    logger.error(f"Storage fault on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Unable to load data"})


# Mount routers
app.include_router(auth.router)
app.include_router(accounts.router)
app.include_router(playbooks.router)
app.include_router(trades.router)
app.include_router(metrics.router)
app.include_router(system.router)
