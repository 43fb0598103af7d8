"""
FastAPI application for the OrderSeed API.

Provides endpoints to populate the demo database and read sales reports.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from config.settings import get_settings
from orderseed.db.seed import populate_database
from orderseed.db.store import OrderStore
from orderseed.errors import ConfigurationError, OrderSeedError
from orderseed.generation.orchestrator import BatchOrchestrator
from orderseed.reports.sales import sales_report, summarize_batch, x_report, z_report
from orderseed.utils.log_config import configure_logging

logger = logging.getLogger(__name__)
settings = get_settings()


# Pydantic models for API
class PopulateRequest(BaseModel):
    """Optional overrides for a populate run."""

    historical_count: Optional[int] = Field(None, ge=0)
    recent_count: Optional[int] = Field(None, ge=0)


class PopulateResponse(BaseModel):
    """Response for a populate run."""

    message: str
    order_count: int
    recent_count: int
    total_price: float


class HourlyReportRow(BaseModel):
    hour: datetime
    order_count: int
    total: float


class ZReportResponse(BaseModel):
    order_count: int
    total: float


class SalesReportRow(BaseModel):
    period: str
    sellable: str
    units_sold: int
    revenue: float


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    environment: str


# Global state
class AppState:
    """Application state holding the store."""

    def __init__(self):
        self.store: Optional[OrderStore] = None


state = AppState()


def get_store() -> OrderStore:
    if state.store is None:
        state.store = OrderStore(settings.database_url, echo=settings.database_echo)
    return state.store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for startup and shutdown."""
    # Startup
    configure_logging(settings.log_level, settings.log_format)
    logger.info("Starting OrderSeed API...")

    # Creates the sqlite data directory
    store = get_store()
    await store.create_schema()

    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")

    yield

    # Shutdown
    logger.info("Shutting down OrderSeed API...")
    await store.dispose()
    state.store = None


# Initialize FastAPI
app = FastAPI(
    title="OrderSeed API",
    description="Synthetic order history for the kiosk demo database",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(OrderSeedError)
async def orderseed_exception_handler(request: Request, exc: OrderSeedError):
    """Handle generator and persistence failures."""
    logger.error(f"{type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": type(exc).__name__, "error": str(exc)},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Handle unexpected errors."""
    logger.error(f"Unexpected error: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error": str(exc)},
    )


# API Routes
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
    )


@app.post("/populate", response_model=PopulateResponse)
async def populate(request: Optional[PopulateRequest] = None):
    """
    Reset the database and fill it with a generated order history.

    Counts default to the configured values.
    """
    request = request or PopulateRequest()
    store = get_store()

    try:
        orchestrator = BatchOrchestrator.from_settings(store, settings)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    specs = await populate_database(
        store,
        orchestrator=orchestrator,
        historical_count=request.historical_count,
        recent_count=request.recent_count,
    )
    summary = summarize_batch(specs)["value"]

    return PopulateResponse(
        message="Database populated",
        order_count=len(specs),
        recent_count=sum(1 for s in specs if s.is_recent),
        total_price=float(summary.get("total_price", 0.0)),
    )


@app.get("/reports/x", response_model=List[HourlyReportRow])
async def get_x_report():
    """Completed recent orders grouped by hour."""
    return await x_report(get_store())


@app.post("/reports/z", response_model=ZReportResponse)
async def close_z_report():
    """Total the completed recent orders and clear them."""
    return await z_report(get_store())


@app.get("/reports/sales", response_model=List[SalesReportRow])
async def get_sales_report(time_range: str = "daily"):
    """Per-sellable sales for daily, weekly or monthly periods."""
    try:
        return await sales_report(get_store(), time_range)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "orderseed.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        workers=settings.api_workers,
        reload=settings.debug,
    )
