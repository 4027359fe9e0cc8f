# lab_inventory/main.py
# Lab Inventory API - items, loans and spreadsheet imports
from __future__ import annotations
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lab_inventory.settings import settings
from lab_inventory.database import init_db, create_schema, close_db, check_db_health
from lab_inventory.routers.items import router as items_router
from lab_inventory.routers.loans import router as loans_router
from lab_inventory.routers.transactions import router as transactions_router
from lab_inventory.routers.imports import router as imports_router

APP_VERSION = "1.0.0"

# ---------------------------------------------------------
# Logging setup
# ---------------------------------------------------------
from lab_inventory.logging_setup import setup_logging
setup_logging(settings)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# Lifespan: Database init/cleanup
# ---------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    await init_db()
    await create_schema()
    logger.info("Lab Inventory API started")
    yield
    # Shutdown
    await close_db()
    logger.info("Database disconnected")

# ---------------------------------------------------------
# FastAPI app + CORS
# ---------------------------------------------------------
app = FastAPI(
    title="Lab Inventory API",
    version=APP_VERSION,
    description="Lab equipment & consumables - stock, loans and spreadsheet imports",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

app.include_router(items_router)
app.include_router(loans_router)
app.include_router(transactions_router)
app.include_router(imports_router)

# ---------------------------------------------------------
# Endpoints
# ---------------------------------------------------------
@app.get("/health")
async def health():
    """Health check endpoint with database status."""
    result = {"status": "ok", "version": APP_VERSION}
    db_health = await check_db_health()
    result["database"] = db_health
    if db_health.get("status") != "healthy":
        result["status"] = "degraded"
    return result
