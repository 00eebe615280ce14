"""MAJHI COSTING - FastAPI Application.

Restaurant back-office: materials, menu items and recursive recipe costing
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from majhi import __version__
from majhi.api import costing
from majhi.core.config import settings
from majhi.services.snapshot_store import snapshot_store

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="MAJHI COSTING - Materials, menu items and food cost engineering",
    version=__version__,
    debug=settings.DEBUG,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Single-user local client
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(costing.router)  # Recipe costing API

if settings.LOAD_DEMO_ON_STARTUP:
    snapshot_store.load_demo()
    logger.info("Demo kitchen loaded on startup")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "service": settings.APP_NAME,
        "version": __version__,
        "currency": settings.CURRENCY_SYMBOL,
        "status": "operational",
    }


@app.get("/health")
async def health():
    """Detailed health check."""
    snapshot = snapshot_store.get()
    return {
        "status": "healthy",
        "materials": len(snapshot.materials),
        "targets": len(snapshot.targets),
        "recipes": len(snapshot.recipes),
    }
