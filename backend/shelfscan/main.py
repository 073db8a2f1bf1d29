"""
shelfscan: FastAPI backend for grocery inventory scanning.

Run with: uvicorn shelfscan.main:app --reload

Architecture:
- Parses expiry dates out of label OCR text
- Extracts line items from receipt OCR text (Tesseract on-device)
- Predicts expiry dates and learns per brand/category corrections
- Proxies Open Food Facts product lookups
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shelfscan.config import get_settings
from shelfscan.api import health
from shelfscan.api import expiry as expiry_api
from shelfscan.api import shelf_life as shelf_life_api
from shelfscan.api import receipts as receipts_api
from shelfscan.api import products as products_api
from shelfscan.services.expiry_offsets import init_offset_learner, close_offset_learner
from shelfscan.services.products import close_product_service

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info("Starting shelfscan backend...")

    # Open the learned offset store once, before requests arrive
    await init_offset_learner()

    yield

    # Shutdown
    logger.info("Shutting down shelfscan backend...")
    await close_product_service()
    await close_offset_learner()


app = FastAPI(
    title="shelfscan",
    description="Receipt and expiry date parsing API",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS - the mobile client calls us directly
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(expiry_api.router)  # /api/expiry
app.include_router(shelf_life_api.router)  # /api/shelf-life
app.include_router(receipts_api.router)  # /api/receipts, /api/parse-receipt
app.include_router(products_api.router)  # /api/products


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "shelfscan",
        "version": "0.1.0",
        "description": "Receipt and expiry date parsing API",
        "docs": "/docs",
        "endpoints": {
            "health": "/health",
            "expiry": "/api/expiry",
            "shelf-life": "/api/shelf-life",
            "receipts": "/api/receipts",
            "parse-receipt": "/api/parse-receipt",
            "products": "/api/products",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "shelfscan.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=not settings.is_production,
    )
