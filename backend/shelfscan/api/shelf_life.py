"""Shelf-life hint API endpoints."""

from typing import Any

from fastapi import APIRouter, Body

from shelfscan.models.expiry import TextRequest, ShelfLifeResponse
from shelfscan.services.shelf_life import parse_shelf_life_days, shelf_life_from_product

router = APIRouter(prefix="/api/shelf-life", tags=["shelf-life"])


@router.post("/parse", response_model=ShelfLifeResponse)
async def parse_shelf_life(body: TextRequest):
    """Extract a shelf life in days from text like "use within 3 days"."""
    return ShelfLifeResponse(days=parse_shelf_life_days(body.text))


@router.post("/product", response_model=ShelfLifeResponse)
async def product_shelf_life(product: dict[str, Any] = Body(...)):
    """Extract a shelf life from an Open Food Facts product record."""
    return ShelfLifeResponse(days=shelf_life_from_product(product))
