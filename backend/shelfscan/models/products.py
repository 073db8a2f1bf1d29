"""Open Food Facts product lookup models."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


class ProductInfo(BaseModel):
    """Product information from Open Food Facts."""

    barcode: str
    name: str
    brand: Optional[str] = None
    category: str = ""  # First category tag, humanized
    categories: list[str] = Field(default_factory=list)
    ingredients_text: Optional[str] = None
    image_url: Optional[str] = None
    shelf_life_days: Optional[int] = None  # Parsed from packaging/label text
    predicted_expiry: Optional[date] = None
    source: str = "openfoodfacts"


class ProductLookupResponse(BaseModel):
    """Response for a barcode lookup."""

    success: bool
    barcode: str
    product: Optional[ProductInfo] = None
    error: Optional[str] = None
    lookup_time_ms: Optional[float] = None
