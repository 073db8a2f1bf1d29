"""Expiry date parsing, prediction and learning models."""

from __future__ import annotations

from datetime import date
from typing import Optional, Literal

from pydantic import BaseModel, Field


ExpiryStatus = Literal["fresh", "use_soon", "expiring", "expired"]


class TextRequest(BaseModel):
    """Free OCR or user text to run a parser over."""

    text: str = Field(..., description="Raw text (OCR output or user input)")


class ExpiryParseResponse(BaseModel):
    """Best expiry date found in a block of text."""

    expiry_date: Optional[date] = None
    days_until_expiry: Optional[int] = None
    status: Optional[ExpiryStatus] = None
    error: Optional[str] = None


class ExpiryInputResponse(BaseModel):
    """Date resolved from manual expiry entry."""

    expiry_date: date
    used_default: bool = False


class ExpiryPrediction(BaseModel):
    """Predicted expiry for a product, with any learned adjustment."""

    category: str
    learn_key: str
    base_expiry: date
    offset_days: int = 0
    predicted_expiry: date
    days_until_expiry: int
    status: ExpiryStatus = "fresh"


class PendingProduct(BaseModel):
    """A product being added through the scan -> expiry steps."""

    name: str
    brand: str = ""
    category: str = ""
    barcode: Optional[str] = None
    date_added: date
    expiry: date  # Prediction after the learned offset
    base_predicted: Optional[date] = None  # Prediction before the offset
    learn_key: str


class OffsetResponse(BaseModel):
    """Learned offset for a brand|category key."""

    key: str
    offset_days: int = 0
    found: bool = False


class OffsetSetRequest(BaseModel):
    """Request to overwrite a learned offset."""

    offset_days: int = Field(..., ge=-120, le=120)


class LearnRequest(BaseModel):
    """A user accepted or edited a predicted expiry date."""

    brand: str = ""
    category: str = ""
    date_added: date
    predicted_expiry: date
    chosen_expiry: date


class LearnResponse(BaseModel):
    """Result of a learning event."""

    key: str
    offset_days: Optional[int] = None
    stored: bool = False


class ShelfLifeResponse(BaseModel):
    """Shelf-life hint extracted from product text."""

    days: Optional[int] = None


class CompletePendingRequest(BaseModel):
    """Finish adding a pending product with the expiry the user settled on."""

    pending: PendingProduct
    chosen_expiry: Optional[date] = None
