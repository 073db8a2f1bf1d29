"""Receipt parsing models."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReceiptLinesRequest(BaseModel):
    """Pre-split OCR lines to classify."""

    lines: list[str] = Field(default_factory=list)


class ReceiptLineItemOut(BaseModel):
    """A single item extracted from a receipt."""

    quantity: int = 1
    name: str
    price: Decimal
    category: Optional[str] = None


class ReceiptLinesResponse(BaseModel):
    """Items extracted from receipt lines."""

    items: list[ReceiptLineItemOut] = Field(default_factory=list)
    count: int = 0


class ParseReceiptRequest(BaseModel):
    """Request to OCR and parse a receipt photo."""

    model_config = ConfigDict(populate_by_name=True)

    base64_image: Optional[str] = Field(default=None, alias="base64Image")
    mime_type: Optional[str] = Field(default=None, alias="mimeType")


class ParseReceiptResponse(BaseModel):
    """OCR text and the line items parsed from it."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    text: str = ""
    line_items: list[ReceiptLineItemOut] = Field(default_factory=list, alias="lineItems")
    store: Optional[str] = None
    total: Optional[Decimal] = None
    confidence: float = 0.9
    source: str = "tesseract"
