"""Receipt OCR and parsing API endpoints."""

import asyncio

from fastapi import APIRouter, HTTPException

from shelfscan.config import get_settings
from shelfscan.models.expiry import TextRequest
from shelfscan.models.receipts import (
    ReceiptLinesRequest,
    ReceiptLineItemOut,
    ReceiptLinesResponse,
    ParseReceiptRequest,
    ParseReceiptResponse,
)
from shelfscan.services.ai import get_ai_service
from shelfscan.services.ocr import InvalidImageError, decode_image, ocr_image
from shelfscan.services.receipt_parser import (
    ParsedLineItem,
    ParsedReceiptData,
    parse_receipt_lines,
    parse_receipt_text,
)

router = APIRouter(prefix="/api", tags=["receipts"])


def _to_out(item: ParsedLineItem) -> ReceiptLineItemOut:
    return ReceiptLineItemOut(
        quantity=item.quantity,
        name=item.name,
        price=item.price,
        category=item.category,
    )


def _receipt_response(parsed: ParsedReceiptData, source: str) -> ParseReceiptResponse:
    return ParseReceiptResponse(
        success=True,
        text=parsed.raw_text,
        line_items=[_to_out(item) for item in parsed.line_items],
        store=parsed.store_name,
        total=parsed.total,
        source=source,
    )


@router.post("/receipts/parse-lines", response_model=ReceiptLinesResponse)
async def parse_lines(body: ReceiptLinesRequest):
    """Extract line items from OCR text already split into lines."""
    items = parse_receipt_lines(body.lines)
    return ReceiptLinesResponse(items=[_to_out(item) for item in items], count=len(items))


@router.post("/receipts/parse-text", response_model=ParseReceiptResponse)
async def parse_text(body: TextRequest):
    """Parse raw receipt OCR text (no image, no categorization)."""
    return _receipt_response(parse_receipt_text(body.text), source="text")


@router.post("/parse-receipt", response_model=ParseReceiptResponse)
async def parse_receipt(body: ParseReceiptRequest):
    """
    OCR a receipt photo and extract line items.

    Accepts a base64 image, optionally as a data URL. Items are categorized
    with OpenAI when configured, otherwise every category is "other".
    """
    settings = get_settings()
    if not settings.feature_receipt_ocr:
        raise HTTPException(status_code=503, detail="Receipt OCR is disabled")

    if not body.base64_image:
        raise HTTPException(status_code=400, detail="Missing base64Image")

    try:
        image_bytes, _mime_type = decode_image(body.base64_image, body.mime_type)
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))

    text = await asyncio.to_thread(ocr_image, image_bytes)
    if text is None:
        raise HTTPException(status_code=500, detail="OCR processing failed")
    if not text.strip():
        raise HTTPException(status_code=500, detail="No text detected in image")

    parsed = parse_receipt_text(text)
    await get_ai_service().categorize_line_items(parsed.line_items)

    return _receipt_response(parsed, source="tesseract")
