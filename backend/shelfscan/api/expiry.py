"""Expiry date parsing, prediction and learning API endpoints."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from shelfscan.models.expiry import (
    TextRequest,
    ExpiryParseResponse,
    ExpiryInputResponse,
    ExpiryPrediction,
    OffsetResponse,
    OffsetSetRequest,
    LearnRequest,
    LearnResponse,
    CompletePendingRequest,
)
from shelfscan.models.parsing import ParseError
from shelfscan.services.expiry_parser import extract_expiry_date
from shelfscan.services.expiration import (
    get_expiration_service,
    get_status,
    days_until,
    parse_manual_expiry,
    parse_expiry_input,
)
from shelfscan.services.expiry_offsets import (
    get_offset_learner,
    make_learn_key,
    normalize_key,
)

router = APIRouter(prefix="/api/expiry", tags=["expiry"])


@router.post("/parse", response_model=ExpiryParseResponse)
async def parse_expiry(body: TextRequest):
    """
    Find the most plausible expiry date in OCR text from a label.

    Returns `error: not_found` when nothing looked like a date and
    `error: malformed` when date-like text was found but none was valid.
    """
    result = extract_expiry_date(body.text)
    if not result.ok:
        return ExpiryParseResponse(error=result.error.value)

    remaining = days_until(result.value)
    return ExpiryParseResponse(
        expiry_date=result.value,
        days_until_expiry=remaining,
        status=get_status(remaining),
    )


@router.post("/parse-input", response_model=ExpiryInputResponse)
async def parse_input(body: TextRequest):
    """Parse manual expiry entry (DD/MM/YYYY, DD/MM or YYYY)."""
    parsed = parse_manual_expiry(body.text)
    if parsed is None:
        return ExpiryInputResponse(expiry_date=parse_expiry_input(None), used_default=True)
    return ExpiryInputResponse(expiry_date=parsed)


@router.get("/predict", response_model=ExpiryPrediction)
async def predict_expiry(
    category: str = Query("default", description="Product category or category tag"),
    brand: str = Query("", description="Product brand"),
    shelf_life_days: Optional[int] = Query(None, ge=1, le=365, description="Shelf-life hint"),
):
    """
    Predict an expiry date for a product.

    Uses the shelf-life hint if given, else the category default, then
    applies any offset learned for this brand and category.
    """
    expiration_service = get_expiration_service()

    return await expiration_service.predict(category, brand, shelf_life_days)


@router.get("/offsets/{key}", response_model=OffsetResponse)
async def get_offset(key: str):
    """Get the learned offset for a "brand|category" key."""
    learner = get_offset_learner()

    result = await learner.lookup_offset(key)
    if result.error == ParseError.STORAGE_UNAVAILABLE:
        raise HTTPException(status_code=503, detail="Offset storage unavailable")

    return OffsetResponse(
        key=normalize_key(key),
        offset_days=result.unwrap_or(0),
        found=result.ok,
    )


@router.put("/offsets/{key}", response_model=OffsetResponse)
async def set_offset(key: str, body: OffsetSetRequest):
    """Overwrite the learned offset for a "brand|category" key."""
    learner = get_offset_learner()

    result = await learner.set_offset(key, body.offset_days)
    if not result.ok:
        raise HTTPException(status_code=503, detail="Offset storage unavailable")

    return OffsetResponse(key=normalize_key(key), offset_days=result.value, found=True)


@router.post("/learn", response_model=LearnResponse)
async def learn_offset(body: LearnRequest):
    """
    Record a user's correction to a predicted expiry date.

    Offsets beyond the learning limit (120 days) are ignored.
    """
    learner = get_offset_learner()
    key = make_learn_key(body.brand, body.category)

    offset = await learner.learn(key, body.date_added, body.predicted_expiry, body.chosen_expiry)

    return LearnResponse(key=key, offset_days=offset, stored=offset is not None)


@router.post("/pending/complete", response_model=LearnResponse)
async def complete_pending(body: CompletePendingRequest):
    """Finish adding a scanned product and learn from the chosen expiry."""
    expiration_service = get_expiration_service()

    offset = await expiration_service.complete_pending(body.pending, body.chosen_expiry)

    return LearnResponse(key=body.pending.learn_key, offset_days=offset, stored=offset is not None)
