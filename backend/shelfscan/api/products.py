"""Open Food Facts product lookup API endpoints."""

from fastapi import APIRouter, HTTPException

from shelfscan.models.expiry import PendingProduct
from shelfscan.models.products import ProductLookupResponse
from shelfscan.services.expiration import get_expiration_service
from shelfscan.services.products import get_product_service, validate_barcode

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("/{barcode}", response_model=ProductLookupResponse)
async def lookup_product(barcode: str):
    """
    Look up a product by barcode using Open Food Facts.

    Returns name, brand, category, any shelf-life hint found in the
    product's label text, and a category-based expiry prediction.
    """
    error = validate_barcode(barcode)
    if error:
        raise HTTPException(status_code=400, detail=error)

    product_service = get_product_service()

    return await product_service.lookup(barcode)


@router.post("/{barcode}/pending", response_model=PendingProduct)
async def start_pending_product(barcode: str):
    """
    Start adding a scanned product to the inventory.

    Returns the product with its predicted expiry (learned offset applied).
    Send it back to /api/expiry/pending/complete with the user's chosen date.
    """
    error = validate_barcode(barcode)
    if error:
        raise HTTPException(status_code=400, detail=error)

    product_service = get_product_service()
    expiration_service = get_expiration_service()

    result = await product_service.lookup(barcode)
    if not result.success or not result.product:
        raise HTTPException(status_code=404, detail=result.error or "Product not found")

    product = result.product
    return await expiration_service.start_pending(
        name=product.name,
        brand=product.brand,
        category=product.category,
        barcode=product.barcode,
        shelf_life_days=product.shelf_life_days,
    )
