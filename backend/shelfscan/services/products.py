"""
Open Food Facts product lookup.

Supplies brand, category and shelf-life hints for scanned barcodes.

API: https://world.openfoodfacts.org/api/v2/product/{barcode}
Rate Limits: None (be respectful, ~1 req/sec recommended)
"""

import logging
import time
from typing import Optional

import httpx

from shelfscan.config import get_settings
from shelfscan.models.products import ProductInfo, ProductLookupResponse
from shelfscan.services.expiration import predict_expiry_date
from shelfscan.services.shelf_life import PRODUCT_TEXT_FIELDS, shelf_life_from_product

logger = logging.getLogger(__name__)
settings = get_settings()

OFF_USER_AGENT = "shelfscan/0.1.0 (grocery inventory app)"

MIN_BARCODE_LENGTH = 8
MAX_BARCODE_LENGTH = 18


def validate_barcode(barcode: str) -> Optional[str]:
    """Return an error message for an unusable barcode, None if it's fine."""
    clean = (barcode or "").strip()
    if not clean:
        return "Please enter a barcode"
    if not clean.isdigit():
        return "Barcode must contain only numbers"
    if not MIN_BARCODE_LENGTH <= len(clean) <= MAX_BARCODE_LENGTH:
        return f"Barcode must be {MIN_BARCODE_LENGTH}-{MAX_BARCODE_LENGTH} digits"
    return None


def humanize_tag(tag: str) -> str:
    """'en:dairy-desserts' -> 'dairy desserts'."""
    return tag.split(":")[-1].replace("-", " ").strip()


class ProductService:
    """Open Food Facts lookups over a shared httpx client."""

    def __init__(self, http: Optional[httpx.AsyncClient] = None):
        self.http = http

    async def init_client(self):
        if self.http is None:
            self.http = httpx.AsyncClient(
                timeout=settings.off_timeout_seconds,
                headers={"User-Agent": OFF_USER_AGENT},
            )

    async def close(self):
        if self.http:
            await self.http.aclose()
            self.http = None

    async def lookup(self, barcode: str) -> ProductLookupResponse:
        """Look up a product by barcode."""
        start_time = time.time()
        barcode = barcode.strip()

        try:
            product = await self._fetch_from_api(barcode)
        except Exception as e:
            logger.error(f"Open Food Facts error for {barcode}: {e}")
            return ProductLookupResponse(
                success=False,
                barcode=barcode,
                error=str(e),
                lookup_time_ms=(time.time() - start_time) * 1000,
            )

        if product is None:
            return ProductLookupResponse(
                success=False,
                barcode=barcode,
                error="Product not found in Open Food Facts",
                lookup_time_ms=(time.time() - start_time) * 1000,
            )

        return ProductLookupResponse(
            success=True,
            barcode=barcode,
            product=product,
            lookup_time_ms=(time.time() - start_time) * 1000,
        )

    async def _fetch_from_api(self, barcode: str) -> Optional[ProductInfo]:
        """Fetch product from Open Food Facts API."""
        await self.init_client()

        url = f"{settings.off_base_url}/product/{barcode}"
        params = {
            "fields": "code,product_name,brands,categories_tags,ingredients_text,image_url,"
                      + ",".join(PRODUCT_TEXT_FIELDS)
        }

        try:
            response = await self.http.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise

        data = response.json()
        if data.get("status") != 1 or not data.get("product"):
            return None

        return self._parse_product(barcode, data["product"])

    def _parse_product(self, barcode: str, product: dict) -> ProductInfo:
        """Parse Open Food Facts product into ProductInfo."""
        categories = [humanize_tag(tag) for tag in product.get("categories_tags") or []]
        category = categories[0] if categories else ""

        brands = product.get("brands") or ""
        brand = brands.split(",")[0].strip() or None

        shelf_life_days = shelf_life_from_product(product)

        return ProductInfo(
            barcode=barcode,
            name=product.get("product_name") or "Unknown Product",
            brand=brand,
            category=category,
            categories=categories[:5],
            ingredients_text=product.get("ingredients_text"),
            image_url=product.get("image_url"),
            shelf_life_days=shelf_life_days,
            predicted_expiry=predict_expiry_date(category, shelf_life_days),
        )


# Singleton
_product_service: Optional[ProductService] = None


def get_product_service() -> ProductService:
    """Get product service singleton."""
    global _product_service
    if _product_service is None:
        _product_service = ProductService()
    return _product_service


async def close_product_service():
    global _product_service
    if _product_service is not None:
        await _product_service.close()
    _product_service = None
