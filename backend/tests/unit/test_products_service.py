"""
Unit tests for the Open Food Facts product service.

Tests:
- Barcode validation
- Open Food Facts response parsing
- Lookup with a mocked HTTP transport
"""

import httpx
import pytest
from datetime import date, timedelta

from shelfscan.services.products import ProductService, humanize_tag, validate_barcode


def _service(handler) -> ProductService:
    return ProductService(http=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestValidation:

    @pytest.mark.unit
    def test_validate_barcode(self):
        assert validate_barcode("5000128104517") is None
        assert validate_barcode("12345678") is None
        assert validate_barcode("") == "Please enter a barcode"
        assert validate_barcode("50001281abc") == "Barcode must contain only numbers"
        assert validate_barcode("1234567") == "Barcode must be 8-18 digits"
        assert validate_barcode("1" * 19) == "Barcode must be 8-18 digits"

    @pytest.mark.unit
    def test_humanize_tag(self):
        assert humanize_tag("en:dairy-desserts") == "dairy desserts"
        assert humanize_tag("milks") == "milks"


class TestParseProduct:
    """Tests for parsing Open Food Facts product records."""

    @pytest.mark.unit
    def test_parse_product(self, sample_off_product):
        product = ProductService()._parse_product("5000128104517", sample_off_product)

        assert product.name == "Semi Skimmed Milk"
        assert product.brand == "Tesco"
        assert product.category == "dairies"
        assert product.categories == ["dairies", "milks"]
        assert product.shelf_life_days == 3
        assert product.predicted_expiry == date.today() + timedelta(days=3)
        assert product.source == "openfoodfacts"

    @pytest.mark.unit
    def test_parse_product_missing_fields(self):
        product = ProductService()._parse_product("12345678", {})

        assert product.name == "Unknown Product"
        assert product.brand is None
        assert product.category == ""
        assert product.shelf_life_days is None
        assert product.predicted_expiry == date.today() + timedelta(days=7)


class TestLookup:
    """Tests for lookups against a mocked API."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_lookup_found(self, sample_off_product):
        def handler(request):
            assert request.url.path.endswith("/product/5000128104517")
            return httpx.Response(200, json={"status": 1, "product": sample_off_product})

        service = _service(handler)
        try:
            result = await service.lookup("5000128104517")
        finally:
            await service.close()

        assert result.success
        assert result.product.brand == "Tesco"
        assert result.lookup_time_ms >= 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_lookup_not_found(self):
        service = _service(lambda request: httpx.Response(200, json={"status": 0}))
        try:
            result = await service.lookup("12345678")
        finally:
            await service.close()

        assert not result.success
        assert result.product is None
        assert result.error == "Product not found in Open Food Facts"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_lookup_404(self):
        service = _service(lambda request: httpx.Response(404))
        try:
            result = await service.lookup("12345678")
        finally:
            await service.close()

        assert not result.success
        assert result.error == "Product not found in Open Food Facts"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_lookup_server_error(self):
        service = _service(lambda request: httpx.Response(500))
        try:
            result = await service.lookup("12345678")
        finally:
            await service.close()

        assert not result.success
        assert result.error
