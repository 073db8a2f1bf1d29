"""
Integration tests for products API.

The product service is mocked; no calls reach Open Food Facts.
"""

import pytest
from datetime import date, timedelta
from unittest.mock import patch, AsyncMock, MagicMock

from shelfscan.models.products import ProductInfo, ProductLookupResponse


def _product_service(response: ProductLookupResponse):
    service = MagicMock()
    service.lookup = AsyncMock(return_value=response)
    return service


@pytest.fixture
def found_response():
    return ProductLookupResponse(
        success=True,
        barcode="5000128104517",
        product=ProductInfo(
            barcode="5000128104517",
            name="Semi Skimmed Milk",
            brand="Tesco",
            category="dairies",
            shelf_life_days=3,
        ),
    )


class TestLookupEndpoint:
    """Tests for GET /api/products/{barcode}"""

    @pytest.mark.integration
    def test_invalid_barcode(self, client):
        response = client.get("/api/products/abc")

        assert response.status_code == 400
        assert response.json()["detail"] == "Barcode must contain only numbers"

    @pytest.mark.integration
    def test_lookup(self, client, found_response):
        service = _product_service(found_response)

        with patch("shelfscan.api.products.get_product_service", return_value=service):
            response = client.get("/api/products/5000128104517")

        assert response.status_code == 200
        assert response.json()["product"]["brand"] == "Tesco"
        service.lookup.assert_awaited_once_with("5000128104517")


class TestPendingEndpoint:
    """Tests for POST /api/products/{barcode}/pending"""

    @pytest.mark.integration
    def test_start_pending(self, client, found_response, expiration_service, learner):
        service = _product_service(found_response)

        with patch("shelfscan.api.products.get_product_service", return_value=service), \
             patch("shelfscan.api.products.get_expiration_service", return_value=expiration_service):
            response = client.post("/api/products/5000128104517/pending")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Semi Skimmed Milk"
        assert data["learn_key"] == "tesco|dairies"
        assert data["expiry"] == (date.today() + timedelta(days=3)).isoformat()
        assert data["base_predicted"] == data["expiry"]
        assert set(data) == {
            "name", "brand", "category", "barcode", "date_added", "expiry", "base_predicted", "learn_key",
        }

    @pytest.mark.integration
    def test_start_pending_not_found(self, client, expiration_service):
        service = _product_service(ProductLookupResponse(
            success=False,
            barcode="12345678",
            error="Product not found in Open Food Facts",
        ))

        with patch("shelfscan.api.products.get_product_service", return_value=service), \
             patch("shelfscan.api.products.get_expiration_service", return_value=expiration_service):
            response = client.post("/api/products/12345678/pending")

        assert response.status_code == 404
