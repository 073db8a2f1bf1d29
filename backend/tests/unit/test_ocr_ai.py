"""
Unit tests for receipt image decoding, OCR and AI categorization.

Tesseract and OpenAI are mocked; no binaries or network needed.
"""

import base64
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytesseract
from openai import OpenAIError

from shelfscan.services.ai import AIService
from shelfscan.services.ocr import InvalidImageError, decode_image, ocr_image
from shelfscan.services.receipt_parser import ParsedLineItem


def _items(*names):
    return [ParsedLineItem(name=name, price=Decimal("1.00")) for name in names]


def _openai_client(content=None, error=None):
    client = MagicMock()
    if error is not None:
        client.chat.completions.create = AsyncMock(side_effect=error)
    else:
        message = MagicMock(content=content)
        client.chat.completions.create = AsyncMock(
            return_value=MagicMock(choices=[MagicMock(message=message)])
        )
    return client


class TestDecodeImage:
    """Tests for base64 image decoding."""

    @pytest.mark.unit
    def test_plain_base64(self):
        data, mime_type = decode_image(base64.b64encode(b"abc").decode())

        assert data == b"abc"
        assert mime_type == "image/jpeg"

    @pytest.mark.unit
    def test_data_url(self):
        payload = "data:image/png;base64," + base64.b64encode(b"png").decode()

        assert decode_image(payload) == (b"png", "image/png")

    @pytest.mark.unit
    def test_explicit_mime_type_wins(self):
        payload = base64.b64encode(b"abc").decode()
        assert decode_image(payload, "image/webp")[1] == "image/webp"

    @pytest.mark.unit
    def test_invalid(self):
        with pytest.raises(InvalidImageError):
            decode_image("not-valid-base64!!!")
        with pytest.raises(InvalidImageError):
            decode_image("")


class TestOcrImage:
    """Tests for Tesseract OCR."""

    @pytest.mark.unit
    def test_returns_text(self, image_bytes):
        with patch("shelfscan.services.ocr.pytesseract.image_to_string", return_value="MILK £1.20"):
            assert ocr_image(image_bytes) == "MILK £1.20"

    @pytest.mark.unit
    def test_unreadable_image(self):
        assert ocr_image(b"definitely not an image") is None

    @pytest.mark.unit
    def test_tesseract_missing(self, image_bytes):
        with patch(
            "shelfscan.services.ocr.pytesseract.image_to_string",
            side_effect=pytesseract.TesseractNotFoundError(),
        ):
            assert ocr_image(image_bytes) is None


class TestAIService:
    """Tests for line item categorization."""

    @pytest.mark.unit
    def test_parse_categories(self):
        content = 'Sure: [{"name": "MILK", "category": "Dairy"}, {"name": "X"}]'

        assert AIService._parse_categories(content, 3) == ["dairy", "other", "other"]

    @pytest.mark.unit
    def test_parse_categories_garbage(self):
        assert AIService._parse_categories("no json here", 2) == ["other", "other"]
        assert AIService._parse_categories("[not json]", 1) == ["other"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_disabled_marks_other(self):
        service = AIService()
        assert not service.is_enabled

        items = await service.categorize_line_items(_items("MILK 2PT", "BREAD"))

        assert [i.category for i in items] == ["other", "other"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_categorizes_with_client(self):
        client = _openai_client(
            '[{"name": "MILK 2PT", "category": "dairy"}, {"name": "BREAD", "category": "bread"}]'
        )
        service = AIService(client=client)

        items = await service.categorize_line_items(_items("MILK 2PT", "BREAD"))

        assert [i.category for i in items] == ["dairy", "bread"]
        client.chat.completions.create.assert_awaited_once()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_api_error_falls_back(self):
        service = AIService(client=_openai_client(error=OpenAIError("rate limited")))

        items = await service.categorize_line_items(_items("MILK 2PT"))

        assert items[0].category == "other"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_items(self):
        assert await AIService(client=_openai_client("[]")).categorize_line_items([]) == []
