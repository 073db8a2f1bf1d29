"""
On-device OCR using Tesseract.

Install:
    sudo apt install tesseract-ocr
"""

import base64
import binascii
import io
import logging
from typing import Optional

import pytesseract
from PIL import Image

logger = logging.getLogger(__name__)


class InvalidImageError(ValueError):
    """Uploaded image data could not be decoded."""


def decode_image(base64_image: str, mime_type: Optional[str] = None) -> tuple[bytes, str]:
    """
    Decode a base64 image, stripping any data URL prefix.

    Returns (image bytes, mime type). The mime type is taken from the caller,
    else from the data URL, else defaults to image/jpeg.
    """
    if not base64_image:
        raise InvalidImageError("Missing base64Image")

    payload = base64_image.strip()
    inferred = "image/jpeg"
    if payload.startswith("data:image/"):
        header, _, payload = payload.partition(",")
        if header.startswith("data:image/png"):
            inferred = "image/png"

    try:
        image_bytes = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError("Invalid base64 image data") from e

    if not image_bytes:
        raise InvalidImageError("Empty image data")

    return image_bytes, mime_type or inferred


def ocr_image(image_bytes: bytes) -> Optional[str]:
    """
    Extract text from image using Tesseract OCR.

    Args:
        image_bytes: Raw image bytes (JPEG, PNG, etc.)

    Returns:
        Extracted text or None if OCR fails
    """
    try:
        image = Image.open(io.BytesIO(image_bytes))

        # Convert to RGB if necessary (handles RGBA, grayscale, etc.)
        if image.mode != "RGB":
            image = image.convert("RGB")

        return pytesseract.image_to_string(image)

    except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
        logger.error(f"OCR error: {e}")
        return None
    except OSError as e:
        # UnidentifiedImageError and truncated files
        logger.error(f"OCR error: unreadable image: {e}")
        return None
