"""Pydantic models for the shelfscan API."""

from .parsing import ParseError, ParseResult
from .expiry import (
    TextRequest,
    ExpiryParseResponse,
    ExpiryInputResponse,
    ExpiryPrediction,
    PendingProduct,
    CompletePendingRequest,
    OffsetResponse,
    OffsetSetRequest,
    LearnRequest,
    LearnResponse,
    ShelfLifeResponse,
)
from .receipts import (
    ReceiptLinesRequest,
    ReceiptLineItemOut,
    ReceiptLinesResponse,
    ParseReceiptRequest,
    ParseReceiptResponse,
)
from .products import ProductInfo, ProductLookupResponse

__all__ = [
    # Parsing
    "ParseError",
    "ParseResult",
    # Expiry
    "TextRequest",
    "ExpiryParseResponse",
    "ExpiryInputResponse",
    "ExpiryPrediction",
    "PendingProduct",
    "CompletePendingRequest",
    "OffsetResponse",
    "OffsetSetRequest",
    "LearnRequest",
    "LearnResponse",
    "ShelfLifeResponse",
    # Receipts
    "ReceiptLinesRequest",
    "ReceiptLineItemOut",
    "ReceiptLinesResponse",
    "ParseReceiptRequest",
    "ParseReceiptResponse",
    # Products
    "ProductInfo",
    "ProductLookupResponse",
]
