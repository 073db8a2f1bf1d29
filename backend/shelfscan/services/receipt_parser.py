"""
Rule-based receipt parser.

The OCR gives us raw text like this (UK supermarket receipt):

    MORRISONS
    Store 0123  Tel: 01482 000000
    12/03/25 14:02
    MILK 2PT
    1 £1.20
    2 BANANAS LOOSE £0.90
    GREEK YOGURT £1.75
    TOTAL £3.85
    VISA £3.85

We extract:
1. Line items (name, price, quantity)
2. Store name
3. Purchase date
4. Total

Item names sometimes sit on the line above their price, so a price line
whose own text isn't a usable name borrows the previous line. Lines we
can't price are dropped silently; a missed item costs less than a bogus one.
"""

import re
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional
from dataclasses import dataclass, field

from shelfscan.services.expiry_parser import parse_date_token

logger = logging.getLogger(__name__)

# A leading minus marks a discount or refund, not an item price
PRICE_PATTERN = re.compile(r"(?<!-)(?<!- )[£€$]\s?(\d+\.\d{2})")
QUANTITY_PATTERN = re.compile(r"^(\d+)\s*M?\s+")
NAME_DISALLOWED = re.compile(r"[^A-Za-z0-9 '\-&]")
TWO_LETTERS = re.compile(r"[A-Za-z]{2,}")
HAS_LETTER = re.compile(r"[A-Za-z]")

# Line openers that mark totals, payment, store metadata or column headers
SKIP_KEYWORDS = [
    "total", "subtotal", "sub total", "t o t a l", "balance", "balance due",
    "amount", "amount due", "discount", "more discount", "savings", "change",
    "payment", "cash", "card", "visa", "mastercard", "amex", "contactless",
    "chip & pin", "thank", "thanks", "receipt", "customer copy", "vat", "tax",
    "tel", "phone", "store", "branch", "manager", "since", "description",
    "price", "qty", "quantity", "aid", "pan", "auth code", "cashier",
    "operator", "till", "transaction",
]

SKIP_LINE_PATTERNS = [
    re.compile(r"^(?:" + "|".join(re.escape(k) for k in SKIP_KEYWORDS) + r")\b", re.IGNORECASE),
    re.compile(r"^\d{2}/\d{2}/\d{2,4}"),  # date stamp
    re.compile(r"^\d{4}-\d{2}-\d{2}"),  # ISO date stamp
    re.compile(r"^\d{2}:\d{2}"),  # time stamp
    re.compile(r"^[*\-=_\s]+$"),  # separator row
    re.compile(r"^www\.", re.IGNORECASE),
    re.compile(r"\.com\b|\.co\.uk\b", re.IGNORECASE),
]

TOTAL_PATTERN = re.compile(
    r"^(?:total|t\s*o\s*t\s*a\s*l|amount due|balance due)\b.*?[£€$]?\s?(\d+\.\d{2})",
    re.IGNORECASE,
)

STORE_KEYWORDS = {
    "tesco": "tesco",
    "sainsbury": "sainsburys",
    "asda": "asda",
    "morrisons": "morrisons",
    "aldi": "aldi",
    "lidl": "lidl",
    "waitrose": "waitrose",
    "co-op": "coop",
    "iceland": "iceland",
    "marks & spencer": "m&s",
}


@dataclass
class ParsedLineItem:
    """A single item from the receipt."""
    name: str
    price: Decimal
    quantity: int = 1
    raw_text: str = ""
    category: Optional[str] = None


@dataclass
class ParsedReceiptData:
    """Structured data extracted from receipt text."""
    store_name: Optional[str] = None
    purchase_date: Optional[date] = None
    line_items: list[ParsedLineItem] = field(default_factory=list)
    total: Optional[Decimal] = None
    raw_text: str = ""


def is_skipped_line(line: str) -> bool:
    """True for totals, payment, metadata and structural noise."""
    return any(pattern.search(line) for pattern in SKIP_LINE_PATTERNS)


def clean_item_name(name: str) -> str:
    """Keep letters, digits, space, apostrophe, hyphen and ampersand. No hyphens at the ends."""
    return re.sub(r"\s+", " ", NAME_DISALLOWED.sub(" ", name)).strip(" -")


def is_valid_item(name: str, price: Decimal) -> bool:
    return len(name) > 2 and TWO_LETTERS.search(name) is not None and price > 0


def split_quantity(text: str) -> tuple[Optional[int], str]:
    """Split a leading "<N> " quantity off a name."""
    match = QUANTITY_PATTERN.match(text)
    if match:
        return int(match.group(1)), text[match.end():].strip()
    return None, text.strip()


def _parse_price(value: str) -> Optional[Decimal]:
    try:
        return Decimal(value)
    except InvalidOperation:
        return None


def _name_from_previous(lines: list[str], index: int) -> tuple[Optional[int], str]:
    """Name from the line above a price line, if that line can be a name."""
    if index == 0:
        return None, ""
    prev = lines[index - 1].strip()
    if not prev or PRICE_PATTERN.search(prev) or not HAS_LETTER.search(prev):
        return None, ""
    if is_skipped_line(prev):
        return None, ""
    quantity, name = split_quantity(prev)
    return quantity, clean_item_name(name)


def parse_receipt_lines(lines: list[str]) -> list[ParsedLineItem]:
    """
    Extract (quantity, name, price) items from OCR lines.

    Results are deduplicated by lowercased name and price to 2dp; the first
    occurrence wins.
    """
    items: list[ParsedLineItem] = []

    for index, raw in enumerate(lines):
        line = raw.strip()
        if not line or is_skipped_line(line):
            continue

        price_match = PRICE_PATTERN.search(line)
        if not price_match:
            continue

        price = _parse_price(price_match.group(1))
        if price is None:
            continue

        quantity, name = split_quantity(line[:price_match.start()])
        name = clean_item_name(name)

        if not is_valid_item(name, price):
            prev_quantity, prev_name = _name_from_previous(lines, index)
            name = prev_name
            if prev_quantity is not None:
                quantity = prev_quantity

        if not is_valid_item(name, price):
            logger.debug(f"Dropped receipt line without usable name: {line!r}")
            continue

        items.append(ParsedLineItem(
            name=name,
            price=price,
            quantity=quantity or 1,
            raw_text=line,
        ))

    seen = set()
    unique = []
    for item in items:
        key = (item.name.lower(), item.price.quantize(Decimal("0.01")))
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique


def split_lines(ocr_text: str) -> list[str]:
    """Split OCR text into stripped, non-empty lines."""
    return [line.strip() for line in re.split(r"\r?\n", ocr_text or "") if line.strip()]


def detect_store_type(ocr_text: str) -> str:
    """
    Detect which store the receipt is from.

    Returns a store identifier like 'tesco' or 'aldi', or 'unknown'.
    """
    text_lower = (ocr_text or "").lower()

    for keyword, store in STORE_KEYWORDS.items():
        if keyword in text_lower:
            return store

    return "unknown"


def find_total(lines: list[str]) -> Optional[Decimal]:
    """Amount on the last total line."""
    total = None
    for line in lines:
        match = TOTAL_PATTERN.search(line)
        if match:
            total = _parse_price(match.group(1))
    return total


def find_purchase_date(lines: list[str]) -> Optional[date]:
    """Date from the first line that opens with a date stamp."""
    for line in lines:
        if re.match(r"^\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}", line):
            value = parse_date_token(line.split()[0])
            if value:
                return value
    return None


def parse_receipt_text(ocr_text: str) -> ParsedReceiptData:
    """
    Parse raw OCR text into structured receipt data.

    Args:
        ocr_text: Raw text from OCR

    Returns:
        ParsedReceiptData with extracted fields
    """
    lines = split_lines(ocr_text)
    store = detect_store_type(ocr_text)

    return ParsedReceiptData(
        store_name=store if store != "unknown" else None,
        purchase_date=find_purchase_date(lines),
        line_items=parse_receipt_lines(lines),
        total=find_total(lines),
        raw_text=ocr_text or "",
    )
