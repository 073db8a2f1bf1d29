"""
Shelf-life hints from product text.

Open Food Facts products sometimes carry storage advice like "consume within
3 days of opening" or "keeps 2 weeks refrigerated". The first day count wins,
then weeks, then months; each unit has its own cap. Counts are read as whole
numbers, so "120 days" is capped rather than read as "20 days".
"""

import logging
import re
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

DAY_PATTERN = re.compile(r"\b(\d{1,3})\s*(?:days|day|d)\b")
WEEK_PATTERN = re.compile(r"\b(\d{1,3})\s*(?:weeks|week|wk|w)\b")
MONTH_PATTERN = re.compile(r"\b(\d{1,3})\s*(?:months|month|mo|m)\b")

MAX_DAYS = 60
MAX_WEEK_DAYS = 180
MAX_MONTH_DAYS = 365

# Open Food Facts fields that may mention storage life
PRODUCT_TEXT_FIELDS = (
    "conservation_conditions",
    "labels",
    "ingredients_text",
    "generic_name",
    "packaging_text",
    "packaging",
)


def parse_shelf_life_days(product_text: Optional[str]) -> Optional[int]:
    """Shelf life in days from free text, or None if no duration is mentioned."""
    if not product_text:
        return None

    text = product_text.lower()

    match = DAY_PATTERN.search(text)
    if match:
        return min(MAX_DAYS, int(match.group(1)))

    match = WEEK_PATTERN.search(text)
    if match:
        return min(MAX_WEEK_DAYS, int(match.group(1)) * 7)

    match = MONTH_PATTERN.search(text)
    if match:
        return min(MAX_MONTH_DAYS, int(match.group(1)) * 30)

    return None


def product_text(product: Mapping[str, Any]) -> str:
    """Concatenate the product fields that can carry shelf-life advice."""
    parts = []
    for field in PRODUCT_TEXT_FIELDS:
        value = product.get(field)
        if not value:
            continue
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(v) for v in value)
        parts.append(str(value))
    return " \n ".join(parts)


def shelf_life_from_product(product: Optional[Mapping[str, Any]]) -> Optional[int]:
    """Shelf-life hint for an Open Food Facts product record."""
    if not product:
        return None
    return parse_shelf_life_days(product_text(product))
