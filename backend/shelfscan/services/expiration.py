"""
Expiry prediction service.

Predicts expiry dates from a product category (or a shelf-life hint), shifts
them by what we've learned from the user's past corrections, and turns manual
expiry entry into dates.
"""

import logging
import re
from datetime import date, timedelta
from typing import Optional, Literal

from shelfscan.models.expiry import ExpiryPrediction, PendingProduct
from shelfscan.services.expiry_offsets import (
    ExpiryOffsetLearner,
    get_offset_learner,
    make_learn_key,
)

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_DAYS = 7

CATEGORY_EXPIRY_DAYS = {
    "dairy": 7,
    "meat": 3,
    "fish": 2,
    "vegetables": 5,
    "fruits": 4,
    "bread": 3,
    "canned-goods": 365,
    "dry-goods": 180,
    "beverages": 30,
    "frozen": 90,
    "default": DEFAULT_EXPIRY_DAYS,
}

# Checked in order; "frozen peas" is frozen, not vegetables
CATEGORY_KEYWORDS = [
    ("frozen", ["frozen", "ice cream", "ice lolly"]),
    ("canned-goods", ["canned", "tinned", "tin", "can"]),
    ("dairy", ["milk", "cheese", "yogurt", "yoghurt", "cream", "butter", "dairy", "dairies", "egg"]),
    ("meat", ["chicken", "beef", "pork", "meat", "bacon", "sausage", "ham", "lamb", "turkey", "mince"]),
    ("fish", ["fish", "salmon", "shrimp", "prawn", "tuna", "cod", "haddock", "seafood"]),
    ("fruits", ["apple", "banana", "orange", "berry", "berries", "grape", "fruit", "pear", "lemon"]),
    ("vegetables", ["lettuce", "spinach", "carrot", "broccoli", "vegetable", "potato", "potatoes",
                    "tomato", "tomatoes", "onion", "salad", "pepper", "mushroom"]),
    ("bread", ["bread", "bagel", "tortilla", "muffin", "baguette", "bakery", "croissant"]),
    ("beverages", ["juice", "coffee", "tea", "soda", "water", "drink", "beverage", "wine", "beer", "cola"]),
    ("dry-goods", ["pasta", "rice", "flour", "cereal", "oats", "sugar", "lentils", "noodles"]),
]

_CATEGORY_PATTERNS = [
    (category, re.compile(r"\b(?:" + "|".join(re.escape(w) for w in words) + r")s?\b"))
    for category, words in CATEGORY_KEYWORDS
]


def normalize_category(category: Optional[str]) -> str:
    """'Canned Goods' -> 'canned-goods'."""
    return re.sub(r"[\s_]+", "-", (category or "").strip().lower())


def infer_category(text: Optional[str]) -> str:
    """Map a category tag or product name to a known category, else 'default'."""
    normalized = normalize_category(text)
    if normalized in CATEGORY_EXPIRY_DAYS:
        return normalized

    text_lower = (text or "").lower()
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.search(text_lower):
            return category
    return "default"


def predict_expiry_date(
    category: Optional[str],
    custom_days: Optional[int] = None,
    today: Optional[date] = None,
) -> date:
    """Expiry date from a shelf-life hint, else the category default."""
    today = today or date.today()
    days = custom_days or CATEGORY_EXPIRY_DAYS.get(infer_category(category)) or DEFAULT_EXPIRY_DAYS
    return today + timedelta(days=days)


def parse_manual_expiry(text: Optional[str], today: Optional[date] = None) -> Optional[date]:
    """
    Parse what a user typed as an expiry date.

    Accepts DD/MM/YYYY, DD/MM/YY, DD/MM (this year) and YYYY or YY (31 Dec).
    """
    if not text or not text.strip():
        return None

    today = today or date.today()
    parts = [p.strip() for p in text.strip().split("/")]
    if not all(p.isdigit() for p in parts):
        return None

    try:
        if len(parts) == 3:
            dd, mm, yyyy = parts
            if len(yyyy) == 2:
                yyyy = "20" + yyyy
            return date(int(yyyy), int(mm), int(dd))
        if len(parts) == 2:
            dd, mm = parts
            return date(today.year, int(mm), int(dd))
        if len(parts) == 1:
            yyyy = parts[0]
            if len(yyyy) == 2:
                yyyy = "20" + yyyy
            if len(yyyy) != 4:
                return None
            return date(int(yyyy), 12, 31)
    except ValueError:
        return None

    return None


def parse_expiry_input(text: Optional[str], today: Optional[date] = None) -> date:
    """Manual expiry entry, falling back to the default prediction."""
    parsed = parse_manual_expiry(text, today)
    if parsed is not None:
        return parsed
    return predict_expiry_date("default", today=today)


def days_until(expiry: date, today: Optional[date] = None) -> int:
    return (expiry - (today or date.today())).days


def get_status(days_until_expiry: Optional[int]) -> Literal["fresh", "use_soon", "expiring", "expired"]:
    """Get expiration status from days until expiry."""
    if days_until_expiry is None:
        return "fresh"
    if days_until_expiry < 0:
        return "expired"
    if days_until_expiry <= 2:
        return "expiring"
    if days_until_expiry <= 7:
        return "use_soon"
    return "fresh"


class ExpirationService:
    """Category-based expiry prediction with learned per-brand adjustments."""

    def __init__(self, learner: ExpiryOffsetLearner):
        self.learner = learner

    async def predict(
        self,
        category: Optional[str],
        brand: Optional[str] = None,
        shelf_life_days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> ExpiryPrediction:
        """Predict an expiry date and apply any learned offset."""
        today = today or date.today()
        base = predict_expiry_date(category, shelf_life_days, today)
        key = make_learn_key(brand, category)
        predicted, offset = await self.learner.apply(key, base)
        remaining = days_until(predicted, today)

        return ExpiryPrediction(
            category=infer_category(category),
            learn_key=key,
            base_expiry=base,
            offset_days=offset,
            predicted_expiry=predicted,
            days_until_expiry=remaining,
            status=get_status(remaining),
        )

    async def start_pending(
        self,
        name: str,
        brand: Optional[str] = None,
        category: Optional[str] = None,
        barcode: Optional[str] = None,
        shelf_life_days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> PendingProduct:
        """Begin adding a scanned product: predict its expiry and remember the base."""
        today = today or date.today()
        prediction = await self.predict(category, brand, shelf_life_days, today)

        return PendingProduct(
            name=name,
            brand=brand or "",
            category=category or "",
            barcode=barcode,
            date_added=today,
            expiry=prediction.predicted_expiry,
            base_predicted=prediction.base_expiry,
            learn_key=prediction.learn_key,
        )

    async def complete_pending(
        self,
        pending: PendingProduct,
        chosen_expiry: Optional[date] = None,
    ) -> Optional[int]:
        """Finish adding a product; learn from the expiry the user settled on."""
        if pending.base_predicted is None:
            return None

        chosen = chosen_expiry or pending.expiry
        return await self.learner.learn(
            pending.learn_key,
            pending.date_added,
            pending.base_predicted,
            chosen,
        )


# Singleton
_expiration_service: Optional[ExpirationService] = None


def get_expiration_service() -> ExpirationService:
    """Get expiration service singleton."""
    global _expiration_service
    if _expiration_service is None:
        _expiration_service = ExpirationService(get_offset_learner())
    return _expiration_service
