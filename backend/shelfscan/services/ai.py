"""AI service - OpenAI categorization of receipt line items."""

import json
import logging
import re
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from shelfscan.config import get_settings
from shelfscan.services.receipt_parser import ParsedLineItem

logger = logging.getLogger(__name__)
settings = get_settings()

FALLBACK_CATEGORY = "other"

ITEM_CATEGORIES = [
    "dairy", "meat", "fish", "vegetables", "fruits", "bread", "canned-goods",
    "dry-goods", "beverages", "frozen", "snacks", "condiments", "bakery",
    "household", "other",
]


class AIService:
    """OpenAI-powered helpers for receipt import."""

    def __init__(self, client: Optional[AsyncOpenAI] = None):
        self.client = client
        if self.client is None and settings.ai_categorization_enabled:
            self.client = AsyncOpenAI(api_key=settings.openai_api_key)

    @property
    def is_enabled(self) -> bool:
        return self.client is not None

    def _build_prompt(self, items: list[ParsedLineItem]) -> str:
        names = "\n".join(item.name for item in items)
        return (
            "Categorize each item below into a food category "
            f"({', '.join(ITEM_CATEGORIES)}).\n"
            'Return a JSON array with objects: {"name": string, "category": string}, '
            "in the same order as the items.\n"
            f"Items:\n{names}"
        )

    @staticmethod
    def _parse_categories(content: str, count: int) -> list[str]:
        """Pull the JSON array out of a reply; pad or coerce anything unusable."""
        match = re.search(r"\[.*\]", content or "", re.DOTALL)
        if not match:
            return [FALLBACK_CATEGORY] * count

        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError:
            return [FALLBACK_CATEGORY] * count

        if not isinstance(parsed, list):
            return [FALLBACK_CATEGORY] * count

        categories = []
        for idx in range(count):
            entry = parsed[idx] if idx < len(parsed) else None
            category = entry.get("category") if isinstance(entry, dict) else None
            categories.append(str(category).lower() if category else FALLBACK_CATEGORY)
        return categories

    async def categorize_line_items(self, items: list[ParsedLineItem]) -> list[ParsedLineItem]:
        """Set ``category`` on each item. Failures leave everything as 'other'."""
        if not items:
            return []

        if not self.is_enabled:
            for item in items:
                item.category = FALLBACK_CATEGORY
            return items

        try:
            response = await self.client.chat.completions.create(
                model=settings.openai_model,
                messages=[{"role": "user", "content": self._build_prompt(items)}],
                temperature=0,
                timeout=30,
            )
            content = response.choices[0].message.content or "[]"
            categories = self._parse_categories(content, len(items))
        except OpenAIError as e:
            logger.warning(f"AI categorization failed: {e}")
            categories = [FALLBACK_CATEGORY] * len(items)

        for item, category in zip(items, categories):
            item.category = category
        return items


# Singleton
_ai_service: Optional[AIService] = None


def get_ai_service() -> AIService:
    """Get AI service singleton."""
    global _ai_service
    if _ai_service is None:
        _ai_service = AIService()
    return _ai_service
