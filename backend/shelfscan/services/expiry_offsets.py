"""
Learned expiry offsets.

When a user accepts or edits a predicted expiry date we remember the
difference, in days, for that product's brand and category. The next
prediction for the same "brand|category" key is shifted by it.

All offsets live in one JSON document, {"tesco|dairy": 3, ...}, that is
loaded and saved whole. The last learning event for a key wins.
"""

import json
import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from shelfscan.config import get_settings
from shelfscan.models.parsing import ParseError, ParseResult
from shelfscan.services.storage import KeyValueStore, SqliteKeyValueStore, StorageError

logger = logging.getLogger(__name__)
settings = get_settings()

EXPIRY_OFFSET_KEY = "expiry_offsets_v1"
OFFSETS_DB_NAME = "expiry_offsets.db"


def normalize_key(value: Optional[str]) -> str:
    return str(value or "").strip().lower()


def make_learn_key(brand: Optional[str], category: Optional[str]) -> str:
    """Learning key for a product: lowercased, trimmed "brand|category"."""
    return normalize_key(f"{brand or ''}|{category or ''}")


def compute_offset(date_added: date, predicted: date, chosen: date) -> int:
    """Days between the chosen and predicted expiry, both counted from date_added."""
    return (chosen - date_added).days - (predicted - date_added).days


def _coerce_offset(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


class ExpiryOffsetLearner:
    """Reads, writes and learns per brand|category expiry offsets."""

    def __init__(self, store: KeyValueStore, max_offset_days: Optional[int] = None):
        self.store = store
        self.max_offset_days = (
            max_offset_days if max_offset_days is not None else settings.max_learned_offset_days
        )

    async def load_offsets(self) -> ParseResult[dict[str, int]]:
        """Load the whole offset map. Unreadable documents load as empty."""
        try:
            raw = await self.store.get(EXPIRY_OFFSET_KEY)
        except StorageError as e:
            logger.warning(f"Offset store unavailable: {e}")
            return ParseResult.failure(ParseError.STORAGE_UNAVAILABLE)

        if not raw:
            return ParseResult.success({})

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable expiry offset document")
            return ParseResult.success({})

        if not isinstance(data, dict):
            return ParseResult.success({})

        offsets = {}
        for key, value in data.items():
            offset = _coerce_offset(value)
            if offset is not None:
                offsets[key] = offset
        return ParseResult.success(offsets)

    async def lookup_offset(self, key: str) -> ParseResult[int]:
        """Offset for ``key``, NOT_FOUND if never learned."""
        loaded = await self.load_offsets()
        if not loaded.ok:
            return ParseResult.failure(loaded.error)

        key = normalize_key(key)
        if key not in loaded.value:
            return ParseResult.failure(ParseError.NOT_FOUND)
        return ParseResult.success(loaded.value[key])

    async def get_offset(self, key: str) -> int:
        """Offset for ``key``; 0 when unknown or when storage is down."""
        return (await self.lookup_offset(key)).unwrap_or(0)

    async def set_offset(self, key: str, days: int) -> ParseResult[int]:
        """Overwrite the offset for ``key``."""
        loaded = await self.load_offsets()
        if not loaded.ok:
            return ParseResult.failure(loaded.error)

        offsets = loaded.value
        offsets[normalize_key(key)] = int(days)

        try:
            await self.store.set(EXPIRY_OFFSET_KEY, json.dumps(offsets, sort_keys=True))
        except StorageError as e:
            logger.warning(f"Could not save expiry offsets: {e}")
            return ParseResult.failure(ParseError.STORAGE_UNAVAILABLE)

        return ParseResult.success(int(days))

    async def learn(
        self,
        key: str,
        date_added: date,
        predicted: date,
        chosen: date,
    ) -> Optional[int]:
        """
        Record how far the user moved a prediction.

        Returns the stored offset, or None when the offset is out of bounds
        or could not be saved.
        """
        offset = compute_offset(date_added, predicted, chosen)

        if abs(offset) > self.max_offset_days:
            logger.info(f"Ignoring offset {offset}d for '{key}' (limit {self.max_offset_days}d)")
            return None

        result = await self.set_offset(key, offset)
        if not result.ok:
            return None

        logger.debug(f"Learned expiry offset {offset}d for '{normalize_key(key)}'")
        return offset

    async def apply(self, key: str, predicted: date) -> tuple[date, int]:
        """Shift a prediction by the learned offset for ``key``."""
        offset = await self.get_offset(key)
        return predicted + timedelta(days=offset), offset


# Singleton
_offset_learner: Optional[ExpiryOffsetLearner] = None


def offsets_db_path() -> Path:
    """SQLite file holding the offset document, under the data directory."""
    return Path(settings.data_dir) / OFFSETS_DB_NAME


def get_offset_learner() -> ExpiryOffsetLearner:
    """Get offset learner singleton backed by SQLite."""
    global _offset_learner
    if _offset_learner is None:
        _offset_learner = ExpiryOffsetLearner(SqliteKeyValueStore(offsets_db_path()))
    return _offset_learner


async def init_offset_learner():
    """Open the singleton's store at startup. A failure is logged; reads then return 0."""
    learner = get_offset_learner()
    if not isinstance(learner.store, SqliteKeyValueStore):
        return
    try:
        await learner.store.init()
    except StorageError as e:
        logger.warning(f"Offset store unavailable at startup: {e}")


async def close_offset_learner():
    """Close the singleton's store, if one was opened."""
    global _offset_learner
    if _offset_learner is not None and isinstance(_offset_learner.store, SqliteKeyValueStore):
        await _offset_learner.store.close()
    _offset_learner = None
