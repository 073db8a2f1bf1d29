"""Result types shared by the text parsers and the offset learner."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ParseError(str, Enum):
    """Why a parser or lookup produced no value."""

    NOT_FOUND = "not_found"  # Nothing in the input looked like a value
    MALFORMED = "malformed"  # Tokens matched but none were legal
    STORAGE_UNAVAILABLE = "storage_unavailable"  # Key-value store failed


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """A value or the reason there isn't one."""

    value: Optional[T] = None
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ParseResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ParseError) -> "ParseResult[T]":
        return cls(error=error)

    def unwrap_or(self, default: T) -> T:
        """Return the value, or ``default`` when the result is an error."""
        return self.value if self.ok else default
