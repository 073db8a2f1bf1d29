"""
Expiry date extraction from OCR text.

Labels print dates in many shapes:

    BEST BEFORE 15/12/25
    USE BY 15.12.2025
    BB 15 DEC 25
    EXP DEC 15 2025
    151225

Each rule in DATE_RULES pairs a regex with an extractor that turns a match
into a (day, month, year) candidate. Every rule runs over the whole text,
every legal candidate gets a score, and the best score wins:

    score = 1000 - |days from today|
            + 500 if the date is after today
            + 200 if it is within five years of today

Numeric triples are ambiguous (03/04/2025). When neither of the first two
numbers is above 12 the date is read day-first.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterator, Optional

from shelfscan.models.parsing import ParseError, ParseResult

logger = logging.getLogger(__name__)

MIN_YEAR = 1900
MAX_YEAR = 2100
TWO_DIGIT_YEAR_PIVOT = 50  # 50-99 -> 1900s, 00-49 -> 2000s

FUTURE_BONUS = 500
NEAR_BONUS = 200
NEAR_WINDOW_DAYS = 365 * 5

# Keyed by three letter prefix; "december" and "dec" both capture "dec"
MONTH_NAMES = {
    "jan": 0, "feb": 1, "mar": 2, "apr": 3, "may": 4, "jun": 5,
    "jul": 6, "aug": 7, "sep": 8, "oct": 9, "nov": 10, "dec": 11,
}

_MONTH = r"(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*"


@dataclass
class DateCandidate:
    """One (day, month, year) reading of a matched token. Month is 0-11."""

    day: int
    month: int
    year: int
    score: float = 0.0

    def in_range(self) -> bool:
        return (
            1 <= self.day <= 31
            and 0 <= self.month <= 11
            and MIN_YEAR <= self.year <= MAX_YEAR
        )

    def to_date(self) -> Optional[date]:
        """Calendar date, or None if the components don't form one (31/02)."""
        if not self.in_range():
            return None
        try:
            return date(self.year, self.month + 1, self.day)
        except ValueError:
            return None


def expand_year(value: int) -> int:
    """Expand a two digit year around the pivot. Longer years pass through."""
    if value >= 100:
        return value
    return 1900 + value if value >= TWO_DIGIT_YEAR_PIVOT else 2000 + value


# =============================================================================
# Extractors
# =============================================================================


def _numeric_triple(match: re.Match) -> Optional[DateCandidate]:
    first, second, last = (int(g) for g in match.groups())

    if last >= 1000:
        # DD/MM/YYYY unless only MM/DD/YYYY is possible
        if second > 12 and first <= 12:
            return DateCandidate(day=second, month=first - 1, year=last)
        return DateCandidate(day=first, month=second - 1, year=last)

    year = expand_year(last)
    if first > 12:
        day, month = first, second
    elif second > 12:
        day, month = second, first
    else:
        day, month = first, second
    return DateCandidate(day=day, month=month - 1, year=year)


def _year_first(match: re.Match) -> Optional[DateCandidate]:
    year, month, day = (int(g) for g in match.groups())
    return DateCandidate(day=day, month=month - 1, year=year)


def _day_month_name(match: re.Match) -> Optional[DateCandidate]:
    day, month_name, year = match.groups()
    month = MONTH_NAMES.get(month_name)
    if month is None:
        return None
    return DateCandidate(day=int(day), month=month, year=expand_year(int(year)))


def _month_name_day(match: re.Match) -> Optional[DateCandidate]:
    month_name, day, year = match.groups()
    month = MONTH_NAMES.get(month_name)
    if month is None:
        return None
    return DateCandidate(day=int(day), month=month, year=expand_year(int(year)))


def _compact(match: re.Match) -> Optional[DateCandidate]:
    day, month, year = (int(g) for g in match.groups())
    return DateCandidate(day=day, month=month - 1, year=expand_year(year))


# =============================================================================
# Rules
# =============================================================================


@dataclass(frozen=True)
class DateRule:
    """A date token pattern and the extractor that reads its groups."""

    name: str
    pattern: re.Pattern
    extract: Callable[[re.Match], Optional[DateCandidate]]


DATE_RULES: list[DateRule] = [
    DateRule(
        "numeric_slash",
        re.compile(r"\b(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})\b"),
        _numeric_triple,
    ),
    DateRule(
        "year_first",
        re.compile(r"\b(\d{4})[/.\-](\d{1,2})[/.\-](\d{1,2})\b"),
        _year_first,
    ),
    DateRule(
        "numeric_dot",
        re.compile(r"\b(\d{1,2})\.(\d{1,2})\.(\d{2,4})\b"),
        _numeric_triple,
    ),
    DateRule(
        "day_month_name",
        re.compile(r"\b(\d{1,2})(?:st|nd|rd|th)?[\s\-]+" + _MONTH + r"[\s\-]+(\d{2,4})\b"),
        _day_month_name,
    ),
    DateRule(
        "month_name_day",
        re.compile(r"\b" + _MONTH + r"\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{2,4})\b"),
        _month_name_day,
    ),
    DateRule(
        "compact_ddmmyy",
        re.compile(r"\b(\d{2})(\d{2})(\d{2})\b"),
        _compact,
    ),
    DateRule(
        "compact_ddmmyyyy",
        re.compile(r"\b(\d{2})(\d{2})(\d{4})\b"),
        _compact,
    ),
]


def normalize_text(text: str) -> str:
    """Collapse whitespace and lowercase."""
    return re.sub(r"\s+", " ", text).lower().strip()


def iter_candidates(
    text: str,
    rules: list[DateRule] = DATE_RULES,
) -> Iterator[tuple[DateRule, DateCandidate]]:
    """Yield every raw candidate, in rule order then match order."""
    clean = normalize_text(text)
    for rule in rules:
        for match in rule.pattern.finditer(clean):
            candidate = rule.extract(match)
            if candidate is not None:
                yield rule, candidate


def score_date(value: date, today: date) -> float:
    """Score a legal date against today."""
    days_diff = abs((value - today).days)
    score = 1000.0 - days_diff
    if value > today:
        score += FUTURE_BONUS
    if days_diff < NEAR_WINDOW_DAYS:
        score += NEAR_BONUS
    return score


def score_candidates(text: str, today: Optional[date] = None) -> list[DateCandidate]:
    """All legal candidates in ``text`` with their scores filled in."""
    today = today or date.today()
    scored = []
    for _rule, candidate in iter_candidates(text):
        value = candidate.to_date()
        if value is None:
            continue
        candidate.score = score_date(value, today)
        scored.append(candidate)
    return scored


def extract_expiry_date(text: Optional[str], today: Optional[date] = None) -> ParseResult[date]:
    """
    Find the most plausible expiry date in OCR text.

    Returns NOT_FOUND when nothing date-like is present and MALFORMED when
    date-like tokens were found but none is a real calendar date.

    There is no minimum score: the best legal candidate is returned even when
    its score is zero or negative, so a lone old date such as "01/01/99" is
    still returned (as 1999-01-01) rather than treated as missing.
    """
    if not text or not isinstance(text, str):
        return ParseResult.failure(ParseError.NOT_FOUND)

    today = today or date.today()
    matched = False
    best: Optional[date] = None
    best_score = 0.0

    for rule, candidate in iter_candidates(text):
        matched = True
        value = candidate.to_date()
        if value is None:
            logger.debug(f"Rejected {rule.name} candidate {candidate}")
            continue

        score = score_date(value, today)
        if best is None or score > best_score:
            best = value
            best_score = score

    if best is not None:
        return ParseResult.success(best)
    if matched:
        return ParseResult.failure(ParseError.MALFORMED)
    return ParseResult.failure(ParseError.NOT_FOUND)


def parse_expiry_date(text: Optional[str], today: Optional[date] = None) -> Optional[str]:
    """Best expiry date in ``text`` as ``yyyy-mm-dd``, or None."""
    result = extract_expiry_date(text, today)
    return result.value.isoformat() if result.ok else None


def parse_date_token(token: str) -> Optional[date]:
    """First legal date in a short token (a receipt date stamp), unscored."""
    for _rule, candidate in iter_candidates(token):
        value = candidate.to_date()
        if value is not None:
            return value
    return None
