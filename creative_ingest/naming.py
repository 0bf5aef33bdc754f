"""Encoding and decoding of structured creative names.

Creative names follow the ``YYYYMMDD_A1_A2_B_C_D`` layout: a compact date
followed by five categorical tags, all joined with underscores.
"""
from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Callable, Dict, Iterable, List, Optional, Union

from .models import StructuredName
from .state_router import FoldState, StateRouter

LOGGER = logging.getLogger(__name__)

SEPARATOR = "_"
TAG_FIELDS = ("a1", "a2", "b", "c", "d")

_DATE_SEGMENT = re.compile(r"[0-9]{8}")
_FILESYSTEM_UNSAFE = re.compile(r"[<>:\"/\\|?*\x00-\x1f]")
MAX_NAME_LENGTH = 255
_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w-]")

Clock = Callable[[], date]
DateLike = Union[str, date, None]


class NamingError(ValueError):
    """Base class for invalid name construction requests."""


class MissingFieldError(NamingError):
    """Raised when a categorical tag is missing or blank."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Creative names require a non-empty '{field.upper()}' tag")
        self.field = field


class InvalidDateError(NamingError):
    """Raised when the supplied date is not a real calendar date."""


class DuplicateNameError(NamingError):
    """Raised when a batch of names contains collisions after encoding."""

    def __init__(self, duplicates: Iterable[str]) -> None:
        self.duplicates = sorted(set(duplicates))
        super().__init__(f"Generated names are not unique: {', '.join(self.duplicates)}")


def sanitize(value: str) -> str:
    """Normalise a categorical tag so it is safe to embed in a name."""

    cleaned = _WHITESPACE.sub(SEPARATOR, value.strip())
    return _NON_WORD.sub(SEPARATOR, cleaned)


def encode(name: StructuredName, *, clock: Clock = date.today) -> str:
    """Render ``name`` as ``YYYYMMDD_A1_A2_B_C_D``.

    Parameters
    ----------
    name:
        Fields to encode. When ``name.date`` is ``None`` the value returned by
        ``clock`` is used instead.
    clock:
        Callable returning today's date. Injected so callers and tests can pin
        the date.
    """

    tags: List[str] = []
    for field in TAG_FIELDS:
        value = getattr(name, field)
        if value is None or not str(value).strip():
            raise MissingFieldError(field)
        tags.append(sanitize(str(value)))

    day = _coerce_date(name.date) if name.date is not None else clock()
    return SEPARATOR.join([day.strftime("%Y%m%d"), *tags])


def batch_encode(names: Iterable[StructuredName], *, clock: Clock = date.today) -> List[str]:
    """Encode every name and require the resulting batch to be unique."""

    encoded = [encode(name, clock=clock) for name in names]

    seen = set()
    duplicates = []
    for value in encoded:
        if value in seen:
            duplicates.append(value)
        seen.add(value)
    if duplicates:
        raise DuplicateNameError(duplicates)

    return encoded


def decode(raw: object) -> Optional[StructuredName]:
    """Parse ``raw`` into a :class:`StructuredName` or return ``None``."""

    if not isinstance(raw, str):
        return None

    cleaned = raw.strip()
    if not cleaned:
        return None

    parts = cleaned.split(SEPARATOR)
    if len(parts) != 6:
        return None

    date_segment, a1, a2, b, c, d = parts
    if not _DATE_SEGMENT.fullmatch(date_segment):
        return None

    day = _parse_compact_date(date_segment)
    if day is None:
        LOGGER.debug("Rejecting name %r: %s is not a calendar date", cleaned, date_segment)
        return None

    return StructuredName(date=day.isoformat(), a1=a1, a2=a2, b=b, c=c, d=d)


def validate(raw: object) -> bool:
    """Return ``True`` when ``raw`` decodes to a structured name."""

    return decode(raw) is not None


def check_name(raw: str) -> List[str]:
    """Return every problem found in ``raw``; an empty list means it is usable.

    Unlike :func:`decode`, which only answers yes or no, this collects all
    diagnostics so they can be shown to whoever typed the name. Besides the
    layout it checks that the name can be used as a file name.
    """

    problems: List[str] = []
    parts = raw.split(SEPARATOR)
    if len(parts) != 6:
        problems.append("Name must have exactly 6 underscore-separated parts")

    date_segment = parts[0]
    if date_segment and (
        not _DATE_SEGMENT.fullmatch(date_segment) or _parse_compact_date(date_segment) is None
    ):
        problems.append("First part must be a YYYYMMDD calendar date")

    if len(raw) > MAX_NAME_LENGTH:
        problems.append(f"Name is longer than {MAX_NAME_LENGTH} characters")
    if _FILESYSTEM_UNSAFE.search(raw):
        problems.append("Name contains characters that are not allowed in file names")
    return problems


def full_name(name: StructuredName) -> str:
    """Join ``name`` back together without sanitising or requiring a date."""

    segments = [str(getattr(name, field) or "") for field in TAG_FIELDS]
    if name.date is not None:
        segments.insert(0, _coerce_date(name.date).strftime("%Y%m%d"))
    return SEPARATOR.join(segments)


def matches_search_query(name: StructuredName, query: str) -> bool:
    """Case-insensitive substring search over the whole name and each tag."""

    needle = query.lower()
    if needle in full_name(name).lower():
        return True
    return any(needle in str(getattr(name, field) or "").lower() for field in TAG_FIELDS)


def sort_by_date(names: Iterable[StructuredName], *, ascending: bool = False) -> List[StructuredName]:
    """Order names newest first (or oldest first); undated names go last."""

    dated: List[StructuredName] = []
    undated: List[StructuredName] = []
    for name in names:
        (undated if name.date is None else dated).append(name)
    dated.sort(key=lambda name: _coerce_date(name.date), reverse=not ascending)
    return dated + undated


def group_by_date(names: Iterable[StructuredName]) -> Dict[Optional[str], List[StructuredName]]:
    """Bucket names by their ISO date, keeping first-seen order."""

    groups: Dict[Optional[str], List[StructuredName]] = {}
    for name in names:
        groups.setdefault(name.date, []).append(name)
    return groups


def group_by_product_state(
    names: Iterable[StructuredName], router: Optional[StateRouter] = None
) -> Dict[Optional[FoldState], List[StructuredName]]:
    """Bucket names by the fold state of their action tag.

    Names whose action is not mapped by ``router`` are collected under ``None``.
    """

    if router is None:
        router = StateRouter()
    groups: Dict[Optional[FoldState], List[StructuredName]] = {}
    for name in names:
        groups.setdefault(router.classify(name.b), []).append(name)
    return groups


def _parse_compact_date(segment: str) -> Optional[date]:
    try:
        return date(int(segment[0:4]), int(segment[4:6]), int(segment[6:8]))
    except ValueError:
        return None


def _coerce_date(value: DateLike) -> date:
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError as exc:
        raise InvalidDateError(f"'{value}' is not a valid YYYY-MM-DD date") from exc


__all__ = [
    "DuplicateNameError",
    "InvalidDateError",
    "MissingFieldError",
    "NamingError",
    "batch_encode",
    "check_name",
    "decode",
    "encode",
    "full_name",
    "group_by_date",
    "group_by_product_state",
    "matches_search_query",
    "sanitize",
    "sort_by_date",
    "validate",
]
