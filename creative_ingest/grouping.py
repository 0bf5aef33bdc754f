"""Utility helpers for de-duplicating and grouping ingested rows."""
from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from .models import IngestedRow


def deduplicate_rows(results: Iterable[IngestedRow]) -> List[IngestedRow]:
    """Keep the first row for every raw name, preserving input order."""

    seen: set[str] = set()
    kept: List[IngestedRow] = []
    for result in results:
        if result.raw_name in seen:
            continue
        seen.add(result.raw_name)
        kept.append(result)
    return kept


def group_rows(
    results: Iterable[IngestedRow],
    key: Callable[[IngestedRow], Optional[str]],
) -> Dict[str, List[IngestedRow]]:
    """Bucket rows by ``key`` in first-seen order, skipping rows keyed ``None``."""

    groups: Dict[str, List[IngestedRow]] = {}
    for result in results:
        group_key = key(result)
        if group_key is None:
            continue
        groups.setdefault(group_key, []).append(result)
    return groups


def tag_key(result: IngestedRow) -> Optional[str]:
    if result.decoded is None:
        return None
    return result.decoded.tag_key


__all__ = ["deduplicate_rows", "group_rows", "tag_key"]
