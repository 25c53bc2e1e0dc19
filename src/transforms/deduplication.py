"""Business-key deduplication transform.

This module selects one authoritative staged row per business key.
The most recent row wins; ties on recency fall back to the canonical
serialization of the raw values, which keeps the choice stable no
matter how the extract was ordered.
"""

from __future__ import annotations

import json
from collections import defaultdict
from datetime import date
from typing import Callable, Iterable, TypeVar

from core.types import StagedRow

KeyT = TypeVar("KeyT")


def select_latest_per_key(
    rows: Iterable[tuple[KeyT, StagedRow]],
    recency: Callable[[StagedRow], date | None],
) -> list[tuple[KeyT, StagedRow]]:
    """Keep the most recent row for every business key.

    Args:
        rows: Pairs of already-coerced business key and staged row.
            Pairs with a ``None`` key must be filtered out beforehand,
            and keys must be mutually comparable.
        recency: Returns the row's creation date; ``None`` ranks lowest.

    Returns:
        One ``(key, row)`` pair per key, ordered by key.
    """
    groups: dict[KeyT, list[StagedRow]] = defaultdict(list)
    for key, row in rows:
        groups[key].append(row)
    selected: list[tuple[KeyT, StagedRow]] = []
    for key in sorted(groups):
        winner = min(groups[key], key=lambda row: _rank(row, recency))
        selected.append((key, winner))
    return selected


def canonical_row_text(row: StagedRow) -> str:
    """Serialize raw row values into a stable comparison string.

    Args:
        row: Staged row.

    Returns:
        JSON text with sorted keys.
    """
    return json.dumps(dict(row.values), sort_keys=True)


def _rank(row: StagedRow, recency: Callable[[StagedRow], date | None]) -> tuple[int, int, str]:
    """Build an ascending sort rank where the preferred row is smallest."""
    created = recency(row)
    if created is None:
        return (1, 0, canonical_row_text(row))
    return (0, -created.toordinal(), canonical_row_text(row))
