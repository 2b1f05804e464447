"""Leaderboard Ranking — pure ordering of approved entries by vote count.

Invariants:
    - Only approved entries are ranked
    - Order: vote_count desc, created_at asc, entry id asc
    - Ranks are 1..n, contiguous, no duplicates (ties broken, never shared)

Design Decisions:
    - Entry id as final key: two entries created in the same instant still
      order identically across re-runs
    - Generic over the entry object: service passes ORM rows, tests pass
      lightweight stand-ins
"""

from dataclasses import dataclass
from typing import Any, Iterable

from photo_challenges.core.phase_machine import ensure_utc


@dataclass(frozen=True)
class RankedEntry:
    """One leaderboard row."""
    rank: int
    entry: Any
    vote_count: int


def _sort_key(row: tuple[Any, int]) -> tuple:
    entry, vote_count = row
    return (-vote_count, ensure_utc(entry.created_at), str(entry.id))


def rank_entries(
    rows: Iterable[tuple[Any, int]], limit: int | None = None,
) -> list[RankedEntry]:
    """Rank (entry, vote_count) pairs; unapproved entries are dropped."""
    approved = [row for row in rows if row[0].is_approved]
    ordered = sorted(approved, key=_sort_key)
    if limit is not None:
        ordered = ordered[:limit]
    return [
        RankedEntry(rank=index, entry=entry, vote_count=count)
        for index, (entry, count) in enumerate(ordered, start=1)
    ]
