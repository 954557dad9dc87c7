"""Shared utilities for the portal service."""
from collections.abc import Iterator, Sequence
from datetime import date, datetime, timezone, tzinfo
from typing import TypeVar

T = TypeVar("T")


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def as_utc(ts: datetime) -> datetime:
    """Attach UTC to naive timestamps (SQLite drops tzinfo on read)."""
    return ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts


def local_date(ts: datetime, tz: tzinfo | None = None) -> date:
    """Calendar day of `ts` in `tz` (system local zone when None)."""
    return as_utc(ts).astimezone(tz).date()


def korean_date(d: date) -> str:
    """Format a date the way the Korean prompts expect (e.g. 2026년 3월 5일)."""
    return f"{d.year}년 {d.month}월 {d.day}일"


def batched(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most `size` items."""
    if size < 1:
        raise ValueError("batch size must be positive")
    for start in range(0, len(items), size):
        yield items[start:start + size]
