"""Inclusive date-window selection for orders and transactions."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from typing import Any, TypeVar

from shop_ledger.models import Order, Transaction

T = TypeVar("T")


def _aware(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


@dataclass(frozen=True)
class Period:
    """A closed ``[start, end]`` window. Either bound may be open (None)."""

    start: datetime | None = None
    end: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _aware(self.start))
        object.__setattr__(self, "end", _aware(self.end))
        if self.start and self.end and self.start > self.end:
            raise ValueError(
                f"Period start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    @classmethod
    def unbounded(cls) -> Period:
        """Return a window that admits every record."""
        return cls()

    @classmethod
    def from_dates(cls, start: date | None = None, end: date | None = None) -> Period:
        """Build a window covering whole calendar days, both ends included."""
        return cls(
            start=datetime.combine(start, time.min, tzinfo=UTC) if start else None,
            end=datetime.combine(end, time.max, tzinfo=UTC) if end else None,
        )

    @property
    def is_bounded(self) -> bool:
        return self.start is not None or self.end is not None

    def contains(self, timestamp: datetime | None) -> bool:
        """Return True if timestamp falls inside the window.

        Records without a timestamp only match an unbounded window.
        """
        if timestamp is None:
            return not self.is_bounded
        timestamp = _aware(timestamp)
        if self.start is not None and timestamp < self.start:
            return False
        if self.end is not None and timestamp > self.end:
            return False
        return True


def record_timestamp(record: Any) -> datetime | None:
    """Default timestamp accessor for orders and transactions."""
    if isinstance(record, Order):
        return record.order_date
    if isinstance(record, Transaction):
        return record.created_at
    return getattr(record, "created_at", None)


def filter_by_period(
    records: Iterable[T],
    period: Period | None,
    key: Callable[[T], datetime | None] = record_timestamp,
) -> list[T]:
    """Return the records whose timestamp lies in period, in original order."""
    if period is None or not period.is_bounded:
        return list(records)
    return [record for record in records if period.contains(key(record))]
