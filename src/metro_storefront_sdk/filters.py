"""Search, status and date filtering for list pages, plus stable sorting.

All functions are pure: inputs are never mutated and surviving records keep
their relative order.

Known limitation: for ``record["date"]`` values whose first segment is 12 or
less (``"05/06/2024"``) the segment is read as the month, so a day-first value
in that range is misread. Only a first segment above 12 switches to
day/month order.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

ALL_STATUSES = "all"

DEFAULT_STATUS_MAP = {
    "pending": "Chờ duyệt",
    "approved": "Đã duyệt",
    "rejected": "Từ chối",
}

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")
_FRACTION = re.compile(r"(?<=\d\d:\d\d:\d\d)\.(\d+)")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class FilterSpec:
    search_query: str = ""
    status_filter: str | None = ALL_STATUSES
    date_filter: str | None = None
    search_fields: tuple[str, ...] = ("name", "title")
    status_field: str = "status"
    status_map: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_STATUS_MAP))


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _leading_int(value: Any) -> int | None:
    match = _LEADING_INT.match(str(value))
    return int(match.group()) if match else None


def _safe_date(year: int | None, month: int | None, day: int | None) -> date | None:
    if year is None or month is None or day is None:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_filter_date(text: str | None) -> date | None:
    """Parse ``mm/dd/yyyy``; anything else, including impossible dates, is None."""
    if not text or not isinstance(text, str):
        return None
    parts = text.split("/")
    if len(parts) != 3:
        return None
    month, day, year = (_leading_int(part) for part in parts)
    if not month or not day or not year:
        return None
    return _safe_date(year, month, day)


def parse_iso_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    # fromisoformat before 3.11 only takes 3 or 6 fractional digits
    text = _FRACTION.sub(lambda match: "." + match.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _slash_parts(value: Any) -> list[str] | None:
    if value is None or value == "":
        return None
    parts = str(value).split("/")
    return parts if len(parts) == 3 else None


def record_date(record: Any) -> date | None:
    """First usable date among ``createdAt``, ``date`` and ``createDate``."""
    created_at = parse_iso_datetime(_field(record, "createdAt"))
    if created_at is not None:
        return created_at.date()

    parts = _slash_parts(_field(record, "date"))
    if parts:
        first, second, year = (_leading_int(part) for part in parts)
        if first is not None and first > 12:
            found = _safe_date(year, second, first)
        else:
            found = _safe_date(year, first, second)
        if found is not None:
            return found

    parts = _slash_parts(_field(record, "createDate"))
    if parts:
        day, month, year = (_leading_int(part) for part in parts)
        return _safe_date(year, month, day)
    return None


def matches_status(record: Any, spec: FilterSpec) -> bool:
    if spec.status_filter == ALL_STATUSES:
        return True
    if not spec.status_filter:
        return False
    expected = spec.status_map.get(spec.status_filter)
    if expected is None:
        expected = spec.status_map.get(spec.status_filter.lower())
    return expected is not None and _field(record, spec.status_field) == expected


def matches_keyword(record: Any, spec: FilterSpec) -> bool:
    if not spec.search_query:
        return True
    probe = spec.search_query.lower()
    for name in spec.search_fields:
        value = _field(record, name)
        if not value:
            continue
        if probe in str(value).lower():
            return True
    return False


def matches_date(record: Any, spec: FilterSpec, wanted: date | None = None) -> bool:
    wanted = wanted or parse_filter_date(spec.date_filter)
    if wanted is None:
        return True
    found = record_date(record)
    if found is None:
        return True
    return found == wanted


def filter_records(records: Any, spec: FilterSpec | None = None) -> list[Any]:
    if not isinstance(records, (list, tuple)):
        return []
    spec = spec or FilterSpec()
    wanted = parse_filter_date(spec.date_filter)
    return [
        record
        for record in records
        if matches_status(record, spec) and matches_keyword(record, spec) and matches_date(record, spec, wanted)
    ]


def sort_records(records: Sequence[Any], key: str, descending: bool = False) -> list[Any]:
    """Stable sort on ``key``; records without the key keep their order at the end."""
    present = [record for record in records if _field(record, key) is not None]
    missing = [record for record in records if _field(record, key) is None]
    present.sort(key=lambda record: _field(record, key), reverse=descending)
    return present + missing


def _timestamp(value: Any) -> float:
    parsed = parse_iso_datetime(value)
    if parsed is None:
        return _EPOCH.timestamp()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def newest_first(records: Sequence[Any], date_field: str = "createdAt") -> list[Any]:
    return sorted(records, key=lambda record: _timestamp(_field(record, date_field)), reverse=True)


class Debouncer:
    """Search-box debounce: only the latest value pushed within the window wins."""

    def __init__(self, wait_seconds: float = 0.3) -> None:
        self.wait_seconds = wait_seconds
        self._generation = 0

    async def push(self, value: Any) -> Any | None:
        self._generation += 1
        generation = self._generation
        if self.wait_seconds > 0:
            await asyncio.sleep(self.wait_seconds)
        if generation != self._generation:
            return None
        return value
