from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..schemas.session import RecordType, TimeRecord, WorkSession

logger = logging.getLogger(__name__)


def resolve_zone(tz: str | None) -> ZoneInfo | None:
    """Return the named zone, or None to mean the system's local time."""
    if not tz:
        return None
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, falling back to system local time", tz)
        return None


def parse_iso(ts: str, tz: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp string.
    If naive, attach the provided tz. Returns None if ts is falsy.
    """
    if not ts:
        return None
    dt = datetime.fromisoformat(ts.replace('Z', '+00:00'))
    zone = resolve_zone(tz)
    if dt.tzinfo is None and zone is not None:
        dt = dt.replace(tzinfo=zone)
    return dt


def to_local(value: datetime | str, tz: str | None) -> datetime:
    dt = parse_iso(value, tz) if isinstance(value, str) else value
    zone = resolve_zone(tz)
    if dt.tzinfo is None:
        # Naive values are wall-clock time in the target zone.
        return dt.replace(tzinfo=zone) if zone is not None else dt.astimezone()
    return dt.astimezone(zone) if zone is not None else dt.astimezone()


def local_date(value: datetime | str, tz: str | None) -> date:
    return to_local(value, tz).date()


def today(tz: str | None) -> date:
    zone = resolve_zone(tz)
    return datetime.now(zone).date() if zone is not None else date.today()


def sort_key(record: TimeRecord) -> datetime:
    ts = record.timestamp
    if ts.tzinfo is None:
        ts = ts.astimezone()
    return ts.astimezone(timezone.utc)


def is_paused(records: Iterable[TimeRecord]) -> bool:
    """True when the latest pause record is a PAUSE_START with no later PAUSE_END."""
    paused = False
    for record in sorted(records, key=sort_key):
        if record.record_type is RecordType.PAUSE_START:
            paused = True
        elif record.record_type is RecordType.PAUSE_END:
            paused = False
    return paused


def pause_seconds(records: Iterable[TimeRecord], now: datetime | None = None) -> float:
    total = 0.0
    started: datetime | None = None
    for record in sorted(records, key=sort_key):
        if record.record_type is RecordType.PAUSE_START and started is None:
            started = sort_key(record)
        elif record.record_type is RecordType.PAUSE_END and started is not None:
            total += (sort_key(record) - started).total_seconds()
            started = None
    if started is not None:
        current = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
        total += max((current - started).total_seconds(), 0.0)
    return total


def worked_seconds(session: WorkSession, now: datetime | None = None) -> float:
    """Elapsed time of a session minus its pauses; open sessions run until ``now``."""
    current = now or datetime.now(timezone.utc)
    start = session.start_time if session.start_time.tzinfo else session.start_time.astimezone()
    end = session.end_time or current
    if end.tzinfo is None:
        end = end.astimezone()
    elapsed = (end - start).total_seconds() - pause_seconds(session.time_records, end)
    return max(elapsed, 0.0)


def format_hours(seconds: float) -> str:
    return f"{max(seconds, 0.0) / 3600:.2f}"
