"""Statistics: level counts, records per hour and per source, time span."""

import json
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from logz.parser import LEVEL_PRIORITY, LogRecord

UNKNOWN_LEVEL = "UNKNOWN"


@dataclass
class LogStats:
    total_records: int = 0
    level_counts: dict[str, int] = field(default_factory=dict)
    records_per_hour: dict[str, int] = field(default_factory=dict)
    source_counts: dict[str, int] = field(default_factory=dict)
    without_timestamp: int = 0
    first_timestamp: datetime | None = None
    last_timestamp: datetime | None = None


def _level_sort_key(item: tuple[str, int]):
    level, _count = item
    return (level == UNKNOWN_LEVEL, LEVEL_PRIORITY.get(level, 0), level)


def compute_stats(records: Iterable[LogRecord]) -> LogStats:
    """Consume a record stream and produce aggregated statistics."""
    level_counter = Counter()
    hour_counter = Counter()
    source_counter = Counter()
    without_ts = 0
    first = last = None
    total = 0

    for record in records:
        total += 1
        level_counter[record.level or UNKNOWN_LEVEL] += 1
        source_counter[record.source] += 1
        if record.timestamp is None:
            without_ts += 1
            continue
        hour_counter[record.timestamp.strftime("%Y-%m-%d %H:00")] += 1
        if first is None or record.timestamp < first:
            first = record.timestamp
        if last is None or record.timestamp > last:
            last = record.timestamp

    return LogStats(
        total_records=total,
        level_counts=dict(sorted(level_counter.items(), key=_level_sort_key)),
        records_per_hour=dict(sorted(hour_counter.items())),
        source_counts=dict(source_counter),
        without_timestamp=without_ts,
        first_timestamp=first,
        last_timestamp=last,
    )


def _iso(ts: datetime | None) -> str | None:
    return ts.isoformat() if ts is not None else None


def format_stats_json(stats: LogStats) -> str:
    """JSON stats output."""
    return json.dumps({
        "total_records": stats.total_records,
        "level_counts": stats.level_counts,
        "records_per_hour": stats.records_per_hour,
        "source_counts": stats.source_counts,
        "without_timestamp": stats.without_timestamp,
        "first_timestamp": _iso(stats.first_timestamp),
        "last_timestamp": _iso(stats.last_timestamp),
    }, indent=2)


def format_stats_markdown(stats: LogStats) -> str:
    """Markdown report with one table per breakdown."""
    lines = ["# Log statistics", ""]
    lines.append(f"- Total records: {stats.total_records}")
    lines.append(f"- Without timestamp: {stats.without_timestamp}")
    lines.append(f"- First timestamp: {_iso(stats.first_timestamp) or '-'}")
    lines.append(f"- Last timestamp: {_iso(stats.last_timestamp) or '-'}")

    for title, header, counts in (
        ("Levels", "Level", stats.level_counts),
        ("Records per hour", "Hour", stats.records_per_hour),
        ("Sources", "Source", stats.source_counts),
    ):
        lines.append("")
        lines.append(f"## {title}")
        lines.append("")
        if not counts:
            lines.append("_none_")
            continue
        lines.append(f"| {header} | Count |")
        lines.append("| --- | ---: |")
        for key, count in counts.items():
            lines.append(f"| {key} | {count} |")

    return "\n".join(lines)
