"""Filter predicates for log records: time bounds, levels, substring, regex."""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime

from logz.config import DEFAULT_DATE_FORMAT
from logz.errors import ConfigError
from logz.parser import LogRecord, parse_datetime

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterSpec:
    from_ts: datetime | None = None
    to_ts: datetime | None = None
    levels: frozenset[str] = field(default_factory=frozenset)
    substring: str | None = None
    pattern: re.Pattern | None = None


def _parse_bound(value: str, date_format: str, field_name: str) -> datetime:
    try:
        return parse_datetime(value.strip(), date_format)
    except ValueError as e:
        raise ConfigError(field_name, value, f"does not match date format {date_format!r} ({e})") from e


def build_filter_spec(args) -> FilterSpec:
    """Compile the filter options of parsed args into a FilterSpec.

    Attributes read: date_format, from_ts, to_ts, levels, substring_match,
    regex. Missing attributes impose no constraint. Raises ConfigError for a
    bound that does not parse or a pattern that does not compile.
    """
    date_format = getattr(args, "date_format", None) or DEFAULT_DATE_FORMAT

    from_ts = getattr(args, "from_ts", None)
    if from_ts is not None:
        from_ts = _parse_bound(from_ts, date_format, "--from-ts")

    to_ts = getattr(args, "to_ts", None)
    if to_ts is not None:
        to_ts = _parse_bound(to_ts, date_format, "--to-ts")

    pattern = getattr(args, "regex", None)
    if pattern is not None:
        try:
            pattern = re.compile(pattern)
        except re.error as e:
            raise ConfigError("--regex", pattern, f"failed to compile ({e})") from e

    levels = frozenset(level.strip().upper() for level in getattr(args, "levels", None) or ())

    spec = FilterSpec(
        from_ts=from_ts,
        to_ts=to_ts,
        levels=levels,
        substring=getattr(args, "substring_match", None),
        pattern=pattern,
    )
    logger.debug("Built filter spec: %s", spec)
    return spec


def matches(spec: FilterSpec, record: LogRecord) -> bool:
    """True if *record* passes every configured predicate of *spec*."""
    if spec.from_ts is not None or spec.to_ts is not None:
        if record.timestamp is None:
            return False
        if spec.from_ts is not None and record.timestamp < spec.from_ts:
            return False
        if spec.to_ts is not None and record.timestamp > spec.to_ts:
            return False

    if spec.levels and record.level not in spec.levels:
        return False

    if spec.substring is not None and spec.substring not in record.raw:
        return False

    if spec.pattern is not None and not spec.pattern.search(record.raw):
        return False

    return True
