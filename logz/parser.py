"""Line enrichment: frozen LogRecord plus timestamp and level heuristics."""

from dataclasses import dataclass
from datetime import datetime, timezone

from logz.config import DEFAULT_DATE_FORMAT

# Scan order matters: WARN is checked before WARNING, so "WARNING" lines report WARN.
LEVELS = (
    ("DEBUG", 10),
    ("INFO", 20),
    ("WARN", 30),
    ("WARNING", 30),
    ("ERROR", 40),
    ("CRITICAL", 50),
)
LEVEL_PRIORITY = dict(LEVELS)

MIN_PREFIX = 10
MAX_PREFIX = 40


@dataclass(frozen=True)
class LogRecord:
    source: str
    raw: str
    timestamp: datetime | None = None
    level: str | None = None


def parse_datetime(text: str, date_format: str = DEFAULT_DATE_FORMAT) -> datetime:
    """Parse *text* against *date_format* and return an aware UTC datetime.

    If the format carries an offset (``%z``) the parsed value is converted to
    UTC, otherwise it is taken to already be UTC. Raises ValueError when the
    text does not match the format exactly.
    """
    parsed = datetime.strptime(text, date_format)
    if parsed.tzinfo is not None:
        return parsed.astimezone(timezone.utc)
    return parsed.replace(tzinfo=timezone.utc)


def _splits_number(line: str, length: int) -> bool:
    """True if cutting *line* at *length* falls between two digits."""
    return length < len(line) and line[length - 1].isdigit() and line[length].isdigit()


def extract_timestamp(line: str, date_format: str = DEFAULT_DATE_FORMAT) -> datetime | None:
    """Return the timestamp at the start of *line*, or None.

    Prefixes of 10 up to 40 characters are tried shortest first and the first
    one that parses wins. A prefix that stops in the middle of a number is
    skipped, since strptime accepts single-digit fields and would otherwise
    read ``03:04:0`` out of ``03:04:05``.
    """
    if len(line) < MIN_PREFIX:
        return None

    for length in range(MIN_PREFIX, min(len(line), MAX_PREFIX) + 1):
        if _splits_number(line, length):
            continue
        candidate = line[:length].strip()
        try:
            return parse_datetime(candidate, date_format)
        except ValueError:
            continue
    return None


def detect_level(line: str) -> str | None:
    """Return the first level token, in scan order, found anywhere in *line*."""
    upper = line.upper()
    for token, _priority in LEVELS:
        if token in upper:
            return token
    return None


def enrich_line(line: str, source: str, date_format: str = DEFAULT_DATE_FORMAT) -> LogRecord:
    """Build a LogRecord for an already-trimmed line."""
    return LogRecord(
        source=source,
        raw=line,
        timestamp=extract_timestamp(line, date_format),
        level=detect_level(line),
    )
