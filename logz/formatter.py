"""Output formatters: raw text, JSON (NDJSON) and Markdown table rows."""

import json
from typing import Callable

from logz.parser import LogRecord

MARKDOWN_HEADER = "| Timestamp | Level | Source | Line |\n| --- | --- | --- | --- |"


def format_text(record: LogRecord) -> str:
    """Return the trimmed raw log line."""
    return record.raw


def format_json(record: LogRecord) -> str:
    """Return NDJSON: one JSON object per line, compatible with jq."""
    return json.dumps({
        "source": record.source,
        "raw": record.raw,
        "timestamp": record.timestamp.isoformat() if record.timestamp else None,
        "level": record.level,
    })


def _escape_cell(text: str) -> str:
    return text.replace("\\", "\\\\").replace("|", "\\|")


def format_markdown(record: LogRecord) -> str:
    """Return one row of the table started by MARKDOWN_HEADER."""
    ts = record.timestamp.isoformat() if record.timestamp else ""
    return (
        f"| {ts} | {record.level or ''} | {_escape_cell(record.source)} "
        f"| {_escape_cell(record.raw)} |"
    )


FORMATTERS = {
    "text": format_text,
    "json": format_json,
    "markdown": format_markdown,
}


def get_formatter(output_format: str = "text") -> Callable[[LogRecord], str]:
    """Factory that returns the formatter registered under *output_format*."""
    try:
        return FORMATTERS[output_format]
    except KeyError:
        raise ValueError(f"Unsupported output format: {output_format}") from None
