"""Batch pipeline: resolve, read, enrich and filter every file under a path."""

import logging
from typing import Generator

from logz.config import DEFAULT_DATE_FORMAT
from logz.filters import FilterSpec, matches
from logz.parser import LogRecord, enrich_line
from logz.reader import read_multiple
from logz.resolver import resolve

logger = logging.getLogger(__name__)


def iter_records(
    path: str,
    spec: FilterSpec | None = None,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> Generator[LogRecord, None, None]:
    """Yield matching records from every file under *path*, in resolver order.

    Any LogIOError aborts the whole run at the offending file.
    """
    spec = spec or FilterSpec()
    sources = resolve(path)
    logger.debug("Reading %d file(s) under %s", len(sources), path)
    for line, source in read_multiple(sources):
        record = enrich_line(line, source.path, date_format)
        if matches(spec, record):
            yield record


def collect_records(
    path: str,
    spec: FilterSpec | None = None,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> list[LogRecord]:
    """Materialize iter_records before handing results downstream."""
    return list(iter_records(path, spec, date_format))
