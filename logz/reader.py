"""Generator-based line reading with transparent gzip decompression."""

import gzip
import logging
import zlib
from typing import Generator

from logz.errors import LogIOError
from logz.resolver import SourceFile

logger = logging.getLogger(__name__)

# Truncated gzip streams raise EOFError, corrupt ones zlib.error or BadGzipFile (an OSError).
READ_ERRORS = (OSError, EOFError, zlib.error)


def open_binary(source: SourceFile):
    """Open *source* for byte reading, wrapping it in a gzip decompressor if needed."""
    if source.gzip:
        return gzip.open(source.path, "rb")
    return open(source.path, "rb")


def decode_line(data: bytes) -> str:
    """Decode one line of input and strip surrounding whitespace, terminator included."""
    return data.decode("utf-8", errors="replace").strip()


def read_lines(source: SourceFile) -> Generator[str, None, None]:
    """Yield each trimmed line of a single file.

    Nothing is opened until the first line is requested, so open failures
    surface while iterating, as do read and decompression faults. The file
    handle is closed when the generator is exhausted, fails, or is closed.
    """
    logger.debug("Reading %s (gzip=%s)", source.path, source.gzip)
    try:
        with open_binary(source) as f:
            for data in f:
                yield decode_line(data)
    except READ_ERRORS as e:
        raise LogIOError(source.path, e) from e


def read_multiple(sources: list[SourceFile]) -> Generator[tuple[str, SourceFile], None, None]:
    """Yield (line, source) from multiple files, sequentially."""
    for source in sources:
        for line in read_lines(source):
            yield line, source
