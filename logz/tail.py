"""Follow a growing file by polling, emitting enriched and filtered records.

The follower keeps one open handle, a byte offset and the bytes of any
incomplete trailing line. Each poll stats the file, reads whatever was
appended since the last poll, and emits only complete lines, so a line split
across two polls is emitted once, when its terminator arrives. A file that
shrinks or is replaced (new inode) is treated as truncated: offset and
partial buffer are reset and reading resumes from the start on the next poll.
"""

import logging
import math
import os
import threading
from enum import Enum
from typing import Generator

from logz.config import DEFAULT_DATE_FORMAT
from logz.errors import ConfigError, LogIOError
from logz.filters import FilterSpec, matches
from logz.parser import LogRecord, enrich_line
from logz.reader import decode_line

logger = logging.getLogger(__name__)


class TailState(Enum):
    IDLE = "idle"
    SEEKING = "seeking"
    FOLLOWING = "following"
    CLOSED = "closed"


class TailFollower:
    def __init__(
        self,
        path: str,
        interval: float = 0.5,
        from_start: bool = False,
        spec: FilterSpec | None = None,
        date_format: str = DEFAULT_DATE_FORMAT,
        stop_event: threading.Event | None = None,
    ):
        if not math.isfinite(interval) or interval <= 0:
            raise ConfigError("--interval", interval, "must be a finite number greater than zero")
        self.path = os.fspath(path)
        self.interval = interval
        self.from_start = from_start
        self._spec = spec or FilterSpec()
        self._date_format = date_format
        self._stop = stop_event or threading.Event()
        self._handle = None
        self._inode: int | None = None
        self.offset = 0
        self.partial = b""
        self.state = TailState.IDLE

    def __enter__(self) -> "TailFollower":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def start(self) -> None:
        """Open the file and position the cursor at its end, or its start if from_start."""
        self._open()
        self.state = TailState.SEEKING
        if self.from_start:
            self.offset = 0
        else:
            self.offset = self._stat().st_size
        self.partial = b""
        self.state = TailState.FOLLOWING
        logger.debug("Following %s from offset %d", self.path, self.offset)

    def stop(self) -> None:
        """Request cancellation; an in-progress wait in follow() returns immediately."""
        self._stop.set()

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        self.state = TailState.CLOSED

    def poll_once(self) -> list[LogRecord]:
        """Read newly appended bytes and return the matching complete lines as records.

        Raises LogIOError if the file cannot be statted or read; the session
        stays open so the caller can decide whether to poll again.
        """
        if self.state is not TailState.FOLLOWING:
            raise RuntimeError(f"Cannot poll a follower in state {self.state.value}")

        st = self._stat()
        if st.st_ino != self._inode:
            logger.info("File rotated (inode changed): %s", self.path)
            self._open()
            self._reset()
            return []
        if st.st_size < self.offset:
            logger.info("File truncated: %s", self.path)
            self._reset()
            return []
        if st.st_size == self.offset:
            return []

        try:
            self._handle.seek(self.offset)
            data = self._handle.read(st.st_size - self.offset)
        except OSError as e:
            raise LogIOError(self.path, e) from e
        self.offset += len(data)

        *lines, self.partial = (self.partial + data).split(b"\n")
        records = []
        for chunk in lines:
            record = enrich_line(decode_line(chunk), self.path, self._date_format)
            if matches(self._spec, record):
                records.append(record)
        return records

    def follow(self) -> Generator[LogRecord, None, None]:
        """Sleep, poll, emit; repeat until stop() is called.

        A LogIOError from a poll propagates to the caller without closing the
        session; calling follow() again resumes from the current offset.
        """
        if self.state is not TailState.FOLLOWING:
            self.start()
        while not self._stop.wait(self.interval):
            yield from self.poll_once()
        logger.debug("Stopped following %s", self.path)
        self.close()

    def _open(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        try:
            self._handle = open(self.path, "rb")
            self._inode = os.fstat(self._handle.fileno()).st_ino
        except OSError as e:
            raise LogIOError(self.path, e) from e

    def _stat(self) -> os.stat_result:
        try:
            return os.stat(self.path)
        except OSError as e:
            raise LogIOError(self.path, e) from e

    def _reset(self) -> None:
        self.offset = 0
        self.partial = b""
