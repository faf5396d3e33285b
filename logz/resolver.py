"""Turn a user-given path into an ordered list of concrete files to read."""

import logging
import os
from dataclasses import dataclass

from logz.errors import CycleDetectedError, LogIOError, PathNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceFile:
    path: str
    gzip: bool

    @classmethod
    def from_path(cls, path: str) -> "SourceFile":
        return cls(path=path, gzip=path.lower().endswith(".gz"))


def resolve(path: str) -> list[SourceFile]:
    """Resolve *path* to the files under it.

    A regular file yields a single-element list. A directory is walked
    depth-first with entries sorted by name at every level, so the order is
    the same on every platform. An empty directory yields an empty list.

    Raises PathNotFoundError if *path* does not exist and CycleDetectedError
    if a symlinked directory leads back to one already being visited.
    """
    path = os.fspath(path)
    if not os.path.exists(path):
        raise PathNotFoundError(path)

    if not os.path.isdir(path):
        return [SourceFile.from_path(path)]

    files: list[SourceFile] = []
    _walk(path, set(), files)
    logger.debug("Resolved %s to %d file(s)", path, len(files))
    return files


def _walk(directory: str, visited: set, out: list[SourceFile]) -> None:
    try:
        st = os.stat(directory)
    except OSError as e:
        raise LogIOError(directory, e) from e
    identity = (st.st_dev, st.st_ino)
    if identity in visited:
        raise CycleDetectedError(directory)
    visited.add(identity)

    try:
        names = sorted(os.listdir(directory))
    except OSError as e:
        raise LogIOError(directory, e) from e

    for name in names:
        entry = os.path.join(directory, name)
        if os.path.isdir(entry):
            _walk(entry, visited, out)
        elif os.path.isfile(entry):
            out.append(SourceFile.from_path(entry))

    # Only ancestors count: the same directory reached twice via sibling links is not a cycle.
    visited.discard(identity)
