"""Append-only JSON-lines journal with fsync'd appends and atomic rewrite."""

import json
import logging
import os
import tempfile
from typing import Iterable, Iterator

from logsearch.errors import PersistenceError

logger = logging.getLogger(__name__)


class Journal:
    """One JSON object per line.

    An append is flushed (and fsync'd unless disabled) before it returns, so
    an acknowledged ingest survives a crash. A torn last line left by a crash
    mid-append is skipped on replay; a bad line anywhere else is corruption.
    Callers serialize access.
    """

    def __init__(self, path: str, fsync: bool = True):
        self.path = path
        self._fsync = fsync
        self._file = None
        # set by replay() when it dropped a partial last line
        self.torn_tail = False

    def open(self) -> None:
        if self._file is not None:
            return
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            self._file = open(self.path, "a", encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"cannot open journal {self.path}: {e}") from e

    def append(self, entry: dict) -> None:
        if self._file is None:
            self.open()
        line = json.dumps(entry, separators=(",", ":"))
        start = None
        try:
            start = self._file.tell()
            self._file.write(line + "\n")
            self._file.flush()
            if self._fsync:
                os.fsync(self._file.fileno())
        except OSError as e:
            logger.exception("Journal append failed: %s", self.path)
            if start is not None:
                self._rollback(start)
            raise PersistenceError(f"cannot write journal {self.path}: {e}") from e

    def _rollback(self, size: int) -> None:
        """Cut a partially written line so later appends stay parseable."""
        try:
            self._file.truncate(size)
        except (OSError, ValueError):
            logger.error("Could not roll back %s to %d bytes", self.path, size)

    def replay(self) -> Iterator[dict]:
        """Yield every complete entry in file order."""
        self.torn_tail = False
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                lines = f.read().split("\n")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"cannot read journal {self.path}: {e}") from e

        # split() leaves "" after the final newline
        last = len(lines) - 1
        while last >= 0 and not lines[last].strip():
            last -= 1

        for lineno, line in enumerate(lines[: last + 1], start=1):
            if not line.strip():
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError as e:
                if lineno == last + 1:
                    logger.warning(
                        "Skipping torn trailing line %d in %s", lineno, self.path
                    )
                    self.torn_tail = True
                    return
                raise PersistenceError(
                    f"corrupt journal {self.path} at line {lineno}: {e.msg}"
                ) from e
            if not isinstance(entry, dict):
                raise PersistenceError(
                    f"corrupt journal {self.path} at line {lineno}: expected object"
                )
            yield entry

    def truncate(self) -> None:
        """Reset the journal to empty."""
        self.rewrite([])

    def rewrite(self, entries: Iterable[dict]) -> None:
        """Atomically replace the journal contents (temp file + os.replace)."""
        self.close()
        directory = os.path.dirname(self.path) or "."
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=directory)
        except OSError as e:
            raise PersistenceError(f"cannot rewrite journal {self.path}: {e}") from e
        try:
            f = os.fdopen(fd, "w", encoding="utf-8")
        except OSError as e:
            os.close(fd)
            os.unlink(tmp)
            raise PersistenceError(f"cannot rewrite journal {self.path}: {e}") from e
        try:
            with f:
                for entry in entries:
                    f.write(json.dumps(entry, separators=(",", ":")))
                    f.write("\n")
                f.flush()
                if self._fsync:
                    os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except OSError as e:
            os.unlink(tmp)
            raise PersistenceError(f"cannot rewrite journal {self.path}: {e}") from e
        except Exception:
            os.unlink(tmp)
            raise
        self.open()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
