"""In-memory record store keyed by a monotonically increasing index.

Not synchronized on its own: LogDatabase holds its read/write lock around
every call so the store and both indexes change together.
"""

from typing import Optional

from logsearch.errors import ValidationError
from logsearch.models import LEVELS, LogRecord


class RecordStore:
    """Append-only mapping of index -> LogRecord. Index 0 is never assigned."""

    def __init__(self):
        self._records: dict[int, LogRecord] = {}
        self._max_index = 0

    def next_index(self) -> int:
        """Index the next append will receive."""
        return self._max_index + 1

    @staticmethod
    def check(record: LogRecord) -> None:
        """Level and message drive index maintenance, so both are mandatory."""
        if record.level not in LEVELS:
            raise ValidationError(f"unrecognized level: {record.level!r}")
        if not isinstance(record.message, str):
            raise ValidationError("message is required and must be a string")

    def append(self, record: LogRecord) -> int:
        """Store a record under max(existing) + 1 and return that index."""
        self.check(record)
        index = self.next_index()
        self._records[index] = record
        self._max_index = index
        return index

    def restore(self, index: int, record: LogRecord) -> None:
        """Put back a record read from the journal under its original index."""
        if index < 1:
            raise ValueError(f"record index must be positive, got {index}")
        self._records[index] = record
        self._max_index = max(self._max_index, index)

    def get(self, index: int) -> Optional[LogRecord]:
        return self._records.get(index)

    def get_all(self) -> list[tuple[int, LogRecord]]:
        """All (index, record) pairs in ascending index order."""
        return sorted(self._records.items())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, index) -> bool:
        return index in self._records

    def reset(self) -> None:
        """Drop every record. Numbering restarts at 1."""
        self._records.clear()
        self._max_index = 0
