"""Read-only queries over the log database.

Results are resolved through the indexes, never by re-scanning message
text. Indices that no longer resolve to a record are skipped.
"""

from logsearch.database import LogDatabase
from logsearch.models import LogRecord


class QueryEngine:
    def __init__(self, database: LogDatabase):
        self._db = database

    def fetch_all(self) -> list[tuple[int, LogRecord]]:
        """Every (index, record) pair in ascending index order."""
        with self._db.read() as db:
            return db.records.get_all()

    def fetch_by_level(self, bucket: str) -> list[LogRecord]:
        """Records in a level bucket (or ``message`` for all), in ingest order."""
        with self._db.read() as db:
            return _resolve(db, db.levels.lookup(bucket))

    def search_by_word(self, word: str) -> list[LogRecord]:
        """Records whose message contains ``word``, in the order they were indexed."""
        with self._db.read() as db:
            return _resolve(db, db.words.search(word))

    def envelope(self) -> dict:
        """``{"0": filters, "1": record, ...}`` with keys in ascending numeric order."""
        with self._db.read() as db:
            result = {"0": db.levels.as_dict()}
            for index, record in db.records.get_all():
                result[str(index)] = record.to_dict()
            return result


def _resolve(db: LogDatabase, indices) -> list[LogRecord]:
    results = []
    for index in indices:
        record = db.records.get(index)
        if record is not None:
            results.append(record)
    return results
