"""Log database: record store, level index and word index kept in step.

Every ingest assigns the next index, appends the record to the records
journal (the commit point), then updates the three in-memory structures and
appends the record's words to the words journal, all under one write lock.
Queries take the read lock, so they never see a record without its index
entries.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from logsearch.errors import PersistenceError
from logsearch.journal import Journal
from logsearch.level_index import LevelFilterIndex
from logsearch.models import FILTER_BUCKETS, LEVELS, LogRecord
from logsearch.record_store import RecordStore
from logsearch.rwlock import ReadWriteLock
from logsearch.tokenizer import Tokenizer
from logsearch.validator import LogValidator
from logsearch.word_index import WordIndex

logger = logging.getLogger(__name__)


def _decode_record_entry(entry: dict) -> tuple[int, LogRecord]:
    index = entry.get("index")
    data = entry.get("record")
    if not isinstance(index, int) or isinstance(index, bool) or index < 1:
        raise PersistenceError(f"bad record index in journal: {index!r}")
    if not isinstance(data, dict):
        raise PersistenceError(f"record {index} is not an object")
    record = LogRecord.from_dict(data)
    if record.level not in LEVELS or not isinstance(record.message, str):
        raise PersistenceError(f"record {index} has an invalid level or message")
    return index, record


def _is_word_list(words) -> bool:
    return isinstance(words, list) and all(isinstance(w, str) for w in words)


class LogDatabase:
    def __init__(self, records_path: str, words_path: str,
                 persist_across_restarts: bool = False, fsync: bool = True,
                 tokenizer: Optional[Tokenizer] = None,
                 validator: Optional[LogValidator] = None):
        self.records = RecordStore()
        self.levels = LevelFilterIndex()
        self.words = WordIndex(tokenizer)
        self.validator = validator or LogValidator()
        self.persist_across_restarts = persist_across_restarts
        self._records_journal = Journal(records_path, fsync=fsync)
        self._words_journal = Journal(words_path, fsync=fsync)
        self._lock = ReadWriteLock()
        # words journal missed an append; rewritten on close()
        self._words_dirty = False

    @classmethod
    def from_config(cls, config, **kwargs) -> "LogDatabase":
        storage = config["storage"]
        return cls(
            config.records_path,
            config.words_path,
            persist_across_restarts=storage["persist_across_restarts"],
            fsync=storage["fsync"],
            **kwargs,
        )

    # --- lifecycle ---

    def open(self) -> None:
        """Start a session: wipe both journals, or replay them when persisting."""
        with self._lock.write():
            if self.persist_across_restarts:
                self._load()
            else:
                self._clear()
                logger.info("Log store cleared for new session.")

    def close(self) -> None:
        with self._lock.write():
            if self._words_dirty:
                try:
                    self._words_journal.rewrite(self._word_entries())
                    self._words_dirty = False
                except PersistenceError:
                    logger.exception("Could not rewrite words journal on close")
            self._records_journal.close()
            self._words_journal.close()

    def reset(self) -> None:
        """Discard all records and both indexes."""
        with self._lock.write():
            self._clear()
            logger.info("Log store reset")

    def _clear(self) -> None:
        self.records.reset()
        self.levels.reset()
        self.words.reset()
        self._records_journal.truncate()
        self._words_journal.truncate()
        self._words_dirty = False

    def _load(self) -> None:
        self.records.reset()
        self.levels.reset()
        self.words.reset()

        entries = list(self._records_journal.replay())
        for entry in entries:
            index, record = _decode_record_entry(entry)
            if index in self.records:
                raise PersistenceError(f"duplicate record index {index} in journal")
            self.records.restore(index, record)
            self.levels.record_ingested(index, record.level)
        if self._records_journal.torn_tail:
            self._records_journal.rewrite(entries)

        seen: set[int] = set()
        needs_repair = False
        for entry in self._words_journal.replay():
            index, words = entry.get("index"), entry.get("words")
            if not isinstance(index, int) or index not in self.records \
                    or not _is_word_list(words):
                needs_repair = True
                continue
            for word in words:
                self.words.add(word, index)
            seen.add(index)
        needs_repair = needs_repair or self._words_journal.torn_tail
        if len(seen) != len(self.records):
            needs_repair = True

        if needs_repair:
            logger.warning(
                "Words journal out of step with records (%d of %d indexed), rebuilding",
                len(seen), len(self.records),
            )
            self._rebuild()

        logger.info(
            "Loaded %d records, %d distinct words", len(self.records), self.words.vocabulary_size
        )

    # --- writes ---

    def ingest(self, payload) -> int:
        """Validate, store and index one log entry. Returns its index."""
        self.validator.check(payload)
        record = LogRecord.from_dict(payload)
        RecordStore.check(record)
        words = self.words.words_in(record.message)

        with self._lock.write():
            index = self.records.next_index()
            self._records_journal.append({"index": index, "record": record.to_dict()})
            self.records.append(record)
            self.levels.record_ingested(index, record.level)
            for word in words:
                self.words.add(word, index)
            try:
                self._words_journal.append({"index": index, "words": words})
            except PersistenceError:
                # the record is committed; the words journal is derived from it
                logger.error("Words journal append failed for record %d", index)
                self._words_dirty = True

        logger.debug("Ingested record %d (%s, %d words)", index, record.level, len(words))
        return index

    def rebuild_indexes(self) -> dict:
        """Recompute both indexes from the records and rewrite the words journal."""
        with self._lock.write():
            self._rebuild()
            return {
                "records": len(self.records),
                "vocabulary": self.words.vocabulary_size,
            }

    def _rebuild(self) -> None:
        self.levels.reset()
        self.words.reset()
        entries = []
        for index, record in self.records.get_all():
            self.levels.record_ingested(index, record.level)
            words = self.words.index_message(index, record.message)
            entries.append({"index": index, "words": words})
        self._words_journal.rewrite(entries)
        self._words_dirty = False

    def _word_entries(self) -> Iterator[dict]:
        for index, record in self.records.get_all():
            yield {"index": index, "words": self.words.words_in(record.message)}

    # --- reads ---

    @contextmanager
    def read(self) -> Iterator["LogDatabase"]:
        """Shared lock for a consistent view of all three structures."""
        with self._lock.read():
            yield self

    def stats(self) -> dict:
        with self._lock.read():
            return {
                "total_logs": len(self.records),
                "vocabulary": self.words.vocabulary_size,
                "buckets": {name: self.levels.count(name) for name in FILTER_BUCKETS},
            }
