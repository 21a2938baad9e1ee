"""Tests for the JSON-lines journal."""

import json
import os

import pytest

from logsearch.errors import PersistenceError
from logsearch.journal import Journal


class TestAppendAndReplay:
    def test_creates_directory(self, tmp_path):
        path = str(tmp_path / "nested" / "dir" / "j.jsonl")
        journal = Journal(path, fsync=False)
        journal.append({"index": 1})
        journal.close()
        assert os.path.isfile(path)

    def test_round_trip_in_order(self, tmp_path):
        journal = Journal(str(tmp_path / "j.jsonl"), fsync=False)
        for i in range(1, 4):
            journal.append({"index": i, "words": ["w%d" % i]})
        journal.close()

        entries = list(Journal(journal.path).replay())
        assert [e["index"] for e in entries] == [1, 2, 3]

    def test_one_line_per_entry(self, tmp_path):
        journal = Journal(str(tmp_path / "j.jsonl"), fsync=True)
        journal.append({"a": 1})
        journal.append({"b": "line\nbreak"})
        journal.close()
        with open(journal.path) as f:
            assert len(f.read().splitlines()) == 2

    def test_missing_file_replays_nothing(self, tmp_path):
        assert list(Journal(str(tmp_path / "absent.jsonl")).replay()) == []

    def test_lone_surrogate_round_trips(self, tmp_path):
        journal = Journal(str(tmp_path / "j.jsonl"), fsync=False)
        journal.append({"index": 1, "record": {"message": "bad \ud800 char"}})
        journal.close()

        entries = list(Journal(journal.path).replay())
        assert entries == [{"index": 1, "record": {"message": "bad \ud800 char"}}]


class TestCrashRecovery:
    def test_torn_last_line_skipped(self, tmp_path):
        path = tmp_path / "j.jsonl"
        path.write_text('{"index": 1}\n{"index": 2}\n{"ind')
        journal = Journal(str(path))
        assert [e["index"] for e in journal.replay()] == [1, 2]
        assert journal.torn_tail is True

    def test_clean_file_not_torn(self, tmp_path):
        path = tmp_path / "j.jsonl"
        path.write_text('{"index": 1}\n\n')
        journal = Journal(str(path))
        assert list(journal.replay()) == [{"index": 1}]
        assert journal.torn_tail is False

    def test_corrupt_middle_line_raises(self, tmp_path):
        path = tmp_path / "j.jsonl"
        path.write_text('{"index": 1}\nnot json\n{"index": 3}\n')
        with pytest.raises(PersistenceError):
            list(Journal(str(path)).replay())

    def test_non_object_line_raises(self, tmp_path):
        path = tmp_path / "j.jsonl"
        path.write_text('[1, 2]\n{"index": 3}\n')
        with pytest.raises(PersistenceError):
            list(Journal(str(path)).replay())


class TestRewrite:
    def test_truncate(self, tmp_path):
        journal = Journal(str(tmp_path / "j.jsonl"), fsync=False)
        journal.append({"index": 1})
        journal.truncate()
        assert list(journal.replay()) == []
        journal.append({"index": 2})
        journal.close()
        assert list(journal.replay()) == [{"index": 2}]

    def test_rewrite_replaces_contents(self, tmp_path):
        journal = Journal(str(tmp_path / "j.jsonl"), fsync=False)
        journal.append({"index": 1})
        journal.rewrite([{"index": 5}, {"index": 6}])
        journal.close()
        with open(journal.path) as f:
            assert [json.loads(line)["index"] for line in f] == [5, 6]

    def test_rewrite_leaves_no_temp_files(self, tmp_path):
        journal = Journal(str(tmp_path / "j.jsonl"), fsync=False)
        journal.rewrite([{"index": 1}])
        journal.close()
        assert os.listdir(tmp_path) == ["j.jsonl"]

    def test_unwritable_location_raises(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        journal = Journal(str(blocker / "j.jsonl"))
        with pytest.raises(PersistenceError):
            journal.append({"index": 1})

    def test_fdopen_failure_cleans_up(self, tmp_path, monkeypatch):
        journal = Journal(str(tmp_path / "j.jsonl"), fsync=False)
        journal.append({"index": 1})
        closed = []
        real_close = os.close

        def failing_fdopen(fd, *args, **kwargs):
            raise OSError("no file objects left")

        def tracking_close(fd):
            closed.append(fd)
            real_close(fd)

        monkeypatch.setattr(os, "fdopen", failing_fdopen)
        monkeypatch.setattr(os, "close", tracking_close)
        with pytest.raises(PersistenceError):
            journal.rewrite([{"index": 2}])

        assert len(closed) == 1
        assert os.listdir(tmp_path) == ["j.jsonl"]
