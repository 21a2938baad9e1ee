"""Level filter index: bucket name -> record indices in ingest order."""

from logsearch.errors import InvalidFilterError, ValidationError
from logsearch.models import FILTER_BUCKETS, LEVELS


class LevelFilterIndex:
    """Four disjoint level buckets plus ``message``, which lists every record."""

    def __init__(self):
        self._buckets: dict[str, list[int]] = {name: [] for name in FILTER_BUCKETS}

    def record_ingested(self, index: int, level: str) -> None:
        if level not in LEVELS:
            raise ValidationError(f"unrecognized level: {level!r}")
        self._buckets[level].append(index)
        self._buckets["message"].append(index)

    def lookup(self, bucket: str) -> list[int]:
        if bucket not in self._buckets:
            raise InvalidFilterError(bucket)
        return list(self._buckets[bucket])

    def count(self, bucket: str) -> int:
        if bucket not in self._buckets:
            raise InvalidFilterError(bucket)
        return len(self._buckets[bucket])

    def as_dict(self) -> dict[str, list[int]]:
        return {name: list(indices) for name, indices in self._buckets.items()}

    def reset(self) -> None:
        for indices in self._buckets.values():
            indices.clear()
