"""Log record model and the fixed level / filter bucket names."""

from dataclasses import dataclass
from typing import Any, Optional

LEVELS = ("error", "warn", "info", "debug")

# "message" is the synthetic all-records bucket.
FILTER_BUCKETS = LEVELS + ("message",)

# wire name -> attribute name
_FIELDS = {
    "level": "level",
    "message": "message",
    "resourceId": "resource_id",
    "timestamp": "timestamp",
    "traceId": "trace_id",
    "spanId": "span_id",
    "commit": "commit",
    "metadata": "metadata",
}


@dataclass(frozen=True)
class LogRecord:
    level: str
    message: str
    resource_id: Optional[str] = None
    timestamp: Optional[str] = None
    trace_id: Optional[str] = None
    span_id: Optional[str] = None
    commit: Optional[str] = None
    metadata: Any = None

    @classmethod
    def from_dict(cls, d: dict) -> "LogRecord":
        """Build a record from a wire payload. Unknown keys are dropped."""
        return cls(**{attr: d.get(key) for key, attr in _FIELDS.items()})

    def to_dict(self) -> dict:
        """Wire representation with camelCase keys."""
        return {key: getattr(self, attr) for key, attr in _FIELDS.items()}
