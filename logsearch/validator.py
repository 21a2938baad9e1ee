"""Validates ingest payloads against the log entry JSON schema."""

from collections import defaultdict
from threading import Lock

import jsonschema

from logsearch.errors import ValidationError
from logsearch.models import LEVELS

_OPTIONAL_STRING = {"type": ["string", "null"]}

LOG_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "LogEntry",
    "type": "object",
    "required": ["level", "message"],
    "properties": {
        "level": {"enum": list(LEVELS)},
        "message": {"type": "string"},
        "resourceId": _OPTIONAL_STRING,
        "timestamp": _OPTIONAL_STRING,
        "traceId": _OPTIONAL_STRING,
        "spanId": _OPTIONAL_STRING,
        "commit": _OPTIONAL_STRING,
        # any JSON value, stored verbatim
        "metadata": {},
    },
}


class LogValidator:
    """Validates log entries against a JSON schema and keeps counters."""

    def __init__(self):
        self._validator = jsonschema.Draft202012Validator(LOG_SCHEMA)
        self._lock = Lock()
        self._stats = {
            "total": 0,
            "valid": 0,
            "invalid": 0,
            "error_types": defaultdict(int),
        }

    def validate(self, log_entry):
        """Validate a log entry against the schema.

        Returns:
            tuple: (is_valid: bool, errors: list[str])
        """
        errors = sorted(self._validator.iter_errors(log_entry), key=lambda e: [str(p) for p in e.path])

        with self._lock:
            self._stats["total"] += 1
            if not errors:
                self._stats["valid"] += 1
                return True, []

            self._stats["invalid"] += 1
            for error in errors:
                self._stats["error_types"][error.validator] += 1

        error_messages = []
        for error in errors:
            location = ".".join(str(p) for p in error.path)
            error_messages.append(f"{location}: {error.message}" if location else error.message)

        return False, error_messages

    def check(self, log_entry):
        """Like validate(), but raises ValidationError instead of returning errors."""
        is_valid, errors = self.validate(log_entry)
        if not is_valid:
            raise ValidationError(errors)

    def get_stats(self):
        """Return a copy of the stats dict."""
        with self._lock:
            stats = dict(self._stats)
            stats["error_types"] = dict(stats["error_types"])
        return stats

    def reset_stats(self):
        """Reset all stat counters."""
        with self._lock:
            self._stats = {
                "total": 0,
                "valid": 0,
                "invalid": 0,
                "error_types": defaultdict(int),
            }
