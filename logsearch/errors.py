"""Exception hierarchy for the log store and its HTTP adapter."""


class LogSearchError(Exception):
    """Base class. ``status_code`` is the HTTP status the web layer returns."""

    status_code = 500

    def to_dict(self) -> dict:
        return {"error": str(self)}


class ValidationError(LogSearchError):
    """Malformed ingest payload."""

    status_code = 400

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "invalid log entry")

    def to_dict(self) -> dict:
        return {"error": "invalid log entry", "errors": self.errors}


class InvalidFilterError(LogSearchError):
    """Unknown level filter bucket."""

    status_code = 400

    def __init__(self, bucket: str):
        self.bucket = bucket
        super().__init__(f"unknown filter: {bucket!r}")


class EmptyQueryError(LogSearchError):
    """Search word missing or blank."""

    status_code = 400

    def __init__(self, message: str = "Missing search word"):
        super().__init__(message)


class PersistenceError(LogSearchError):
    """Journal read/write failure or corrupt on-disk state."""

    status_code = 500

    def to_dict(self) -> dict:
        return {"error": "internal server error", "message": str(self)}
