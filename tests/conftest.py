import pytest

from logsearch.config import Config
from logsearch.database import LogDatabase
from logsearch.query import QueryEngine
from logsearch.validator import LogValidator
from logsearch.web import create_app


@pytest.fixture
def sample_log():
    return {
        "level": "error",
        "message": "server-500 crashed",
        "resourceId": "r1",
        "timestamp": "2024-01-01T00:00:00Z",
        "traceId": "t1",
        "spanId": "s1",
        "commit": "abc123",
    }


@pytest.fixture
def sample_log_with_metadata(sample_log):
    sample_log["metadata"] = {"parentResourceId": "server-0987", "attempts": [1, 2]}
    return sample_log


@pytest.fixture
def config(tmp_path):
    cfg = Config()
    cfg.set("storage", "data_dir", str(tmp_path / "data"))
    cfg.set("storage", "fsync", False)
    return cfg


@pytest.fixture
def validator():
    return LogValidator()


@pytest.fixture
def database(config):
    db = LogDatabase.from_config(config)
    db.open()
    yield db
    db.close()


@pytest.fixture
def queries(database):
    return QueryEngine(database)


@pytest.fixture
def app(config, database):
    """Create a Flask test app."""
    application = create_app(config, database)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()


@pytest.fixture
def make_log():
    """Factory for minimal valid payloads."""
    def _make(level="info", message="hello world", **extra):
        entry = {"level": level, "message": message}
        entry.update(extra)
        return entry
    return _make
