"""Flask routes over the log database."""

import logging

from flask import Flask, jsonify, request

from logsearch.config import Config
from logsearch.database import LogDatabase
from logsearch.errors import LogSearchError, PersistenceError, ValidationError
from logsearch.query import QueryEngine

logger = logging.getLogger(__name__)


def create_app(config=None, database=None):
    """Flask application factory.

    Without a ``database`` one is built from ``config`` and opened, which
    resets the journals unless ``storage.persist_across_restarts`` is set.
    """
    app = Flask(__name__)
    # envelope keys must stay in numeric order
    app.json.sort_keys = False

    if config is None:
        config = Config.load()
    if database is None:
        database = LogDatabase.from_config(config)
        database.open()
    queries = QueryEngine(database)

    app.config["components"] = {
        "config": config,
        "database": database,
        "queries": queries,
    }

    cors_origin = config["server"].get("cors_origin")

    @app.after_request
    def add_cors_headers(response):
        if cors_origin:
            response.headers["Access-Control-Allow-Origin"] = cors_origin
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    @app.errorhandler(LogSearchError)
    def handle_log_search_error(error):
        if isinstance(error, PersistenceError):
            logger.error("Persistence failure: %s", error)
        return jsonify(error.to_dict()), error.status_code

    # --- Routes ---

    @app.route("/health")
    def health():
        stats = database.stats()
        return jsonify({
            "status": "healthy",
            "total_logs": stats["total_logs"],
            "vocabulary": stats["vocabulary"],
        })

    @app.route("/logs", methods=["POST"])
    def ingest_log():
        log_entry = request.get_json(force=True, silent=True)
        if log_entry is None:
            raise ValidationError("Invalid JSON object")

        index = database.ingest(log_entry)
        return jsonify({"index": index, "message": "Logs Created !!!"}), 201

    @app.route("/logs", methods=["GET"])
    def fetch_all():
        return jsonify(queries.envelope())

    @app.route("/logs/level/<bucket>")
    def fetch_by_level(bucket):
        records = queries.fetch_by_level(bucket)
        return jsonify([r.to_dict() for r in records])

    @app.route("/logs/search")
    def search():
        records = queries.search_by_word(request.args.get("word"))
        return jsonify([r.to_dict() for r in records])

    @app.route("/logs/reindex", methods=["POST"])
    def reindex():
        return jsonify(database.rebuild_indexes())

    @app.route("/api/stats")
    def stats():
        return jsonify(database.stats())

    @app.route("/api/validation-stats")
    def validation_stats():
        return jsonify(database.validator.get_stats())

    return app
