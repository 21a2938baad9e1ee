"""Entry point for the log search service."""

import logging
import signal
import sys
from argparse import ArgumentParser

from logsearch.config import Config
from logsearch.database import LogDatabase
from logsearch.web import create_app

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="logsearch",
        description="Ingest structured logs over HTTP and search them by level or word.",
    )
    parser.add_argument(
        "--config",
        help="YAML config file (default: $CONFIG_PATH or config.yaml)",
    )
    parser.add_argument("--host", help="Bind address")
    parser.add_argument("--port", type=int, help="Listen port")
    parser.add_argument("--data-dir", help="Directory holding the journals")
    parser.add_argument(
        "--persist-across-restarts",
        action="store_true",
        default=None,
        help="Replay stored logs on start instead of clearing them",
    )
    return parser


def load_config(args) -> Config:
    """Config file and environment first, then CLI flags on top."""
    config = Config.load(args.config)
    if args.host is not None:
        config.set("server", "host", args.host)
    if args.port is not None:
        config.set("server", "port", args.port)
    if args.data_dir is not None:
        config.set("storage", "data_dir", args.data_dir)
    if args.persist_across_restarts:
        config.set("storage", "persist_across_restarts", True)
    return config


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        stream=sys.stderr,
    )
    config = load_config(args)
    logging.getLogger().setLevel(str(config["logging"]["level"]).upper())

    database = LogDatabase.from_config(config)
    database.open()
    app = create_app(config, database)

    def signal_handler(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        raise KeyboardInterrupt

    signal.signal(signal.SIGTERM, signal_handler)

    server = config["server"]
    logger.info("Server running at http://%s:%d", server["host"], server["port"])
    try:
        app.run(host=server["host"], port=server["port"], debug=server["debug"],
                use_reloader=False, threaded=True)
    except KeyboardInterrupt:
        pass
    finally:
        database.close()
        logger.info("Log store closed")


if __name__ == "__main__":
    main()
