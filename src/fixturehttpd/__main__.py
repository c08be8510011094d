"""
=============================================================================
FIXTURE SERVER CLI ENTRY POINT
=============================================================================

Runs the fixture server in the foreground, for poking at a client by hand.

=============================================================================
USAGE
=============================================================================

    # Serve the current directory on port 8080
    python -m fixturehttpd

    # Serve a fixture directory on a custom port
    python -m fixturehttpd --root ./fixtures --port 3000

    # Only reachable from this machine, with request details
    python -m fixturehttpd --host 127.0.0.1 --log-level DEBUG

    # Machine-readable access log
    python -m fixturehttpd --log-format json

Options not given on the command line fall back to the FIXTURE_*
environment variables (see ServerConfig.from_env), then to defaults.

=============================================================================
"""

import argparse
import logging
import signal
import sys
import threading

from . import __version__
from .config import ServerConfig
from .core.socket_server import ServerStartError
from .handlers.files import prepare_fixture_dirs
from .server import WebServer, setup_logging


logger = logging.getLogger("fixturehttpd.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fixturehttpd",
        description="HTTP/1.0 fixture server for download client tests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m fixturehttpd                          # Serve . on port 8080
  python -m fixturehttpd --root ./fixtures        # Serve a fixture directory
  python -m fixturehttpd --port 0                 # Any free port
  python -m fixturehttpd --log-format json        # JSON access log
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 0.0.0.0)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on, 0 for any free port (default: 8080)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Directory to serve files from (default: current directory)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"fixturehttpd {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment-based config, overridden by whatever was passed."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.root is not None:
        config.root_dir = args.root
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format

    return config


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    setup_logging(config.log_level)
    prepare_fixture_dirs(config.root_dir, config.fixture_dirs)

    server = WebServer(config)
    try:
        server.start()
    except ServerStartError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # =========================================================================
    # WAIT FOR SIGINT / SIGTERM
    # =========================================================================
    # Handlers only set the event; stop() runs on the main thread below.

    stop_requested = threading.Event()

    def shutdown_handler(signum, frame):
        signal_name = signal.Signals(signum).name
        logger.info(f"Received {signal_name}, initiating shutdown...")
        stop_requested.set()

    original_handlers = {
        signal.SIGTERM: signal.signal(signal.SIGTERM, shutdown_handler),
        signal.SIGINT: signal.signal(signal.SIGINT, shutdown_handler),
    }

    try:
        while not stop_requested.is_set() and server.is_running:
            stop_requested.wait(0.5)
    finally:
        server.stop()
        for sig, handler in original_handlers.items():
            signal.signal(sig, handler)

    return 0


if __name__ == "__main__":
    sys.exit(main())
