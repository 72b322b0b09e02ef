"""
=============================================================================
WEB SERVER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on localhost:8080
    python -m webserver

    # Custom port and document root
    python -m webserver --port 3000 --root ./www

    # Listen on all interfaces, JSON access log
    python -m webserver --host 0.0.0.0 --log-format json

Settings come from, highest priority first: command-line arguments,
WEBSERVER_* environment variables, ServerConfig defaults.

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .config import ServerConfig, LOG_FORMATS
from .server import WebServer


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser.

    Every option defaults to None so that only options actually given
    override the environment.
    """
    parser = argparse.ArgumentParser(
        prog="webserver",
        description="Minimal single-request HTTP server with template substitution",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m webserver                        # Serve . on 127.0.0.1:8080
  python -m webserver --port 3000            # Custom port
  python -m webserver --root ./www           # Custom document root
  python -m webserver --log-level DEBUG      # Log every request line
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        help="Host to bind to (default: 127.0.0.1, use 0.0.0.0 for containers)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        help="Port to listen on (default: 8080, 0 = any free port)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        help="Seconds to wait for a client's request (default: 30)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        dest="document_root",
        metavar="DIR",
        help="Directory to serve files from (default: current directory)"
    )

    parser.add_argument(
        "--no-confine",
        dest="confine_to_root",
        action="store_false",
        default=None,
        help="Allow request paths to resolve outside the document root"
    )

    parser.add_argument(
        "--server-name",
        help="Value of the Server header"
    )

    parser.add_argument(
        "--template-server",
        help="Replacement for <cs371server> in served text files"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Layer the parsed arguments over the environment configuration."""
    config = ServerConfig.from_env()

    for name in (
        "host",
        "port",
        "timeout",
        "document_root",
        "confine_to_root",
        "server_name",
        "template_server",
        "log_level",
        "log_format",
    ):
        value = getattr(args, name)
        if value is not None:
            setattr(config, name, value)

    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
        server = WebServer(config)
    except ValueError as e:
        # Bad environment value or failed validation; exits with status 2
        parser.error(str(e))

    server.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
