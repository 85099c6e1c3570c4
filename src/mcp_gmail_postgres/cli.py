"""
Command-line entry point.

Commands:
- stdio:        run the MCP server over stdin/stdout
- http:         run the MCP server over HTTP/SSE
- gmail-token:  obtain a Gmail refresh token interactively
- check:        smoke-test a running HTTP server
"""

import argparse
import json
import logging
import sys

import httpx

from .config import Settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Log to stderr; stdout is reserved for the stdio protocol stream."""
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def load_settings() -> Settings:
    """Load settings, exiting with status 1 on malformed configuration."""
    try:
        return Settings.from_env()
    except ValueError as e:
        configure_logging()
        logger.error("Invalid configuration: %s", e)
        sys.exit(1)


def run_stdio(settings: Settings) -> None:
    from .server.mcp_server import run_server

    run_server(settings)


def run_http(settings: Settings, host: str = None, port: int = None) -> None:
    from .server.http_server import run_http_server

    run_http_server(settings, host=host, port=port)


def run_gmail_token(settings: Settings) -> None:
    """Print a GMAIL_REFRESH_TOKEN line for the .env file."""
    from .oauth import obtain_refresh_token

    try:
        refresh_token = obtain_refresh_token(settings.gmail)
    except Exception as e:
        print(f"Error getting token: {e}")
        sys.exit(1)

    if not refresh_token:
        print("No refresh token returned. Revoke the app's access and try again.")
        sys.exit(1)

    print("\nSuccess! Add this to your .env file:\n")
    print(f"GMAIL_REFRESH_TOKEN={refresh_token}\n")


def run_check(url: str) -> None:
    """Check /health and / on a running HTTP server."""
    url = url.rstrip("/")
    print("Testing MCP Server...\n")

    try:
        with httpx.Client(timeout=10) as client:
            health = client.get(f"{url}/health")
            health.raise_for_status()
            print("Health check passed")
            print(f"   Response: {health.text}\n")

            info = client.get(f"{url}/")
            info.raise_for_status()
            print("Server info retrieved")
            print(json.dumps(info.json(), indent=2))
    except httpx.HTTPError as e:
        print(f"Check failed - is the server running? ({e})")
        print("   Start it with: mcp-gmail-postgres http")
        sys.exit(1)

    print("\nAll checks passed!")
    print(f"For n8n, use endpoint: {url}/sse")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="MCP server exposing Gmail and PostgreSQL tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with stdio (for MCP clients like Claude Desktop)
  mcp-gmail-postgres stdio

  # Run with HTTP/SSE transport
  mcp-gmail-postgres http --port 3000

  # Obtain a Gmail refresh token
  mcp-gmail-postgres gmail-token

  # Smoke-test a running HTTP server
  mcp-gmail-postgres check --url http://localhost:3000
"""
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("stdio", help="Run the MCP server over stdin/stdout")

    http_parser = subparsers.add_parser("http", help="Run the MCP server over HTTP/SSE")
    http_parser.add_argument("--host", default=None, help="Bind host (default: $HOST or 0.0.0.0)")
    http_parser.add_argument("--port", type=int, default=None, help="Bind port (default: $PORT or 3000)")

    subparsers.add_parser("gmail-token", help="Obtain a Gmail OAuth refresh token")

    check_parser = subparsers.add_parser("check", help="Smoke-test a running HTTP server")
    check_parser.add_argument("--url", default="http://localhost:3000", help="Server base URL")

    return parser


def main(argv=None):
    """Main entry point with CLI argument parsing."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "check":
        run_check(args.url)
        return

    if args.command not in ("stdio", "http", "gmail-token"):
        parser.print_help()
        print("\nNo command specified. Use one of: stdio, http, gmail-token, check")
        sys.exit(1)

    settings = load_settings()
    configure_logging(settings.server.log_level)

    if args.command == "stdio":
        run_stdio(settings)
    elif args.command == "http":
        run_http(settings, host=args.host, port=args.port)
    else:
        run_gmail_token(settings)


if __name__ == "__main__":
    main()
