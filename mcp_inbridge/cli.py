#!/usr/bin/env python3
"""
Command-line entry point.

Configure from a client's MCP server list, e.g.:

    {"mcpServers": {"search": {"command": "mcp-inbridge",
                               "env": {"MCP_SERVER_URL": "http://your-server:your-port"}}}}
"""

import argparse
import io
import sys
from typing import List, Optional

from . import __version__
from .bridge import LineBridge
from .config import SERVER_URL_ENV, BridgeConfig
from .exceptions import ConfigError
from .lifecycle import EXIT_FAILURE, LifecycleController
from .logging_config import setup_logging
from .session import SessionStore
from .transport import TransportClient

CONFIG_HELP = f"""\
Please set the MCP server URL in your client configuration:
{{
  "mcpServers": {{
    "my-server": {{
      "command": "mcp-inbridge",
      "env": {{
        "{SERVER_URL_ENV}": "http://your-server:your-port"
      }}
    }}
  }}
}}

Contact your system administrator for the correct {SERVER_URL_ENV} value."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-inbridge",
        description="Bridge stdio JSON-RPC to a streamable-HTTP MCP server",
    )
    parser.add_argument("--url", help=f"MCP server base URL (overrides {SERVER_URL_ENV})")
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds")
    parser.add_argument("--workers", type=int, help="Relay lines concurrently (replies stay in order)")
    parser.add_argument("--debug", action="store_true", default=None, help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_stdio(stdin, stdout) -> None:
    """UTF-8 stdio; undecodable input bytes become U+FFFD so the line is still answered."""
    if isinstance(stdin, io.TextIOWrapper):
        stdin.reconfigure(encoding="utf-8", errors="replace")
    if isinstance(stdout, io.TextIOWrapper):
        stdout.reconfigure(encoding="utf-8")


def run(argv: Optional[List[str]] = None) -> int:
    """Build the bridge from args and environment and run it. Returns the exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = BridgeConfig.from_env(
            server_url=args.url,
            request_timeout=args.timeout,
            max_workers=args.workers,
            debug=args.debug,
        )
    except ConfigError as e:
        print(f"{e}", file=sys.stderr)
        print("", file=sys.stderr)
        print(CONFIG_HELP, file=sys.stderr)
        return EXIT_FAILURE

    setup_logging(debug=config.debug)

    configure_stdio(sys.stdin, sys.stdout)

    transport = TransportClient(config)
    session = SessionStore()
    bridge = LineBridge(transport, session, max_workers=config.max_workers)
    controller = LifecycleController(config, transport, session, bridge)
    return controller.run()


def main(argv: Optional[List[str]] = None) -> None:
    sys.exit(run(argv))


if __name__ == "__main__":
    main()
