"""
TLINK OPC UA bridge entry point.

Parses the command line, loads ``config.json`` from the working
directory and runs the OPC UA server until SIGINT or SIGTERM.

Usage:
    tlink-opcua            normal start
    tlink-opcua /d         verbose logging (also /debug)
    tlink-opcua /h         print usage and exit (also /help)
"""

import asyncio
import signal
import sys
from dataclasses import dataclass
from typing import List, Optional

from .config import DEFAULT_CONFIG_PATH, load_config
from .logging import get_logger, log_error
from .server import BridgeServerManager


EXIT_SUCCESS = 0
EXIT_FAILURE = 1

DEBUG_FLAGS = ("/d", "/debug")
HELP_FLAGS = ("/h", "/help")

USAGE = "Enable debug mode: /d or /debug"


@dataclass
class CliOptions:
    """Parsed command line."""
    debug: bool = False
    show_help: bool = False
    invalid: Optional[str] = None


def parse_args(argv: List[str]) -> CliOptions:
    """
    Parse command line tokens.

    Tokens are handled in order; help or an unknown token stops parsing.
    """
    options = CliOptions()
    for token in argv:
        if token in DEBUG_FLAGS:
            options.debug = True
        elif token in HELP_FLAGS:
            options.show_help = True
            return options
        else:
            options.invalid = token
            return options
    return options


async def _serve(manager: BridgeServerManager) -> None:
    """Run the server with SIGINT/SIGTERM mapped to a cooperative stop."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, manager.stop)
        except (NotImplementedError, RuntimeError):
            # Not supported by the Windows event loop
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(manager.stop))

    await manager.run()


def main(argv: Optional[List[str]] = None, config_path: str = DEFAULT_CONFIG_PATH) -> int:
    """
    Run the bridge.

    Returns:
        Process exit code
    """
    options = parse_args(sys.argv[1:] if argv is None else argv)

    if options.invalid is not None:
        print(f"Invalid command argument: {options.invalid}")
        print("Use /h or /help for usage")
        return EXIT_FAILURE

    if options.show_help:
        print(USAGE)
        return EXIT_SUCCESS

    if options.debug:
        print("=== Debug mode enabled ===")
    get_logger().configure(debug=options.debug)

    print("=== Loading configuration ===")
    config = load_config(config_path)
    if config is None:
        return EXIT_FAILURE

    print(f"=== Starting OPC UA server: {config.endpoint_url} ===")
    manager = BridgeServerManager(config)
    try:
        asyncio.run(_serve(manager))
    except Exception as e:
        log_error(f"Server terminated: {e}")
        return EXIT_FAILURE

    return EXIT_SUCCESS
