"""Command-line entry point: ``wp-abilities serve | list | call``."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, cast

from dotenv import load_dotenv

from wp_abilities.abilities.defaults import build_default_registry
from wp_abilities.abilities.dispatch import (
    AbilityDispatcher,
    is_error,
    principal_from_settings,
    to_json,
)
from wp_abilities.config import Settings, load_settings

_LOG = logging.getLogger(__name__)

_DEFAULT_VERSION = "0.1.0"
_EXIT_OK = 0
_EXIT_ABILITY_ERROR = 1
_EXIT_USAGE = 2


def package_version() -> str:
    try:
        return version("wp-abilities")
    except PackageNotFoundError:
        return _DEFAULT_VERSION


def parse_cli_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="wp-abilities",
        description="Expose WordPress abilities over the Model Context Protocol",
    )
    parser.add_argument("--version", action="version", version=package_version())
    parser.add_argument(
        "--config",
        default=None,
        help="Path to wp-abilities.toml (default: $WP_ABILITIES_CONFIG or ./wp-abilities.toml)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the MCP server")
    serve.add_argument("--transport", choices=["stdio", "http"], default=None)
    serve.add_argument("--host", default=None, help="Bind host (http transport)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (http transport)")

    sub.add_parser("list", help="List registered abilities")

    call = sub.add_parser("call", help="Run one ability and print its JSON envelope")
    call.add_argument("ability", help="Ability name, e.g. debug-log/read-log")
    call.add_argument("--input", default=None, help="JSON object with ability input")

    return parser.parse_args(argv if argv is not None else sys.argv[1:])


def configure_logging(debug: bool) -> None:
    # stdout carries MCP stdio frames, so logs go to stderr.
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _parse_input(raw: str | None) -> dict[str, Any]:
    if raw is None:
        return {}
    parsed = json.loads(raw)
    if not isinstance(parsed, dict):
        raise ValueError("--input must be a JSON object.")
    return cast(dict[str, Any], parsed)


def _cmd_list() -> int:
    registry = build_default_registry()
    for ability in registry:
        print(f"{ability.name}\t{ability.capability}\t{ability.label}")
    return _EXIT_OK


def _cmd_call(settings: Settings, ability: str, raw_input: str | None) -> int:
    try:
        arguments = _parse_input(raw_input)
    except ValueError as exc:
        print(f"Invalid --input: {exc}", file=sys.stderr)
        return _EXIT_USAGE
    dispatcher = AbilityDispatcher(build_default_registry(), settings)
    payload = dispatcher.dispatch(ability, arguments, principal_from_settings(settings))
    print(to_json(payload))
    return _EXIT_ABILITY_ERROR if is_error(payload) else _EXIT_OK


def _cmd_serve(settings: Settings, args: argparse.Namespace) -> int:
    from wp_abilities.server.mcp_server import create_mcp_server

    server = create_mcp_server(settings)
    if server is None:
        print("MCP server unavailable: fastmcp is not installed.", file=sys.stderr)
        return _EXIT_USAGE
    transport = args.transport or settings.transport
    if transport == "http":
        host = args.host or settings.host
        port = args.port or settings.port
        _LOG.info("Serving %s over HTTP on %s:%d", settings.server_name, host, port)
        server.run(transport="http", host=host, port=port)
    else:
        _LOG.info("Serving %s over stdio", settings.server_name)
        server.run(transport="stdio")
    return _EXIT_OK


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = parse_cli_args(argv)
    try:
        settings = load_settings(Path(args.config) if args.config else None)
    except (ValueError, TypeError, OSError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return _EXIT_USAGE
    configure_logging(args.debug or settings.debug)

    if args.command == "list":
        return _cmd_list()
    if args.command == "call":
        return _cmd_call(settings, args.ability, args.input)
    return _cmd_serve(settings, args)


if __name__ == "__main__":
    raise SystemExit(main())
