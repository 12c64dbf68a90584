"""FastMCP server exposing registered abilities as tools and resources."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from importlib import import_module
from typing import Any, cast

from wp_abilities.abilities.defaults import build_default_registry
from wp_abilities.abilities.dispatch import (
    AbilityDispatcher,
    envelope,
    principal_from_settings,
    to_json,
)
from wp_abilities.abilities.registry import AbilityRegistry
from wp_abilities.abilities.types import Principal
from wp_abilities.config import Settings

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class _ServerState:
    dispatcher: AbilityDispatcher
    principal: Principal


_state: _ServerState | None = None


def configure(dispatcher: AbilityDispatcher, principal: Principal) -> None:
    """Bind the dispatcher and principal used by every tool call."""
    global _state
    _state = _ServerState(dispatcher=dispatcher, principal=principal)


def _call(ability: str, arguments: dict[str, Any]) -> str:
    if _state is None:
        return to_json(
            envelope(
                "error.server_uninitialized",
                {"message": "MCP server is not configured."},
                ability=ability,
            )
        )
    payload = _state.dispatcher.dispatch(ability, arguments, _state.principal)
    return to_json(payload)


def site_info() -> str:
    """Returns information about this WordPress site."""
    return _call("site/site-info", {})


def read_log(lines: int = 100) -> str:
    """Reads the last lines of the WordPress debug.log file (default 100, max 1000)."""
    return _call("debug-log/read-log", {"lines": lines})


def clear_log() -> str:
    """Empties the WordPress debug.log file."""
    return _call("debug-log/clear-log", {})


def get_plugins() -> str:
    """Lists installed WordPress plugins with name, slug, file, status and version."""
    return _call("plugin-list/get-plugins", {})


def check_security(plugin_slug: str) -> str:
    """Runs Plugin Check security-category checks against one plugin."""
    return _call("plugin-security/check-security", {"plugin_slug": plugin_slug})


def create_post(title: str, content: str, status: str = "draft") -> str:
    """Creates a new blog post; content must be block editor markup."""
    return _call(
        "mcp-server/create-post",
        {"title": title, "content": content, "status": status},
    )


_TOOL_FUNCTIONS: dict[str, Callable[..., str]] = {
    "site/site-info": site_info,
    "debug-log/read-log": read_log,
    "debug-log/clear-log": clear_log,
    "plugin-list/get-plugins": get_plugins,
    "plugin-security/check-security": check_security,
    "mcp-server/create-post": create_post,
}


def _load_fastmcp_class() -> type[Any] | None:
    try:
        module = import_module("fastmcp")
    except ModuleNotFoundError:
        _LOG.warning("fastmcp is not installed. Install wp-abilities with its MCP dependency.")
        return None

    fastmcp_class = getattr(module, "FastMCP", None)
    if not isinstance(fastmcp_class, type):
        _LOG.error("fastmcp.FastMCP is unavailable. MCP server disabled.")
        return None
    return cast(type[Any], fastmcp_class)


def exposed_abilities(registry: AbilityRegistry, settings: Settings) -> list[str]:
    """Ability names to publish, in registry order, honouring ``server.abilities``."""
    if settings.exposed_abilities is None:
        return registry.names()
    exposed: list[str] = []
    for name in settings.exposed_abilities:
        if name not in registry:
            _LOG.warning("Configured ability %s is not registered; skipping.", name)
            continue
        exposed.append(name)
    return exposed


def _register_abilities(server: Any, registry: AbilityRegistry, settings: Settings) -> None:
    for name in exposed_abilities(registry, settings):
        func = _TOOL_FUNCTIONS.get(name)
        if func is None:
            _LOG.warning("Ability %s has no MCP tool binding; skipping.", name)
            continue
        ability = registry.get(name)
        server.tool(name=ability.tool_name, description=ability.description)(func)
        uri = ability.resource_uri
        if uri is not None:
            server.resource(
                uri,
                name=ability.tool_name,
                description=ability.description,
                mime_type=ability.meta.get("mimeType", "application/json"),
            )(func)
        _LOG.debug("Exposed ability %s as tool %s", name, ability.tool_name)


def create_mcp_server(
    settings: Settings,
    fastmcp_class: type[Any] | None = None,
    *,
    registry: AbilityRegistry | None = None,
) -> Any | None:
    """Create the MCP server instance and bind it to a dispatcher."""
    server_class = fastmcp_class if fastmcp_class is not None else _load_fastmcp_class()
    if server_class is None:
        return None
    active_registry = registry if registry is not None else build_default_registry()
    configure(AbilityDispatcher(active_registry, settings), principal_from_settings(settings))
    server = server_class(settings.server_name)
    _register_abilities(server, active_registry, settings)
    return server
