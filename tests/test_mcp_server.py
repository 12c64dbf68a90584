"""Tests for the FastMCP server wrapper module."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from dataclasses import replace
from typing import Any

import pytest

from wp_abilities.config import PrincipalConfig, Settings
from wp_abilities.server import mcp_server


class _FakeFastMCP:
    def __init__(self, name: str) -> None:
        self.name = name
        self.tools: dict[str, Callable[..., Any]] = {}
        self.descriptions: dict[str, str] = {}
        self.resources: dict[str, dict[str, Any]] = {}

    def tool(
        self, *, name: str, description: str | None = None
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        def _register(func: Callable[..., Any]) -> Callable[..., Any]:
            self.tools[name] = func
            self.descriptions[name] = description or ""
            return func

        return _register

    def resource(
        self, uri: str, **kwargs: Any
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        def _register(func: Callable[..., Any]) -> Callable[..., Any]:
            self.resources[uri] = {"func": func, **kwargs}
            return func

        return _register


@pytest.fixture(autouse=True)
def _reset_state() -> Iterator[None]:
    yield
    mcp_server._state = None


def test_create_mcp_server_registers_all_abilities(settings: Settings) -> None:
    server = mcp_server.create_mcp_server(settings, _FakeFastMCP)

    assert isinstance(server, _FakeFastMCP)
    assert server.name == "mcp-demo-server"
    assert sorted(server.tools) == [
        "debug-log.clear-log",
        "debug-log.read-log",
        "mcp-server.create-post",
        "plugin-list.get-plugins",
        "plugin-security.check-security",
        "site.site-info",
    ]
    assert server.descriptions["site.site-info"] == "Returns information about this WordPress site"


def test_site_info_is_also_a_resource(settings: Settings) -> None:
    server = mcp_server.create_mcp_server(settings, _FakeFastMCP)
    assert isinstance(server, _FakeFastMCP)

    resource = server.resources["site://wordpress/site-info"]

    assert resource["mime_type"] == "application/json"
    payload = json.loads(resource["func"]())
    assert payload["data"]["site_name"] == "Test Site"


def test_exposed_abilities_filter(settings: Settings, caplog: pytest.LogCaptureFixture) -> None:
    limited = replace(
        settings, exposed_abilities=("debug-log/read-log", "made-up/ability")
    )

    server = mcp_server.create_mcp_server(limited, _FakeFastMCP)
    assert isinstance(server, _FakeFastMCP)

    assert list(server.tools) == ["debug-log.read-log"]
    assert server.resources == {}
    assert "made-up/ability is not registered" in caplog.text


def test_read_log_tool_returns_json_envelope(settings: Settings) -> None:
    (settings.debug_log_path).write_text("first\nsecond\n")
    server = mcp_server.create_mcp_server(settings, _FakeFastMCP)
    assert isinstance(server, _FakeFastMCP)

    payload = json.loads(server.tools["debug-log.read-log"](lines=1))

    assert payload["type"] == "debug-log/read-log"
    assert payload["data"]["content"] == "second\n"
    assert payload["meta"]["ability"] == "debug-log/read-log"


def test_tools_run_as_configured_principal(settings: Settings) -> None:
    reader = replace(
        settings, principal=PrincipalConfig(user_id=9, login="reader", capabilities=("read",))
    )
    mcp_server.create_mcp_server(reader, _FakeFastMCP)

    payload = json.loads(mcp_server.create_post(title="t", content="c"))

    assert payload["type"] == "error.permission_denied"


def test_create_post_tool(settings: Settings) -> None:
    mcp_server.create_mcp_server(settings, _FakeFastMCP)

    payload = json.loads(mcp_server.create_post(title="Hi", content="<p>x</p>", status="publish"))

    assert payload["data"]["success"] is True
    assert payload["data"]["url"] == "https://example.test/?p=1"


def test_tool_before_configuration_reports_error() -> None:
    payload = json.loads(mcp_server.get_plugins())

    assert payload["type"] == "error.server_uninitialized"


def test_missing_fastmcp_returns_none(
    settings: Settings, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(mcp_server, "_load_fastmcp_class", lambda: None)

    assert mcp_server.create_mcp_server(settings) is None
