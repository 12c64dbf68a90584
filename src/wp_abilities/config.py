"""Server settings loading from TOML and environment variables.

A single ``Settings`` value is built at startup and passed explicitly to the
abilities, dispatcher and MCP server.  Values come from an optional
``wp-abilities.toml`` file and are overridden by ``WP_ABILITIES_*``
environment variables.

Dependencies: (none — leaf module)
Wired in: cli.py → main(), server/mcp_server.py
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

ENV_PREFIX = "WP_ABILITIES_"
DEFAULT_CONFIG_NAME = "wp-abilities.toml"

_VALID_TRANSPORTS = frozenset({"stdio", "http"})
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


@dataclass(frozen=True)
class PrincipalConfig:
    """Identity the MCP session acts as when abilities check capabilities."""

    user_id: int = 1
    login: str = "admin"
    capabilities: tuple[str, ...] = ("manage_options", "publish_posts")


@dataclass(frozen=True)
class Settings:
    """Immutable runtime configuration for one WordPress install."""

    wp_root: Path
    """WordPress installation root (the directory holding ``wp-includes``)."""

    content_dir: Path | None = None
    """``wp-content`` directory; defaults to ``<wp_root>/wp-content``."""

    debug_log: Path | None = None
    """Explicit debug log path; defaults to ``<content_dir>/debug.log``."""

    site_name: str = "WordPress"
    site_url: str = "http://localhost"
    active_theme: str = ""
    active_plugins: tuple[str, ...] = ()
    network_active_plugins: tuple[str, ...] = ()
    php_version: str = "unknown"
    wordpress_version: str | None = None
    """Fallback when ``wp-includes/version.php`` is unavailable."""

    server_name: str = "mcp-demo-server"
    server_version: str = "v1.0.0"
    exposed_abilities: tuple[str, ...] | None = None
    """Ability names exposed as MCP tools; ``None`` exposes every registered one."""

    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 8420

    principal: PrincipalConfig = field(default_factory=PrincipalConfig)

    wp_cli: str = "wp"
    security_check_timeout: float = 300.0

    posts_db: Path | None = None
    """SQLite post store; defaults to ``<content_dir>/wp-abilities-posts.sqlite``."""

    audit_log: Path | None = None

    debug: bool = False
    """Enable DEBUG logging across the server."""

    @property
    def resolved_content_dir(self) -> Path:
        return self.content_dir if self.content_dir is not None else self.wp_root / "wp-content"

    @property
    def plugins_dir(self) -> Path:
        return self.resolved_content_dir / "plugins"

    @property
    def debug_log_path(self) -> Path:
        if self.debug_log is not None:
            return self.debug_log
        return self.resolved_content_dir / "debug.log"

    @property
    def posts_db_path(self) -> Path:
        if self.posts_db is not None:
            return self.posts_db
        return self.resolved_content_dir / "wp-abilities-posts.sqlite"


def _parse_bool(key: str, raw: object) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Setting '{key}': expected a boolean, got {raw!r}.")


def _parse_int(key: str, raw: object) -> int:
    try:
        return int(str(raw))
    except ValueError as exc:
        raise ValueError(f"Setting '{key}': expected an integer, got {raw!r}.") from exc


def _parse_float(key: str, raw: object) -> float:
    try:
        value = float(str(raw))
    except ValueError as exc:
        raise ValueError(f"Setting '{key}': expected a number, got {raw!r}.") from exc
    if value <= 0:
        raise ValueError(f"Setting '{key}': must be > 0.")
    return value


def _parse_str_list(key: str, raw: object) -> tuple[str, ...]:
    if isinstance(raw, str):
        return tuple(part.strip() for part in raw.split(",") if part.strip())
    if not isinstance(raw, list):
        raise TypeError(f"Setting '{key}' must be a list.")
    return tuple(str(item) for item in cast(list[object], raw))


def _table(data: Mapping[str, object], name: str) -> dict[str, object]:
    raw = data.get(name, {})
    if not isinstance(raw, dict):
        raise TypeError(f"Config section [{name}] must be a table.")
    return cast(dict[str, object], raw)


def _optional_path(raw: object, base_dir: Path) -> Path | None:
    if raw is None or raw == "":
        return None
    path = Path(str(raw)).expanduser()
    return path if path.is_absolute() else base_dir / path


def _read_toml(config_path: Path | None) -> tuple[dict[str, object], Path]:
    if config_path is None or not config_path.is_file():
        return {}, Path.cwd()
    with config_path.open("rb") as fh:
        data = tomllib.load(fh)
    return cast(dict[str, object], data), config_path.parent


def _principal_from(raw: dict[str, object]) -> PrincipalConfig:
    defaults = PrincipalConfig()
    capabilities = raw.get("capabilities")
    return PrincipalConfig(
        user_id=_parse_int("principal.user_id", raw.get("user_id", defaults.user_id)),
        login=str(raw.get("login", defaults.login)),
        capabilities=(
            _parse_str_list("principal.capabilities", capabilities)
            if capabilities is not None
            else defaults.capabilities
        ),
    )


def _transport(raw: object) -> str:
    transport = str(raw).strip().lower()
    if transport not in _VALID_TRANSPORTS:
        msg = (
            f"Setting 'server.transport': invalid value '{transport}'. "
            f"Must be one of {sorted(_VALID_TRANSPORTS)}."
        )
        raise ValueError(msg)
    return transport


def load_settings(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build ``Settings`` from *config_path* and ``WP_ABILITIES_*`` variables.

    When *config_path* is ``None`` the ``WP_ABILITIES_CONFIG`` variable is
    consulted, then ``./wp-abilities.toml``.  A missing file is not an error;
    every value has a default except the WordPress root, which falls back to
    the current directory.
    """
    env = os.environ if environ is None else environ

    def _env(name: str) -> str | None:
        return env.get(f"{ENV_PREFIX}{name}")

    if config_path is None:
        env_config = _env("CONFIG")
        config_path = Path(env_config) if env_config else Path.cwd() / DEFAULT_CONFIG_NAME
    data, base_dir = _read_toml(config_path)

    site = _table(data, "site")
    server = _table(data, "server")
    security = _table(data, "security")
    principal = _table(data, "principal")
    paths = _table(data, "paths")

    wp_root = _optional_path(_env("WP_ROOT") or paths.get("wp_root"), base_dir) or Path.cwd()
    content_dir = _optional_path(_env("CONTENT_DIR") or paths.get("content_dir"), base_dir)
    debug_log = _optional_path(_env("DEBUG_LOG") or paths.get("debug_log"), base_dir)
    posts_db = _optional_path(_env("POSTS_DB") or paths.get("posts_db"), base_dir)
    audit_log = _optional_path(_env("AUDIT_LOG") or paths.get("audit_log"), base_dir)

    raw_exposed = server.get("abilities")
    exposed = (
        _parse_str_list("server.abilities", raw_exposed) if raw_exposed is not None else None
    )
    raw_wp_version = site.get("wordpress_version")

    return Settings(
        wp_root=wp_root,
        content_dir=content_dir,
        debug_log=debug_log,
        site_name=str(site.get("name", "WordPress")),
        site_url=str(site.get("url", "http://localhost")).rstrip("/"),
        active_theme=str(site.get("active_theme", "")),
        active_plugins=_parse_str_list("site.active_plugins", site.get("active_plugins", [])),
        network_active_plugins=_parse_str_list(
            "site.network_active_plugins", site.get("network_active_plugins", [])
        ),
        php_version=str(site.get("php_version", "unknown")),
        wordpress_version=str(raw_wp_version) if raw_wp_version is not None else None,
        server_name=str(server.get("name", "mcp-demo-server")),
        server_version=str(server.get("version", "v1.0.0")),
        exposed_abilities=exposed,
        transport=_transport(_env("TRANSPORT") or server.get("transport", "stdio")),
        host=_env("HOST") or str(server.get("host", "127.0.0.1")),
        port=_parse_int("server.port", _env("PORT") or server.get("port", 8420)),
        principal=_principal_from(principal),
        wp_cli=str(security.get("wp_cli", "wp")),
        security_check_timeout=_parse_float(
            "security.timeout", security.get("timeout", 300.0)
        ),
        posts_db=posts_db,
        audit_log=audit_log,
        debug=_parse_bool("debug", _env("DEBUG") or data.get("debug", False)),
    )
