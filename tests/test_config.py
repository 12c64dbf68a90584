"""Tests for settings loading from TOML and environment."""

from __future__ import annotations

from pathlib import Path

import pytest

from wp_abilities.config import PrincipalConfig, Settings, load_settings

_CONFIG = """
debug = true

[paths]
wp_root = "site"
debug_log = "/var/log/wp/debug.log"

[site]
name = "Demo"
url = "https://demo.test/"
active_theme = "Twenty Twenty-Four"
active_plugins = ["plugin-check/plugin.php", "akismet/akismet.php"]
php_version = "8.3.1"

[server]
name = "ai-experiments"
transport = "http"
port = 9000
abilities = ["site/site-info", "debug-log/read-log"]

[principal]
user_id = 3
login = "ops"
capabilities = ["manage_options"]

[security]
wp_cli = "/opt/wp-cli/wp"
timeout = 45
"""


def _write_config(tmp_path: Path, text: str = _CONFIG) -> Path:
    path = tmp_path / "wp-abilities.toml"
    path.write_text(text)
    return path


def test_load_settings_from_toml(tmp_path: Path) -> None:
    settings = load_settings(_write_config(tmp_path), environ={})

    assert settings.wp_root == tmp_path / "site"
    assert settings.debug_log_path == Path("/var/log/wp/debug.log")
    assert settings.site_name == "Demo"
    assert settings.site_url == "https://demo.test"
    assert settings.active_plugins == ("plugin-check/plugin.php", "akismet/akismet.php")
    assert settings.server_name == "ai-experiments"
    assert settings.transport == "http"
    assert settings.port == 9000
    assert settings.exposed_abilities == ("site/site-info", "debug-log/read-log")
    assert settings.principal == PrincipalConfig(
        user_id=3, login="ops", capabilities=("manage_options",)
    )
    assert settings.wp_cli == "/opt/wp-cli/wp"
    assert settings.security_check_timeout == 45.0
    assert settings.debug is True


def test_environment_overrides_file(tmp_path: Path) -> None:
    env = {
        "WP_ABILITIES_WP_ROOT": str(tmp_path / "other"),
        "WP_ABILITIES_DEBUG_LOG": str(tmp_path / "custom.log"),
        "WP_ABILITIES_PORT": "9100",
        "WP_ABILITIES_DEBUG": "0",
    }

    settings = load_settings(_write_config(tmp_path), environ=env)

    assert settings.wp_root == tmp_path / "other"
    assert settings.debug_log_path == tmp_path / "custom.log"
    assert settings.port == 9100
    assert settings.debug is False


def test_missing_config_uses_defaults(tmp_path: Path) -> None:
    env = {"WP_ABILITIES_WP_ROOT": str(tmp_path)}

    settings = load_settings(tmp_path / "absent.toml", environ=env)

    assert settings.wp_root == tmp_path
    assert settings.plugins_dir == tmp_path / "wp-content" / "plugins"
    assert settings.debug_log_path == tmp_path / "wp-content" / "debug.log"
    assert settings.posts_db_path == tmp_path / "wp-content" / "wp-abilities-posts.sqlite"
    assert settings.exposed_abilities is None
    assert settings.transport == "stdio"
    assert settings.debug is False


def test_config_path_from_environment(tmp_path: Path) -> None:
    path = _write_config(tmp_path)

    settings = load_settings(environ={"WP_ABILITIES_CONFIG": str(path)})

    assert settings.site_name == "Demo"


def test_content_dir_override(tmp_path: Path) -> None:
    settings = Settings(wp_root=tmp_path, content_dir=tmp_path / "content")

    assert settings.plugins_dir == tmp_path / "content" / "plugins"


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("[server]\ntransport = 'carrier-pigeon'\n", "server.transport"),
        ("[server]\nport = 'eighty'\n", "server.port"),
        ("[security]\ntimeout = 0\n", "security.timeout"),
        ("debug = 'maybe'\n", "debug"),
    ],
)
def test_invalid_values_raise(tmp_path: Path, text: str, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        load_settings(_write_config(tmp_path, text), environ={})


def test_non_list_plugins_raise(tmp_path: Path) -> None:
    with pytest.raises(TypeError, match="site.active_plugins"):
        load_settings(_write_config(tmp_path, "[site]\nactive_plugins = 3\n"), environ={})
