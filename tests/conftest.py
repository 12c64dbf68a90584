"""Shared test fixtures for wp-abilities."""

from __future__ import annotations

from pathlib import Path

import pytest

from wp_abilities.abilities.types import Principal
from wp_abilities.config import PrincipalConfig, Settings

_PLUGIN_HEADER = """<?php
/**
 * Plugin Name: {name}
 * Description: Test plugin.
 * Version: {version}
 */
"""


def write_plugin(plugins_dir: Path, relative: str, name: str, version: str = "1.0.0") -> Path:
    """Create a plugin main file with a standard header."""
    path = plugins_dir / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_PLUGIN_HEADER.format(name=name, version=version), encoding="utf-8")
    return path


@pytest.fixture()
def wp_root(tmp_path: Path) -> Path:
    """Minimal WordPress tree: wp-includes/version.php and wp-content/plugins."""
    root = tmp_path / "wordpress"
    (root / "wp-includes").mkdir(parents=True)
    (root / "wp-content" / "plugins").mkdir(parents=True)
    (root / "wp-includes" / "version.php").write_text(
        "<?php\n$wp_version = '6.6.2';\n$wp_db_version = 57155;\n",
        encoding="utf-8",
    )
    return root


@pytest.fixture()
def settings(wp_root: Path, tmp_path: Path) -> Settings:
    """Settings for the temporary WordPress tree."""
    return Settings(
        wp_root=wp_root,
        site_name="Test Site",
        site_url="https://example.test",
        active_theme="Twenty Twenty-Four",
        active_plugins=("akismet/akismet.php",),
        php_version="8.2.0",
        principal=PrincipalConfig(user_id=7, login="editor"),
        posts_db=tmp_path / "posts.sqlite",
    )


@pytest.fixture()
def admin() -> Principal:
    return Principal(
        user_id=1,
        login="admin",
        capabilities=frozenset({"manage_options", "publish_posts"}),
    )


@pytest.fixture()
def subscriber() -> Principal:
    return Principal(user_id=2, login="subscriber", capabilities=frozenset({"read"}))
