"""``plugin-list/get-plugins`` ability: enumerate installed plugins.

Plugins are discovered the way WordPress does it: PHP files directly in the
plugins directory, or one directory level down, whose header comment carries
a ``Plugin Name:`` field.
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, Field

from wp_abilities.abilities.types import Ability, AbilityContext, AbilityOutput, EmptyInput

_HEADER_SCAN_BYTES = 8 * 1024
_HEADER_FIELDS = {"Name": "Plugin Name", "Version": "Version"}


class PluginInfo(BaseModel):
    name: str = Field(description="Plugin name.")
    slug: str = Field(description="Plugin slug/directory.")
    file: str = Field(description="Main plugin file path.")
    status: str = Field(description="Plugin status (active/inactive).")
    version: str = Field(description="Plugin version.")


class PluginListOutput(AbilityOutput):
    success: bool = Field(description="Whether the plugin list retrieval completed successfully.")
    plugins: list[PluginInfo] | None = Field(default=None, description="List of installed plugins.")
    error: str | None = Field(default=None, description="Error message if the retrieval failed.")


def read_plugin_headers(path: Path) -> dict[str, str]:
    """Parse plugin header fields from the first 8 KiB of *path*."""
    with path.open("rb") as fh:
        head = fh.read(_HEADER_SCAN_BYTES).decode("utf-8", errors="replace")
    head = head.replace("\r", "\n")
    headers: dict[str, str] = {}
    for key, label in _HEADER_FIELDS.items():
        match = re.search(
            rf"^(?:[ \t]*<\?php)?[ \t/*#@]*{re.escape(label)}:(.*)$",
            head,
            flags=re.MULTILINE | re.IGNORECASE,
        )
        headers[key] = _clean_header_value(match.group(1)) if match else ""
    return headers


def _clean_header_value(raw: str) -> str:
    return re.sub(r"\s*(?:\*/|\?>).*", "", raw).strip()


def _candidate_files(plugins_dir: Path) -> list[Path]:
    candidates: list[Path] = []
    for entry in sorted(plugins_dir.iterdir()):
        if entry.name.startswith("."):
            continue
        if entry.is_file() and entry.suffix == ".php":
            candidates.append(entry)
        elif entry.is_dir():
            candidates.extend(
                sub
                for sub in sorted(entry.iterdir())
                if sub.is_file() and sub.suffix == ".php" and not sub.name.startswith(".")
            )
    return candidates


def plugin_slug(plugin_file: str) -> str:
    """Directory name for packaged plugins, file stem for single-file ones."""
    parent = Path(plugin_file).parent.as_posix()
    if parent == ".":
        return Path(plugin_file).stem
    return parent


def discover_plugins(plugins_dir: Path) -> dict[str, dict[str, str]]:
    """Map plugin file (relative to *plugins_dir*) to its header fields."""
    if not plugins_dir.is_dir():
        return {}
    found: dict[str, dict[str, str]] = {}
    for path in _candidate_files(plugins_dir):
        headers = read_plugin_headers(path)
        if not headers["Name"]:
            continue
        found[path.relative_to(plugins_dir).as_posix()] = headers
    return dict(sorted(found.items()))


def get_plugin_list(payload: EmptyInput, context: AbilityContext) -> PluginListOutput:
    settings = context.settings
    try:
        all_plugins = discover_plugins(settings.plugins_dir)
    except OSError as exc:
        context.logger.warning("Plugin discovery failed: %s", exc)
        return PluginListOutput(
            success=False,
            error=f"Failed to retrieve plugin list: {exc}",
        )

    active = set(settings.active_plugins) | set(settings.network_active_plugins)
    plugins = [
        PluginInfo(
            name=headers["Name"],
            slug=plugin_slug(plugin_file),
            file=plugin_file,
            status="active" if plugin_file in active else "inactive",
            version=headers["Version"],
        )
        for plugin_file, headers in all_plugins.items()
    ]
    return PluginListOutput(success=True, plugins=plugins)


def build_abilities(category: str) -> list[Ability]:
    return [
        Ability(
            name="plugin-list/get-plugins",
            label="Plugin List",
            description=(
                "Retrieves a list of all installed WordPress plugins with their names and slugs."
            ),
            category=category,
            input_model=EmptyInput,
            output_model=PluginListOutput,
            execute=get_plugin_list,
            capability="manage_options",
            read_only=True,
        )
    ]
