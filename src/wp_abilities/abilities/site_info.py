"""``site/site-info`` ability, also served as an MCP resource."""

from __future__ import annotations

import re
from pathlib import Path
from types import MappingProxyType

from pydantic import Field

from wp_abilities.abilities.types import Ability, AbilityContext, AbilityOutput, EmptyInput

SITE_INFO_URI = "site://wordpress/site-info"

_WP_VERSION_RE = re.compile(r"""\$wp_version\s*=\s*['"]([^'"]+)['"]\s*;""")


class SiteInfoOutput(AbilityOutput):
    site_name: str = Field(description="The name of the WordPress site")
    site_url: str = Field(description="The URL of the WordPress site")
    active_theme: str = Field(description="The active theme of the WordPress site")
    active_plugins: list[str] = Field(
        description="List of active plugins on the WordPress site"
    )
    php_version: str = Field(description="The PHP version of the WordPress site")
    wordpress_version: str = Field(description="The WordPress version of the site")


def read_wordpress_version(wp_root: Path) -> str | None:
    """Extract ``$wp_version`` from ``wp-includes/version.php``."""
    version_file = wp_root / "wp-includes" / "version.php"
    try:
        source = version_file.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    match = _WP_VERSION_RE.search(source)
    return match.group(1) if match else None


def get_site_info(payload: EmptyInput, context: AbilityContext) -> SiteInfoOutput:
    settings = context.settings
    wordpress_version = (
        read_wordpress_version(settings.wp_root) or settings.wordpress_version or "unknown"
    )
    return SiteInfoOutput(
        site_name=settings.site_name,
        site_url=settings.site_url,
        active_theme=settings.active_theme,
        active_plugins=list(settings.active_plugins),
        php_version=settings.php_version,
        wordpress_version=wordpress_version,
    )


def build_abilities(category: str) -> list[Ability]:
    return [
        Ability(
            name="site/site-info",
            label="Site Info",
            description="Returns information about this WordPress site",
            category=category,
            input_model=EmptyInput,
            output_model=SiteInfoOutput,
            execute=get_site_info,
            capability="manage_options",
            read_only=True,
            meta=MappingProxyType({"mimeType": "application/json", "uri": SITE_INFO_URI}),
        )
    ]
