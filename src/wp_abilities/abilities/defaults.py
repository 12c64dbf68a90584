"""Assemble the registry of built-in abilities."""

from __future__ import annotations

from wp_abilities.abilities import debug_log, plugins, posts, security_check, site_info
from wp_abilities.abilities.registry import AbilityRegistry
from wp_abilities.abilities.types import AbilityCategory

DEMO_CATEGORY = AbilityCategory(
    slug="mcp-server-demo",
    label="MCP Server Demo",
    description=(
        "Demo abilities for the WordPress MCP Server implementation "
        "using the Abilities API and MCP Adapter."
    ),
)

_ABILITY_MODULES = (site_info, debug_log, plugins, posts, security_check)


def build_default_registry() -> AbilityRegistry:
    """Return a fresh registry holding every built-in ability."""
    registry = AbilityRegistry()
    registry.register_category(DEMO_CATEGORY)
    for module in _ABILITY_MODULES:
        for ability in module.build_abilities(DEMO_CATEGORY.slug):
            registry.register(ability)
    return registry
