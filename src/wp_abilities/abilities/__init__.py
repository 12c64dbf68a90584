"""WordPress abilities: named, schema-described operations exposed over MCP.

Public API: Ability, AbilityCategory, AbilityContext, AbilityDispatcher,
    AbilityPermissionError, AbilityRegistrationError, AbilityRegistry,
    Principal, build_default_registry, check_permission, principal_from_settings
Internal: debug_log, plugins, posts, sanitize, security_check, site_info
"""

from wp_abilities.abilities.defaults import build_default_registry
from wp_abilities.abilities.dispatch import (
    AbilityDispatcher,
    AbilityPermissionError,
    check_permission,
    principal_from_settings,
)
from wp_abilities.abilities.registry import AbilityRegistrationError, AbilityRegistry
from wp_abilities.abilities.types import Ability, AbilityCategory, AbilityContext, Principal

__all__ = [
    "Ability",
    "AbilityCategory",
    "AbilityContext",
    "AbilityDispatcher",
    "AbilityPermissionError",
    "AbilityRegistrationError",
    "AbilityRegistry",
    "Principal",
    "build_default_registry",
    "check_permission",
    "principal_from_settings",
]
