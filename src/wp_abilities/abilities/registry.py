"""Explicit ability and category registry.

Abilities are registered directly instead of through host action hooks.
A registry is mutable only while it is being assembled; lookups never
create entries.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from wp_abilities.abilities.types import Ability, AbilityCategory

_ABILITY_NAME_RE = re.compile(r"^[a-z0-9-]+/[a-z0-9-]+$")
_CATEGORY_SLUG_RE = re.compile(r"^[a-z0-9-]+$")


class AbilityRegistrationError(ValueError):
    """Raised when an ability or category cannot be registered."""


class UnknownAbilityError(KeyError):
    """Raised when looking up a name that was never registered."""


class AbilityRegistry:
    """Name → ability mapping with category bookkeeping."""

    def __init__(self) -> None:
        self._abilities: dict[str, Ability] = {}
        self._categories: dict[str, AbilityCategory] = {}

    def register_category(self, category: AbilityCategory) -> AbilityCategory:
        if not _CATEGORY_SLUG_RE.match(category.slug):
            raise AbilityRegistrationError(f"Invalid category slug: {category.slug!r}")
        if category.slug in self._categories:
            raise AbilityRegistrationError(f"Category already registered: {category.slug}")
        self._categories[category.slug] = category
        return category

    def register(self, ability: Ability) -> Ability:
        if not _ABILITY_NAME_RE.match(ability.name):
            raise AbilityRegistrationError(
                f"Invalid ability name {ability.name!r}: expected 'namespace/name'."
            )
        if ability.name in self._abilities:
            raise AbilityRegistrationError(f"Ability already registered: {ability.name}")
        if ability.category not in self._categories:
            raise AbilityRegistrationError(
                f"Ability {ability.name} uses unregistered category {ability.category!r}."
            )
        self._abilities[ability.name] = ability
        return ability

    def get(self, name: str) -> Ability:
        try:
            return self._abilities[name]
        except KeyError:
            raise UnknownAbilityError(name) from None

    def find(self, name: str) -> Ability | None:
        return self._abilities.get(name)

    def names(self) -> list[str]:
        return sorted(self._abilities)

    def categories(self) -> list[AbilityCategory]:
        return [self._categories[slug] for slug in sorted(self._categories)]

    def __contains__(self, name: object) -> bool:
        return name in self._abilities

    def __iter__(self) -> Iterator[Ability]:
        return iter([self._abilities[name] for name in self.names()])

    def __len__(self) -> int:
        return len(self._abilities)
