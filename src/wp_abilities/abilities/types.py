"""Value types shared by the ability registry, dispatcher and ability modules."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict

from wp_abilities.config import Settings

ALL_CAPABILITIES = "*"


class AbilityInput(BaseModel):
    """Base for ability inputs; unknown keys are ignored like WordPress does."""

    model_config = ConfigDict(extra="ignore")


class EmptyInput(AbilityInput):
    """Input for abilities that take no parameters."""


class AbilityOutput(BaseModel):
    """Base for ability outputs."""

    model_config = ConfigDict(extra="forbid")


@dataclass(frozen=True)
class Principal:
    """The user an ability call runs as."""

    user_id: int
    login: str
    capabilities: frozenset[str] = frozenset()

    def can(self, capability: str) -> bool:
        return ALL_CAPABILITIES in self.capabilities or capability in self.capabilities


@dataclass(frozen=True)
class AbilityContext:
    """Per-call collaborators handed to an ability's execute callable."""

    principal: Principal
    settings: Settings
    logger: logging.Logger


@dataclass(frozen=True)
class AbilityCategory:
    """Grouping label for related abilities."""

    slug: str
    label: str
    description: str = ""


Executor = Callable[[Any, AbilityContext], AbilityOutput]


@dataclass(frozen=True)
class Ability:
    """A named, schema-described operation."""

    name: str
    label: str
    description: str
    category: str
    input_model: type[AbilityInput]
    output_model: type[AbilityOutput]
    execute: Executor
    capability: str
    read_only: bool = False
    meta: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def tool_name(self) -> str:
        """MCP tool name: ``debug-log/read-log`` becomes ``debug-log.read-log``."""
        return self.name.replace("/", ".")

    @property
    def resource_uri(self) -> str | None:
        return self.meta.get("uri")

    def input_schema(self) -> dict[str, Any]:
        return self.input_model.model_json_schema()

    def output_schema(self) -> dict[str, Any]:
        return self.output_model.model_json_schema()
