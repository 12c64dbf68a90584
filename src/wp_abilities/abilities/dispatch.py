"""Ability dispatch: lookup, permission middleware, validation, execution.

Every call produces a JSON-ready envelope ``{"type", "data", "meta"}``.
Domain failures inside an ability are reported by the ability itself as
``success: false`` data; the envelope error types here cover failures of
the dispatch pipeline.

Dependencies: abilities.registry, abilities.types, infra.audit_log
Wired in: server/mcp_server.py, cli.py
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from wp_abilities.abilities.registry import AbilityRegistry
from wp_abilities.abilities.types import (
    Ability,
    AbilityContext,
    AbilityOutput,
    Principal,
)
from wp_abilities.config import Settings
from wp_abilities.infra.audit_log import log_dispatch

_LOG = logging.getLogger(__name__)

ERROR_UNKNOWN_ABILITY = "error.unknown_ability"
ERROR_PERMISSION_DENIED = "error.permission_denied"
ERROR_INVALID_INPUT = "error.invalid_input"
ERROR_EXECUTION_FAILED = "error.execution_failed"


class AbilityPermissionError(PermissionError):
    """The principal lacks the capability an ability requires."""

    def __init__(self, ability: str, capability: str) -> None:
        super().__init__(f"Permission denied for {ability}: requires capability '{capability}'.")
        self.ability = ability
        self.capability = capability


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


def envelope(
    envelope_type: str,
    data: dict[str, Any],
    *,
    ability: str,
    meta: dict[str, Any] | None = None,
) -> dict[str, Any]:
    envelope_meta: dict[str, Any] = {"ability": ability, "timestamp": _utc_now_iso()}
    if meta:
        envelope_meta.update(meta)
    return {"type": envelope_type, "data": data, "meta": envelope_meta}


def to_json(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=True, allow_nan=False)


def is_error(payload: Mapping[str, Any]) -> bool:
    return str(payload.get("type", "")).startswith("error.")


def check_permission(ability: Ability, principal: Principal) -> None:
    """Raise ``AbilityPermissionError`` unless *principal* may run *ability*."""
    if not principal.can(ability.capability):
        raise AbilityPermissionError(ability.name, ability.capability)


class AbilityDispatcher:
    """Run registered abilities on behalf of a principal."""

    def __init__(
        self,
        registry: AbilityRegistry,
        settings: Settings,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._registry = registry
        self._settings = settings
        self._logger = logger or _LOG

    @property
    def registry(self) -> AbilityRegistry:
        return self._registry

    def dispatch(
        self,
        name: str,
        raw_input: Mapping[str, Any] | None,
        principal: Principal,
    ) -> dict[str, Any]:
        """Execute ability *name* with *raw_input* and return an envelope."""
        payload = self._dispatch(name, raw_input, principal)
        self._audit(name, principal, payload)
        return payload

    def _dispatch(
        self,
        name: str,
        raw_input: Mapping[str, Any] | None,
        principal: Principal,
    ) -> dict[str, Any]:
        ability = self._registry.find(name)
        if ability is None:
            return envelope(
                ERROR_UNKNOWN_ABILITY,
                {"message": f"Unknown ability: {name}"},
                ability=name,
            )

        try:
            check_permission(ability, principal)
        except AbilityPermissionError as exc:
            self._logger.info("Denied %s for user %s", name, principal.login)
            return envelope(
                ERROR_PERMISSION_DENIED,
                {"message": str(exc), "capability": exc.capability},
                ability=name,
            )

        try:
            parsed = ability.input_model.model_validate(dict(raw_input or {}))
        except ValidationError as exc:
            return envelope(
                ERROR_INVALID_INPUT,
                {
                    "message": f"Invalid input for {name}.",
                    "errors": exc.errors(include_url=False, include_context=False),
                },
                ability=name,
            )

        context = AbilityContext(
            principal=principal,
            settings=self._settings,
            logger=self._logger,
        )
        try:
            result = ability.execute(parsed, context)
            output = self._validate_output(ability, result)
        except Exception as exc:
            self._logger.exception("Ability %s failed", name)
            return envelope(
                ERROR_EXECUTION_FAILED,
                {"message": f"{type(exc).__name__}: {exc}"},
                ability=name,
            )

        return envelope(ability.name, output.model_dump(exclude_none=True), ability=name)

    @staticmethod
    def _validate_output(ability: Ability, result: object) -> AbilityOutput:
        if isinstance(result, ability.output_model):
            return result
        return ability.output_model.model_validate(result)

    def _audit(self, name: str, principal: Principal, payload: Mapping[str, Any]) -> None:
        audit_path = self._settings.audit_log
        if audit_path is None:
            return
        outcome = str(payload["type"]) if is_error(payload) else "ok"
        try:
            log_dispatch(audit_path, ability=name, login=principal.login, outcome=outcome)
        except OSError:
            self._logger.exception("Failed to write audit log %s", audit_path)


def principal_from_settings(settings: Settings) -> Principal:
    """Principal configured for the MCP session."""
    configured = settings.principal
    return Principal(
        user_id=configured.user_id,
        login=configured.login,
        capabilities=frozenset(configured.capabilities),
    )
