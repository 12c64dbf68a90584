"""``plugin-security/check-security`` ability backed by the Plugin Check CLI.

Runs ``wp plugin check <slug> --categories=security --format=json`` and
reshapes its output.  Plugin Check prints one ``FILE: <path>`` header per
file followed by a JSON array of results for that file.

Dependencies: security.subprocess_sandbox, security.path_validator
Wired in: abilities/defaults.py
"""

from __future__ import annotations

import json
from typing import Any, cast

from pydantic import BaseModel, Field

from wp_abilities.abilities.sanitize import sanitize_text_field
from wp_abilities.abilities.types import Ability, AbilityContext, AbilityInput, AbilityOutput
from wp_abilities.config import Settings
from wp_abilities.security.path_validator import PathEscapeError, PathValidator
from wp_abilities.security.subprocess_sandbox import CommandSandbox, ProcessLimits

PLUGIN_CHECK_FILE = "plugin-check/plugin.php"
_FILE_HEADER = "FILE:"
_DEFAULT_SEVERITY = 5
_TYPE_ORDER = {"ERROR": 0, "WARNING": 1}


class SecurityCheckError(RuntimeError):
    """Plugin Check ran but its result could not be used."""


class SecurityCheckInput(AbilityInput):
    plugin_slug: str = Field(
        description='The plugin slug/name to check (e.g., "akismet", "hello-dolly").'
    )


class SecurityFinding(BaseModel):
    file: str
    line: int
    column: int
    type: str
    severity: int
    message: str
    source: str


class SecuritySummary(BaseModel):
    total_files_checked: int
    total_issues: int
    error_count: int
    warning_count: int


class SecurityCheckOutput(AbilityOutput):
    success: bool = Field(description="Whether the security check completed successfully.")
    plugin_slug: str | None = Field(default=None, description="The plugin that was checked.")
    security_findings: list[SecurityFinding] | None = Field(
        default=None, description="Security issues found in the plugin."
    )
    summary: SecuritySummary | None = Field(
        default=None, description="Summary of security check results."
    )
    error: str | None = Field(default=None, description="Error message if the check failed.")


def make_sandbox(settings: Settings) -> CommandSandbox:
    cpu_seconds = max(1, int(settings.security_check_timeout))
    return CommandSandbox(settings.wp_root, limits=ProcessLimits(max_cpu_seconds=cpu_seconds))


def _as_int(raw: object, default: int = 0) -> int:
    try:
        return int(str(raw))
    except ValueError:
        return default


def _finding(file: str, raw: dict[str, Any]) -> SecurityFinding:
    return SecurityFinding(
        file=file,
        line=_as_int(raw.get("line")),
        column=_as_int(raw.get("column")),
        type=str(raw.get("type", "ERROR")).upper(),
        severity=_as_int(raw.get("severity"), _DEFAULT_SEVERITY),
        message=str(raw.get("message", "")),
        source=str(raw.get("code", "")),
    )


def parse_check_output(stdout: str) -> list[SecurityFinding]:
    """Convert Plugin Check CLI JSON output into findings, errors first."""
    decoder = json.JSONDecoder()
    findings: list[SecurityFinding] = []
    current_file: str | None = None
    block: list[str] = []

    def _flush() -> None:
        if current_file is None:
            return
        text = "\n".join(block).strip()
        if not text:
            return
        try:
            parsed, _ = decoder.raw_decode(text)
        except json.JSONDecodeError as exc:
            raise SecurityCheckError(f"Invalid JSON for {current_file}: {exc.msg}") from exc
        if not isinstance(parsed, list):
            raise SecurityCheckError(f"Unexpected result shape for {current_file}.")
        for raw in cast(list[Any], parsed):
            if isinstance(raw, dict):
                findings.append(_finding(current_file, cast(dict[str, Any], raw)))

    for line in stdout.splitlines():
        if line.startswith(_FILE_HEADER):
            _flush()
            current_file = line[len(_FILE_HEADER) :].strip()
            block = []
        elif current_file is not None:
            block.append(line)
    _flush()

    return sorted(findings, key=lambda finding: _TYPE_ORDER.get(finding.type, 2))


def summarize(findings: list[SecurityFinding]) -> SecuritySummary:
    error_count = sum(1 for finding in findings if finding.type == "ERROR")
    warning_count = sum(1 for finding in findings if finding.type == "WARNING")
    return SecuritySummary(
        total_files_checked=len({finding.file for finding in findings if finding.file}),
        total_issues=error_count + warning_count,
        error_count=error_count,
        warning_count=warning_count,
    )


def _failure(error: str, plugin_slug: str | None = None) -> SecurityCheckOutput:
    return SecurityCheckOutput(success=False, plugin_slug=plugin_slug, error=error)


def check_plugin_security(
    payload: SecurityCheckInput, context: AbilityContext
) -> SecurityCheckOutput:
    settings = context.settings
    plugin_slug = sanitize_text_field(payload.plugin_slug)
    if not plugin_slug:
        return _failure("Plugin slug is required.")
    if plugin_slug.startswith("-"):
        return _failure(f'Invalid plugin slug "{plugin_slug}".', plugin_slug)

    plugins = PathValidator(root=settings.plugins_dir)
    active = set(settings.active_plugins) | set(settings.network_active_plugins)
    if PLUGIN_CHECK_FILE not in active or not (settings.plugins_dir / PLUGIN_CHECK_FILE).is_file():
        return _failure(
            "Plugin Check plugin is not installed or not active. "
            "Please install and activate the Plugin Check plugin.",
            plugin_slug,
        )

    sandbox = make_sandbox(settings)
    wp_cli = sandbox.which(settings.wp_cli)
    if wp_cli is None:
        return _failure(
            f"WP-CLI executable '{settings.wp_cli}' was not found on PATH.", plugin_slug
        )

    try:
        target = plugins.existing(plugin_slug, f"{plugin_slug}.php")
    except PathEscapeError:
        return _failure(f'Invalid plugin slug "{plugin_slug}".', plugin_slug)
    if target is None:
        return _failure(f'Plugin "{plugin_slug}" not found in plugins directory.', plugin_slug)

    command = [
        wp_cli,
        "plugin",
        "check",
        plugin_slug,
        "--categories=security",
        "--format=json",
        f"--path={settings.wp_root}",
    ]
    result = sandbox.run(command, timeout=settings.security_check_timeout)
    if result.timed_out:
        return _failure(
            f"Security check failed: timed out after {settings.security_check_timeout:g}s",
            plugin_slug,
        )

    try:
        findings = parse_check_output(result.stdout)
    except SecurityCheckError as exc:
        return _failure(f"Security check failed: {exc}", plugin_slug)
    if not result.ok and not findings:
        detail = result.stderr.strip() or result.stdout.strip() or f"exit code {result.returncode}"
        context.logger.warning("Plugin Check failed for %s: %s", plugin_slug, detail)
        return _failure(f"Security check failed: {detail}", plugin_slug)

    return SecurityCheckOutput(
        success=True,
        plugin_slug=plugin_slug,
        security_findings=findings,
        summary=summarize(findings),
    )


def build_abilities(category: str) -> list[Ability]:
    return [
        Ability(
            name="plugin-security/check-security",
            label="Plugin Security Check",
            description=(
                "Analyzes WordPress plugins for security vulnerabilities and issues "
                "using Plugin Check security category checks."
            ),
            category=category,
            input_model=SecurityCheckInput,
            output_model=SecurityCheckOutput,
            execute=check_plugin_security,
            capability="manage_options",
            read_only=True,
        )
    ]
