"""Confined subprocess execution for external WordPress tooling (WP-CLI)."""

from __future__ import annotations

import logging
import resource
import shutil
import subprocess  # nosec B404 — intentional: all WP-CLI calls go through this runner
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from wp_abilities.security.path_validator import PathValidator

_LOG = logging.getLogger(__name__)

_DEFAULT_MAX_CPU_SECONDS = 240
_DEFAULT_MAX_OUTPUT_FILE_BYTES = 64 * 1024 * 1024


@dataclass(frozen=True)
class ProcessLimits:
    """RLIMIT caps applied to child processes before exec."""

    max_cpu_seconds: int = _DEFAULT_MAX_CPU_SECONDS
    max_file_size_bytes: int = _DEFAULT_MAX_OUTPUT_FILE_BYTES

    def __post_init__(self) -> None:
        if self.max_cpu_seconds <= 0:
            raise ValueError("max_cpu_seconds must be > 0.")
        if self.max_file_size_bytes <= 0:
            raise ValueError("max_file_size_bytes must be > 0.")


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of one sandboxed command."""

    args: tuple[str, ...]
    returncode: int | None
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return not self.timed_out and self.returncode == 0


def _soft_limit(target: int, hard: int) -> int:
    if hard == resource.RLIM_INFINITY:
        return target
    return min(target, hard)


def _apply_limit(limit_name: str, target: int) -> None:
    limit = getattr(resource, limit_name, None)
    if limit is None:
        return
    _, hard = resource.getrlimit(limit)
    resource.setrlimit(limit, (_soft_limit(target, hard), hard))


class CommandSandbox:
    """Run commands with cwd pinned inside the WordPress root and RLIMITs set."""

    def __init__(self, root: Path, *, limits: ProcessLimits | None = None) -> None:
        self._validator = PathValidator(root=root)
        self._limits = limits or ProcessLimits()

    @property
    def root(self) -> Path:
        return self._validator.root

    def which(self, executable: str) -> str | None:
        """Locate *executable* on PATH."""
        return shutil.which(executable)

    def preexec_fn(self) -> Callable[[], None]:
        """Return the hook that applies resource limits in the child."""
        limits = self._limits

        def _apply_limits() -> None:
            _apply_limit("RLIMIT_CPU", limits.max_cpu_seconds)
            _apply_limit("RLIMIT_FSIZE", limits.max_file_size_bytes)

        return _apply_limits

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        """Execute *command* (never through a shell) and capture its output."""
        safe_cwd = self.root if cwd is None else self._validator.resolve(cwd)
        args = tuple(str(part) for part in command)
        _LOG.debug("Running %s in %s", args, safe_cwd)
        try:
            completed = subprocess.run(  # nosec B603 — list argv, shell=False
                args,
                cwd=str(safe_cwd),
                env=dict(env) if env is not None else None,
                timeout=timeout,
                capture_output=True,
                text=True,
                check=False,
                preexec_fn=self.preexec_fn(),
            )
        except subprocess.TimeoutExpired as exc:
            _LOG.warning("Command timed out after %ss: %s", timeout, args)
            return CommandResult(
                args=args,
                returncode=None,
                stdout=_as_text(exc.stdout),
                stderr=_as_text(exc.stderr),
                timed_out=True,
            )
        return CommandResult(
            args=args,
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )


def _as_text(raw: str | bytes | None) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return raw
