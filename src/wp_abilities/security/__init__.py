"""Path containment and sandboxed subprocess execution.

Public API: CommandResult, CommandSandbox, PathEscapeError, PathValidator, ProcessLimits
"""

from wp_abilities.security.path_validator import PathEscapeError, PathValidator
from wp_abilities.security.subprocess_sandbox import CommandResult, CommandSandbox, ProcessLimits

__all__ = [
    "CommandResult",
    "CommandSandbox",
    "PathEscapeError",
    "PathValidator",
    "ProcessLimits",
]
