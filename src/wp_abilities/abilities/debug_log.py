"""``debug-log/read-log`` and ``debug-log/clear-log`` abilities."""

from __future__ import annotations

import math
import re

from pydantic import Field, field_validator

from wp_abilities.abilities.types import (
    Ability,
    AbilityContext,
    AbilityInput,
    AbilityOutput,
    EmptyInput,
)
from wp_abilities.logfile import (
    LogFileError,
    LogNotFoundError,
    LogNotReadableError,
    tail_file,
    truncate_file,
)

DEFAULT_LINES = 100
MIN_LINES = 1
MAX_LINES = 1000
_LEADING_INT_RE = re.compile(r"[+-]?\d+")


def _coerce_lines(number: int | float) -> int:
    if isinstance(number, float):
        if math.isnan(number):
            return MIN_LINES
        if math.isinf(number):
            return MAX_LINES if number > 0 else MIN_LINES
        number = int(number)
    return max(MIN_LINES, min(MAX_LINES, number))


class ReadLogInput(AbilityInput):
    lines: int = Field(
        default=DEFAULT_LINES,
        description=(
            "Number of lines to read from the end of the file (default: 100, max: 1000). "
            "Out-of-range and non-numeric values are clamped."
        ),
        json_schema_extra={"minimum": MIN_LINES, "maximum": MAX_LINES},
    )

    @field_validator("lines", mode="before")
    @classmethod
    def _clamp(cls, value: object) -> object:
        if value is None:
            return DEFAULT_LINES
        if isinstance(value, bool):
            raise ValueError("lines must be an integer")
        if isinstance(value, (int, float)):
            return _coerce_lines(value)
        if isinstance(value, str):
            text = value.strip()
            try:
                return _coerce_lines(float(text))
            except ValueError:
                # Leading digits count; anything else reads as 0.
                match = _LEADING_INT_RE.match(text)
                return _coerce_lines(float(match.group()) if match else 0)
        return value


class ReadLogOutput(AbilityOutput):
    success: bool = Field(description="Whether the debug log reading completed successfully.")
    content: str | None = Field(default=None, description="Contents of the debug log file.")
    file_size: int | None = Field(default=None, description="Size of the debug log file in bytes.")
    file_path: str | None = Field(default=None, description="Path to the debug log file.")
    lines_returned: int | None = Field(
        default=None, description="Number of lines actually returned."
    )
    error: str | None = Field(default=None, description="Error message if the reading failed.")


class ClearLogOutput(AbilityOutput):
    success: bool = Field(description="Whether the debug log was cleared.")
    file_path: str | None = Field(default=None, description="Path to the debug log file.")
    previous_size: int | None = Field(
        default=None, description="Size of the debug log in bytes before clearing."
    )
    error: str | None = Field(default=None, description="Error message if clearing failed.")


def read_debug_log(payload: ReadLogInput, context: AbilityContext) -> ReadLogOutput:
    log_path = context.settings.debug_log_path
    file_path = str(log_path)
    try:
        result = tail_file(log_path, payload.lines, logger=context.logger)
    except LogNotFoundError:
        return ReadLogOutput(
            success=False,
            error=f"Debug log file does not exist at: {file_path}",
            file_path=file_path,
        )
    except LogNotReadableError:
        return ReadLogOutput(
            success=False,
            error=f"Debug log file is not readable: {file_path}",
            file_path=file_path,
        )
    except LogFileError as exc:
        context.logger.warning("Reading %s failed: %s", file_path, exc)
        return ReadLogOutput(
            success=False,
            error=f"Failed to read debug log: {exc}",
            file_path=file_path,
        )

    return ReadLogOutput(
        success=True,
        content=result.content,
        file_size=result.file_size_bytes,
        file_path=file_path,
        lines_returned=result.lines_returned,
    )


def clear_debug_log(payload: EmptyInput, context: AbilityContext) -> ClearLogOutput:
    log_path = context.settings.debug_log_path
    file_path = str(log_path)
    try:
        previous_size = truncate_file(log_path, logger=context.logger)
    except LogNotFoundError:
        return ClearLogOutput(
            success=False,
            error=f"Debug log file does not exist at: {file_path}",
            file_path=file_path,
        )
    except LogFileError as exc:
        context.logger.warning("Clearing %s failed: %s", file_path, exc)
        return ClearLogOutput(
            success=False,
            error=f"Failed to clear debug log: {exc}",
            file_path=file_path,
        )
    context.logger.info("Cleared debug log %s (%d bytes)", file_path, previous_size)
    return ClearLogOutput(success=True, file_path=file_path, previous_size=previous_size)


def build_abilities(category: str) -> list[Ability]:
    return [
        Ability(
            name="debug-log/read-log",
            label="Debug Log Reader",
            description=(
                "Reads the contents of the WordPress debug.log file from wp-content directory."
            ),
            category=category,
            input_model=ReadLogInput,
            output_model=ReadLogOutput,
            execute=read_debug_log,
            capability="manage_options",
            read_only=True,
        ),
        Ability(
            name="debug-log/clear-log",
            label="Debug Log Cleaner",
            description="Empties the WordPress debug.log file in the wp-content directory.",
            category=category,
            input_model=EmptyInput,
            output_model=ClearLogOutput,
            execute=clear_debug_log,
            capability="manage_options",
        ),
    ]
