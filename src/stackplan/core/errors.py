"""
Unified error handling for stackplan.

Every failure raised by the plan pipeline derives from ``StackPlanError`` and
carries an exit code, so CLI commands can translate errors consistently.

Errors raised part-way through a multi-directory operation keep whatever was
collected before the failure (``config_dirs``/``working_dirs`` for discovery,
``outputs`` for generation) so callers can still use the partial work.

Exit Codes:
- 0: Success
- 1: Warning (operation succeeded with warnings)
- 10: Configuration error
- 11: Tool error (external binary failure)
- 12: Parse error
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, Sequence, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    WARNING = 1
    CONFIG_ERROR = 10
    TOOL_ERROR = 11
    PARSE_ERROR = 12
    UNKNOWN_ERROR = 127


class StackPlanError(Exception):
    """Base exception for stackplan errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(StackPlanError):
    """Raised for configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class ToolVersionError(ConfigurationError):
    """Raised when the external binary is missing or older than supported."""


class ToolError(StackPlanError):
    """Raised when an invocation of the external binary fails."""

    exit_code = ExitCode.TOOL_ERROR


class DiscoveryCommandError(ToolError):
    """The aggregate discovery command failed; nothing was discovered."""


class DiscoveryDecodeError(ToolError):
    """A document in the discovery stream could not be decoded.

    Directories decoded before the bad document are kept on the error.
    """

    def __init__(
        self,
        message: str,
        config_dirs: Sequence[str] = (),
        working_dirs: Sequence[str] = (),
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.config_dirs = list(config_dirs)
        self.working_dirs = list(working_dirs)


class GenerationError(ToolError):
    """Base for failures while generating per-directory outputs."""

    def __init__(
        self,
        message: str,
        outputs: Sequence[bytes] = (),
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.outputs = list(outputs)


class OptionBuildError(GenerationError):
    """Building command options for a directory failed."""


class PlanOrShowCommandError(GenerationError):
    """The plan or show invocation failed."""


class CleanupError(StackPlanError):
    """Removing a transient plan artifact failed.

    Never propagated out of plan generation; logged as a warning instead.
    """

    exit_code = ExitCode.WARNING

    def __init__(self, message: str, path: str, details: dict[str, Any] | None = None):
        super().__init__(message, details)
        self.path = path


class ParseError(StackPlanError):
    """An output blob could not be parsed into resources."""

    exit_code = ExitCode.PARSE_ERROR

    def __init__(
        self,
        message: str,
        projects: Sequence[Any] = (),
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.projects = list(projects)


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for CLI command functions that provides unified error handling.

    Catches exceptions and converts them to appropriate exit codes with
    consistent error reporting.

    Args:
        show_traceback: If True, show full traceback for unexpected errors
        log_errors: If True, log errors to structlog

    Exit codes:
        - StackPlanError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except StackPlanError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=e.exit_code,
                        **e.details,
                    )
                from stackplan.cli.ux import error as print_error

                print_error(format_error_message(e))
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return 130
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=ExitCode.UNKNOWN_ERROR,
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: StackPlanError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
