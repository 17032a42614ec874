"""Core modules for stackplan - centralized definitions and utilities."""

from stackplan.core.errors import (
    CleanupError,
    ConfigurationError,
    DiscoveryCommandError,
    DiscoveryDecodeError,
    ExitCode,
    GenerationError,
    OptionBuildError,
    ParseError,
    PlanOrShowCommandError,
    StackPlanError,
    ToolError,
    ToolVersionError,
    format_error_message,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "StackPlanError",
    "ConfigurationError",
    "ToolVersionError",
    "ToolError",
    "DiscoveryCommandError",
    "DiscoveryDecodeError",
    "GenerationError",
    "OptionBuildError",
    "PlanOrShowCommandError",
    "CleanupError",
    "ParseError",
    "main_with_error_handling",
    "format_error_message",
]
