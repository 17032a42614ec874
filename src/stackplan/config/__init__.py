"""
stackplan configuration.

- Pydantic-based settings (environment variables, .env files)
- Per-project YAML config files
"""

from stackplan.config.loader import ConfigLoader, get_config_path, load_projects
from stackplan.config.project import (
    DEFAULT_TERRAGRUNT_BINARY,
    ProjectConfig,
    ProjectContext,
)
from stackplan.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "ProjectConfig",
    "ProjectContext",
    "DEFAULT_TERRAGRUNT_BINARY",
    "ConfigLoader",
    "get_config_path",
    "load_projects",
]
