"""
Configuration file loading.

Search order:
1. Explicit path (--config flag)
2. .stackplan/config.yaml (project root)
3. ~/.stackplan/config.yaml (user home)
4. No file: projects come from the command line only
"""

from __future__ import annotations

from pathlib import Path

import structlog
import yaml

from stackplan.config.project import ProjectConfig
from stackplan.core.errors import ConfigurationError

logger = structlog.get_logger()


def get_config_path(explicit_path: str | Path | None = None) -> Path | None:
    """
    Find the configuration file to use.

    Returns:
        Path to config file or None if not found
    """
    if explicit_path:
        path = Path(explicit_path)
        if path.exists():
            return path
        raise ConfigurationError("Config file not found", {"path": str(path)})

    cwd_config = Path.cwd() / ".stackplan" / "config.yaml"
    if cwd_config.exists():
        return cwd_config

    home_config = Path.home() / ".stackplan" / "config.yaml"
    if home_config.exists():
        return home_config

    return None


class ConfigLoader:
    """
    Loads the list of projects from a YAML config file.

    Example file::

        projects:
          - path: infra/live/prod
            terraform_workspace: prod
            env:
              AWS_PROFILE: prod
          - path: infra/live/dev
            use_state: true
    """

    def __init__(self, config_path: Path | None = None):
        self.config_path = config_path

    def load(self) -> list[ProjectConfig]:
        if self.config_path is None:
            return []

        try:
            with open(self.config_path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                "Failed to read config file",
                {"path": str(self.config_path), "error": str(e)},
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                "Config file must contain a mapping", {"path": str(self.config_path)}
            )

        entries = data.get("projects") or []
        if not isinstance(entries, list):
            raise ConfigurationError(
                "'projects' must be a list", {"path": str(self.config_path)}
            )

        projects = [ProjectConfig.from_dict(entry) for entry in entries]
        logger.debug("loaded_config", path=str(self.config_path), projects=len(projects))
        return projects


def load_projects(path: str | Path | None = None) -> list[ProjectConfig]:
    """
    Convenience function to load configured projects.

    Args:
        path: Optional explicit config file path

    Returns:
        List of ProjectConfig, empty when no config file exists
    """
    return ConfigLoader(get_config_path(path)).load()
