"""
Resolution of the projects a command runs against.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from stackplan.config.loader import load_projects
from stackplan.config.project import ProjectConfig
from stackplan.core.errors import ConfigurationError


def resolve_projects(
    path: Optional[str] = None,
    config_file: Optional[str] = None,
    binary: Optional[str] = None,
    workspace: Optional[str] = None,
    use_state: bool = False,
) -> list[ProjectConfig]:
    """
    Build the project list from the command line and the config file.

    An explicit path runs that path only, picking up its config entry when one
    exists. Without a path every configured project runs. Command-line flags
    override the config file.
    """
    configured = load_projects(config_file)

    if path:
        matching = [p for p in configured if p.path == path]
        projects = matching[:1] or [ProjectConfig(path=path)]
    else:
        projects = configured

    if not projects:
        raise ConfigurationError(
            "No path given and no projects configured",
            {"hint": "pass a PATH or add projects to .stackplan/config.yaml"},
        )

    overrides: dict = {}
    if binary:
        overrides["terraform_binary"] = binary
    if workspace:
        overrides["terraform_workspace"] = workspace
    if use_state:
        overrides["use_state"] = True

    return [replace(p, **overrides) for p in projects]
