"""
CLI command listing discovered sub-configurations.

Commands:
    stackplan dirs <path>         - Show config and working directories
    stackplan dirs <path> --json  - Output as JSON
"""

from __future__ import annotations

import json
from typing import Optional

from stackplan.cli.projects import resolve_projects
from stackplan.cli.ux import print_table
from stackplan.config.project import ProjectContext
from stackplan.config.settings import get_settings
from stackplan.core.errors import main_with_error_handling
from stackplan.terragrunt import TerragruntProvider


@main_with_error_handling()
def dirs_command(
    path: Optional[str] = None,
    config_file: Optional[str] = None,
    binary: Optional[str] = None,
    output_format: str = "table",
) -> int:
    """
    List configuration and working directories for each project.

    Returns:
        Exit code (0 for success)
    """
    settings = get_settings()
    results = []

    for project in resolve_projects(path, config_file, binary=binary):
        provider = TerragruntProvider(ProjectContext(project, settings))
        config_dirs, working_dirs = provider.get_project_dirs()
        results.append(
            {
                "path": project.path,
                "directories": [
                    {"config_dir": c, "working_dir": w}
                    for c, w in zip(config_dirs, working_dirs)
                ],
            }
        )

    if output_format == "json":
        print(json.dumps(results, indent=2))
        return 0

    for result in results:
        print_table(
            result["path"],
            ["Config directory", "Working directory"],
            [[d["config_dir"], d["working_dir"]] for d in result["directories"]],
        )
    return 0
