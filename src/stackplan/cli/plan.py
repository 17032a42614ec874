"""
CLI command for generating plan or state JSON across every sub-configuration.
"""

from __future__ import annotations

import json
from typing import Optional

from stackplan.cli.projects import resolve_projects
from stackplan.cli.ux import console, header, info, print_table, success
from stackplan.config.project import ProjectContext
from stackplan.config.settings import get_settings
from stackplan.core.errors import main_with_error_handling
from stackplan.terragrunt import Project, TerragruntProvider


def print_projects_summary(projects: list[Project]) -> None:
    """Print a per-project resource table."""
    if not projects:
        info("No sub-configurations found")
        return

    header("Projects")
    rows = []
    for project in projects:
        past = str(len(project.past_resources)) if project.has_diff else "-"
        rows.append([project.name, project.path, past, str(len(project.resources))])
    print_table("", ["Name", "Path", "Before", "After"], rows)

    total = sum(len(p.resources) for p in projects)
    console.print()
    success(f"{len(projects)} project(s), {total} resource(s)")


@main_with_error_handling()
def plan_command(
    path: Optional[str] = None,
    config_file: Optional[str] = None,
    binary: Optional[str] = None,
    workspace: Optional[str] = None,
    use_state: bool = False,
    output_format: str = "table",
) -> int:
    """
    Generate plan (or persisted state) JSON and summarize resources.

    Args:
        path: Root path containing sub-configurations
        config_file: Optional explicit config file
        binary: Override for the terragrunt binary
        workspace: Terraform workspace to select
        use_state: Read persisted state instead of planning
        output_format: Output format ("table" or "json")

    Returns:
        Exit code (0 for success)
    """
    settings = get_settings()
    projects: list[Project] = []

    for project in resolve_projects(
        path, config_file, binary=binary, workspace=workspace, use_state=use_state
    ):
        provider = TerragruntProvider(ProjectContext(project, settings))
        projects.extend(provider.load_projects())

    if output_format == "json":
        print(json.dumps([p.to_dict() for p in projects], indent=2))
    else:
        print_projects_summary(projects)

    return 0
