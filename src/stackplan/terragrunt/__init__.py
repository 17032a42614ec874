"""
Terragrunt plan generation.

Discovers every sub-configuration under a root path, produces a plan or state
JSON document for each one and removes the transient plan files afterward.

Example usage:
    from stackplan.config import ProjectConfig, ProjectContext
    from stackplan.terragrunt import TerragruntProvider

    provider = TerragruntProvider(ProjectContext(ProjectConfig(path="infra/live")))
    for project in provider.load_projects():
        print(project.name, len(project.resources))
"""

from stackplan.terragrunt.cleanup import cleanup_plan_files
from stackplan.terragrunt.cmd import (
    MIN_TERRAGRUNT_VERSION,
    CmdError,
    CmdOptions,
    run_cmd,
)
from stackplan.terragrunt.discovery import (
    DirectoryRecord,
    iter_json_documents,
    parse_discovery_output,
)
from stackplan.terragrunt.options import build_command_opts
from stackplan.terragrunt.provider import TerragruntProvider, extract_plan_json
from stackplan.terragrunt.results import (
    PlanParser,
    Project,
    Resource,
    SummaryParser,
    assemble_projects,
)

__all__ = [
    # Provider
    "TerragruntProvider",
    "extract_plan_json",
    # Discovery
    "DirectoryRecord",
    "iter_json_documents",
    "parse_discovery_output",
    # Commands
    "CmdError",
    "CmdOptions",
    "MIN_TERRAGRUNT_VERSION",
    "run_cmd",
    "build_command_opts",
    # Cleanup
    "cleanup_plan_files",
    # Results
    "PlanParser",
    "Project",
    "Resource",
    "SummaryParser",
    "assemble_projects",
]
