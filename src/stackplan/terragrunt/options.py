"""
Command option building.

Options are built fresh for every target directory. When Terraform Cloud
credentials are configured, a temporary CLI configuration file is written and
exported through ``TF_CLI_CONFIG_FILE``; the caller owns its removal.
"""

from __future__ import annotations

import json
import os
import tempfile

import structlog

from stackplan.config.project import ProjectContext
from stackplan.core.errors import OptionBuildError
from stackplan.terragrunt.cmd import CmdOptions

logger = structlog.get_logger()


def render_cli_config(host: str, token: str) -> str:
    """Render a terraform CLI config holding a single credentials block.

    HCL string escapes for quotes and backslashes match JSON's.
    """
    return f"credentials {json.dumps(host)} {{\n  token = {json.dumps(token)}\n}}\n"


def create_config_file(host: str, token: str) -> str:
    """Write a temporary CLI config file and return its path."""
    fd, path = tempfile.mkstemp(prefix="stackplan-", suffix=".tfrc")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(render_cli_config(host, token))
    except OSError:
        os.remove(path)
        raise
    return path


def build_command_opts(ctx: ProjectContext, path: str) -> CmdOptions:
    """
    Build options for running the binary in ``path``.

    Raises:
        OptionBuildError: If the CLI config file could not be written
    """
    opts = CmdOptions(
        binary=ctx.binary,
        dir=path,
        workspace=ctx.project.terraform_workspace,
        env=dict(ctx.project.env),
        timeout=ctx.settings.command_timeout,
    )

    if ctx.cloud_token:
        try:
            opts.config_file = create_config_file(ctx.cloud_host, ctx.cloud_token)
        except OSError as e:
            raise OptionBuildError(
                "Failed to create terraform CLI config file",
                details={"dir": path, "error": str(e)},
            ) from e
        logger.debug("created_cli_config_file", dir=path, file=opts.config_file)

    return opts
