"""
Terragrunt provider.

Terragrunt commands run from the configuration directories, but Terragrunt
runs Terraform internally in separate working directories. Generated plan
files land in those working directories, so both are tracked to read and clean
up the plan files.
"""

from __future__ import annotations

import json
import os
import uuid
from contextlib import ExitStack
from typing import Sequence

import structlog

from stackplan.cli.ux import Spinner, warning
from stackplan.config.project import ProjectContext
from stackplan.core.errors import (
    CleanupError,
    DiscoveryCommandError,
    DiscoveryDecodeError,
    GenerationError,
    PlanOrShowCommandError,
    ToolVersionError,
)
from stackplan.logging import bind_context
from stackplan.terragrunt.cleanup import cleanup_plan_files
from stackplan.terragrunt.cmd import (
    MIN_TERRAGRUNT_VERSION,
    CmdError,
    CmdOptions,
    get_version,
    is_binary_available,
    is_version_supported,
    run_cmd,
)
from stackplan.terragrunt.discovery import DISCOVERY_ARGS, parse_discovery_output
from stackplan.terragrunt.options import build_command_opts
from stackplan.terragrunt.results import (
    PlanParser,
    Project,
    SummaryParser,
    assemble_projects,
)

logger = structlog.get_logger()

RUN_ALL_ARGS = ("run-all", "--terragrunt-ignore-external-dependencies")
PLAN_ARGS = ("plan", "-input=false", "-lock=false", "-no-color")
SHOW_ARGS = ("show", "-no-color", "-json")


def _remove_config_file(path: str) -> None:
    try:
        os.remove(path)
    except OSError as e:
        logger.debug("cli_config_file_remove_failed", file=path, error=str(e))


def _stderr_excerpt(e: CmdError, limit: int = 2000) -> str:
    return e.stderr[-limit:]


def extract_plan_json(out: bytes) -> bytes:
    """Return ``out`` if it is a single JSON document, else empty bytes.

    ``run-all plan`` prints human progress text when it writes one plan file
    per working directory; only a JSON object counts as a unified plan.
    """
    stripped = out.strip()
    if not stripped.startswith(b"{"):
        return b""
    try:
        json.loads(stripped)
    except ValueError:
        return b""
    return stripped


class TerragruntProvider:
    """Generates plan or state JSON for every sub-configuration under a root."""

    def __init__(self, ctx: ProjectContext):
        self.ctx = ctx
        self.path = ctx.project.path
        self.use_state = ctx.project.use_state
        self.show_spinners = ctx.settings.show_spinners
        self._checked = False

    def type(self) -> str:
        return "terragrunt"

    def display_type(self) -> str:
        return "Terragrunt directory"

    def _spinner(self, message: str) -> Spinner:
        return Spinner(message, enabled=self.show_spinners)

    def load_projects(self, parser: PlanParser | None = None) -> list[Project]:
        """Discover sub-configurations, generate their JSON and parse it."""
        log = bind_context(path=self.path, use_state=self.use_state)

        config_dirs, working_dirs = self.get_project_dirs()
        log.info("discovered_projects", count=len(config_dirs))

        if self.use_state:
            outs = self.generate_state_jsons(config_dirs)
        else:
            outs = self.generate_plan_jsons(config_dirs, working_dirs)

        return assemble_projects(
            self.path,
            config_dirs,
            outs,
            has_diff=not self.use_state,
            project_type=self.type(),
            parser=parser or SummaryParser(),
        )

    def checks(self) -> None:
        """
        Verify the binary exists and meets the minimum supported version.

        Raises:
            ToolVersionError: If the binary is missing or too old
        """
        if self._checked:
            return

        binary = self.ctx.binary
        if not is_binary_available(binary):
            raise ToolVersionError(
                f"{binary} not found. Install Terragrunt {MIN_TERRAGRUNT_VERSION} or later",
                {"binary": binary},
            )

        version = get_version(binary)
        if version is None or not is_version_supported(version):
            raise ToolVersionError(
                f"Terragrunt {MIN_TERRAGRUNT_VERSION} or later is required",
                {"binary": binary, "version": version or "unknown"},
            )

        logger.debug("tool_version", binary=binary, version=version)
        self._checked = True

    def get_project_dirs(self) -> tuple[list[str], list[str]]:
        """
        Discover configuration and working directories under the root.

        Raises:
            DiscoveryCommandError: If terragrunt-info fails
            DiscoveryDecodeError: If its output cannot be decoded
        """
        spinner = self._spinner("Running terragrunt run-all terragrunt-info")

        opts = CmdOptions(
            binary=self.ctx.binary,
            dir=self.path,
            env=dict(self.ctx.project.env),
            timeout=self.ctx.settings.command_timeout,
        )
        try:
            out = run_cmd(opts, *DISCOVERY_ARGS)
        except CmdError as e:
            spinner.fail()
            raise DiscoveryCommandError(
                "terragrunt run-all terragrunt-info failed",
                {"dir": self.path, "stderr": _stderr_excerpt(e)},
            ) from e

        try:
            config_dirs, working_dirs = parse_discovery_output(out)
        except DiscoveryDecodeError:
            spinner.fail()
            raise

        spinner.success()
        return config_dirs, working_dirs

    def _build_opts(self, stack: ExitStack, path: str) -> CmdOptions:
        opts = build_command_opts(self.ctx, path)
        if opts.config_file:
            stack.callback(_remove_config_file, opts.config_file)
        return opts

    def generate_state_jsons(self, config_dirs: Sequence[str]) -> list[bytes]:
        """
        Run ``show`` against the persisted state of each directory.

        Temporary CLI config files live until the whole call returns.

        Raises:
            OptionBuildError, PlanOrShowCommandError: With outputs collected
                before the failing directory attached
        """
        self.checks()

        outs: list[bytes] = []

        spinner_msg = "Running terragrunt show"
        if len(config_dirs) > 1:
            spinner_msg += " for each project"
        spinner = self._spinner(spinner_msg)

        with ExitStack() as stack:
            for path in config_dirs:
                try:
                    opts = self._build_opts(stack, path)
                    out = self.run_show(opts, "")
                except GenerationError as e:
                    spinner.fail()
                    e.outputs = list(outs)
                    raise
                outs.append(out)

        spinner.success()
        return outs

    def generate_plan_jsons(
        self, config_dirs: Sequence[str], working_dirs: Sequence[str]
    ) -> list[bytes]:
        """
        Run one ``run-all plan`` over the root and read the resulting plans.

        A unified plan JSON on stdout is returned as the only output. Otherwise
        each directory's plan file is shown in turn. Plan files are cleaned up
        from every working directory before returning, on success or failure.

        Raises:
            OptionBuildError, PlanOrShowCommandError: With outputs collected
                before the failing directory attached
        """
        self.checks()

        with ExitStack() as stack:
            opts = self._build_opts(stack, self.path)

            spinner = self._spinner("Running terragrunt run-all plan")
            plan_file = ""
            try:
                try:
                    plan_file, plan_json = self.run_plan(opts)
                except GenerationError:
                    spinner.fail()
                    raise
                spinner.success()

                if plan_json:
                    return [plan_json]

                return self._show_plan_files(stack, config_dirs, working_dirs, plan_file)
            finally:
                self._cleanup_best_effort(working_dirs, plan_file)

    def _show_plan_files(
        self,
        stack: ExitStack,
        config_dirs: Sequence[str],
        working_dirs: Sequence[str],
        plan_file: str,
    ) -> list[bytes]:
        outs: list[bytes] = []

        spinner_msg = "Running terragrunt show"
        if len(config_dirs) > 1:
            spinner_msg += " for each project"
        spinner = self._spinner(spinner_msg)

        for i, path in enumerate(config_dirs):
            try:
                opts = self._build_opts(stack, path)
                out = self.run_show(opts, os.path.join(working_dirs[i], plan_file))
            except GenerationError as e:
                spinner.fail()
                e.outputs = list(outs)
                raise
            outs.append(out)

        spinner.success()
        return outs

    def _cleanup_best_effort(self, working_dirs: Sequence[str], plan_file: str) -> None:
        try:
            cleanup_plan_files(working_dirs, plan_file)
        except CleanupError as e:
            logger.warning("plan_files_cleanup_failed", path=e.path, error=e.message)
            warning(f"Could not remove plan file {e.path}: {e.message}")

    def run_plan(self, opts: CmdOptions) -> tuple[str, bytes]:
        """
        Run ``run-all plan`` persisting a plan file in every working directory.

        Returns:
            Tuple of (plan file name, unified plan JSON or empty bytes). The
            file name is empty for a unified plan since no per-directory
            files need reading or cleanup.
        """
        plan_file = f"tfplan-{uuid.uuid4().hex[:12]}"
        try:
            out = run_cmd(opts, *RUN_ALL_ARGS, *PLAN_ARGS, f"-out={plan_file}")
        except CmdError as e:
            raise PlanOrShowCommandError(
                "terragrunt run-all plan failed",
                details={"dir": opts.dir, "stderr": _stderr_excerpt(e)},
            ) from e

        plan_json = extract_plan_json(out)
        if plan_json:
            return "", plan_json
        return plan_file, b""

    def run_show(self, opts: CmdOptions, plan_file: str) -> bytes:
        """Render ``plan_file``, or the persisted state when empty, as JSON."""
        args = list(SHOW_ARGS)
        if plan_file:
            args.append(plan_file)

        try:
            return run_cmd(opts, *args)
        except CmdError as e:
            raise PlanOrShowCommandError(
                "terragrunt show failed",
                details={"dir": opts.dir, "stderr": _stderr_excerpt(e)},
            ) from e
