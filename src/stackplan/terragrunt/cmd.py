"""
Thin wrapper around the external terragrunt/terraform binary.

Commands run synchronously in a given directory and return raw stdout bytes.
A non-zero exit raises ``CmdError`` carrying stderr so callers can decide how
to classify the failure.
"""

from __future__ import annotations

import os
import re
import shutil
import subprocess
from dataclasses import dataclass, field

import structlog

logger = structlog.get_logger()

MIN_TERRAGRUNT_VERSION = "v0.28.1"

_VERSION_RE = re.compile(r"v?(\d+)\.(\d+)\.(\d+)")


class CmdError(Exception):
    """Raised when an external command exits non-zero or cannot be started."""

    def __init__(self, message: str, stderr: str = "", returncode: int | None = None):
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode


@dataclass
class CmdOptions:
    """Options for a single external command invocation."""

    binary: str
    dir: str
    workspace: str = ""
    config_file: str = ""
    env: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None

    def environ(self) -> dict[str, str]:
        environ = dict(os.environ)
        environ.update(self.env)
        # Suppresses "next steps" hints in plan output
        environ["TF_IN_AUTOMATION"] = "true"
        if self.workspace:
            environ["TF_WORKSPACE"] = self.workspace
        if self.config_file:
            environ["TF_CLI_CONFIG_FILE"] = self.config_file
        return environ


def run_cmd(opts: CmdOptions, *args: str) -> bytes:
    """Run ``opts.binary`` with ``args`` in ``opts.dir`` and return stdout."""
    cmd = [opts.binary, *args]
    logger.debug("running_command", command=" ".join(cmd), dir=opts.dir)

    try:
        proc = subprocess.run(
            cmd,
            cwd=opts.dir,
            env=opts.environ(),
            capture_output=True,
            timeout=opts.timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise CmdError(f"{opts.binary} timed out after {opts.timeout} seconds") from e
    except OSError as e:
        raise CmdError(f"failed to run {opts.binary}: {e}") from e

    if proc.returncode != 0:
        stderr = proc.stderr.decode("utf-8", errors="replace").strip()
        raise CmdError(
            f"{' '.join(cmd)} exited with code {proc.returncode}",
            stderr=stderr,
            returncode=proc.returncode,
        )

    return proc.stdout


def parse_version(output: str) -> tuple[int, int, int] | None:
    """Extract a ``(major, minor, patch)`` tuple from ``--version`` output."""
    match = _VERSION_RE.search(output)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2)), int(match.group(3))


def is_binary_available(binary: str) -> bool:
    """Check if the binary is on PATH."""
    return shutil.which(binary) is not None


def get_version(binary: str, timeout: float | None = 30) -> str | None:
    """Return the raw ``--version`` output, or None if it cannot be read."""
    try:
        proc = subprocess.run(
            [binary, "--version"],
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except (subprocess.TimeoutExpired, subprocess.SubprocessError, OSError):
        return None
    return (proc.stdout or proc.stderr).strip() or None


def is_version_supported(version_output: str, minimum: str = MIN_TERRAGRUNT_VERSION) -> bool:
    """Check whether reported version output satisfies ``minimum``."""
    found = parse_version(version_output)
    required = parse_version(minimum)
    if found is None or required is None:
        return False
    return found >= required
