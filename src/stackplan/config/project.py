"""
Per-project configuration.

A project is one root path handed to the plan pipeline. Values set on the
project override the environment-wide ``Settings``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from stackplan.config.settings import Settings, get_settings
from stackplan.core.errors import ConfigurationError

DEFAULT_TERRAGRUNT_BINARY = "terragrunt"


@dataclass
class ProjectConfig:
    """Configuration for a single root path."""

    path: str
    terraform_binary: str = ""
    terraform_workspace: str = ""
    terraform_cloud_host: str = ""
    terraform_cloud_token: str = ""
    env: dict[str, str] = field(default_factory=dict)
    use_state: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProjectConfig:
        if not isinstance(data, dict):
            raise ConfigurationError("Project entry must be a mapping", {"entry": data})
        path = data.get("path")
        if not path:
            raise ConfigurationError("Project entry is missing 'path'")

        env = data.get("env") or {}
        if not isinstance(env, dict):
            raise ConfigurationError("Project 'env' must be a mapping", {"path": path})

        return cls(
            path=str(path),
            terraform_binary=data.get("terraform_binary", "") or "",
            terraform_workspace=data.get("terraform_workspace", "") or "",
            terraform_cloud_host=data.get("terraform_cloud_host", "") or "",
            terraform_cloud_token=data.get("terraform_cloud_token", "") or "",
            env={str(k): str(v) for k, v in env.items()},
            use_state=bool(data.get("use_state", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "terraform_binary": self.terraform_binary,
            "terraform_workspace": self.terraform_workspace,
            "terraform_cloud_host": self.terraform_cloud_host,
            "env": dict(self.env),
            "use_state": self.use_state,
        }


@dataclass
class ProjectContext:
    """Resolved configuration the provider runs with."""

    project: ProjectConfig
    settings: Settings = field(default_factory=get_settings)

    @property
    def binary(self) -> str:
        return (
            self.project.terraform_binary
            or self.settings.terragrunt_binary
            or DEFAULT_TERRAGRUNT_BINARY
        )

    @property
    def cloud_host(self) -> str:
        return self.project.terraform_cloud_host or self.settings.terraform_cloud_host

    @property
    def cloud_token(self) -> str:
        return self.project.terraform_cloud_token or self.settings.terraform_cloud_token or ""
