"""
Project assembly from raw output blobs.

Each blob is paired with the configuration directory it came from and handed
to a ``PlanParser``. The bundled ``SummaryParser`` only extracts managed
resource addresses; richer parsers plug in through the same protocol.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Iterator, Protocol, Sequence

import structlog

from stackplan.core.errors import ParseError

logger = structlog.get_logger()


@dataclass(frozen=True)
class Resource:
    """A managed resource found in a plan or state document."""

    address: str
    type: str
    name: str


@dataclass
class Project:
    """One sub-configuration's parsed output."""

    name: str
    path: str
    type: str
    has_diff: bool
    resources: list[Resource] = field(default_factory=list)
    past_resources: list[Resource] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "type": self.type,
            "has_diff": self.has_diff,
            "resources": [r.address for r in self.resources],
            "past_resources": [r.address for r in self.past_resources],
        }


class PlanParser(Protocol):
    """Turns a plan or state JSON blob into resources."""

    def parse(self, blob: bytes) -> tuple[list[Resource], list[Resource]]:
        """Return ``(past_resources, resources)``."""
        ...


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _managed(res: Any) -> bool:
    return isinstance(res, dict) and res.get("mode", "managed") == "managed"


def _resource(res: dict[str, Any]) -> Resource:
    return Resource(
        address=res.get("address") or "",
        type=res.get("type") or "",
        name=res.get("name") or "",
    )


def _walk_module(module: Any) -> Iterator[Resource]:
    module = _as_dict(module)
    for res in _as_list(module.get("resources")):
        if _managed(res):
            yield _resource(res)
    for child in _as_list(module.get("child_modules")):
        yield from _walk_module(child)


def _changed_resources(changes: Any) -> Iterator[Resource]:
    # Deletions have no planned value.
    for change in _as_list(changes):
        if not _managed(change):
            continue
        actions = _as_dict(change.get("change")).get("actions") or []
        if actions == ["delete"]:
            continue
        yield _resource(change)


class SummaryParser:
    """Extracts managed resources from ``terraform show -json`` output.

    Plan documents yield prior state as past resources. Their resources are
    the planned values plus any ``resource_changes`` entry missing from them.
    State documents have no past resources. Missing or null sections count
    as empty.
    """

    def parse(self, blob: bytes) -> tuple[list[Resource], list[Resource]]:
        if not blob.strip():
            return [], []

        doc = json.loads(blob)
        if not isinstance(doc, dict):
            raise ValueError("expected a JSON object")

        if "planned_values" in doc or "resource_changes" in doc:
            prior = _as_dict(_as_dict(doc.get("prior_state")).get("values"))
            planned = _as_dict(doc.get("planned_values"))

            resources = list(_walk_module(planned.get("root_module")))
            seen = {r.address for r in resources}
            for res in _changed_resources(doc.get("resource_changes")):
                if res.address not in seen:
                    seen.add(res.address)
                    resources.append(res)

            return list(_walk_module(prior.get("root_module"))), resources

        values = _as_dict(doc.get("values"))
        return [], list(_walk_module(values.get("root_module")))


def project_name(root: str, config_dir: str) -> str:
    """Name a project by its path relative to the root."""
    try:
        rel = os.path.relpath(config_dir, root)
    except ValueError:
        return config_dir
    if rel == ".":
        return os.path.basename(os.path.abspath(root)) or root
    return rel


def assemble_projects(
    root: str,
    config_dirs: Sequence[str],
    outs: Sequence[bytes],
    *,
    has_diff: bool,
    project_type: str,
    parser: PlanParser,
) -> list[Project]:
    """
    Pair each output with its configuration directory and parse it.

    A single unified output for several directories becomes one project for
    ``root``.

    Raises:
        ParseError: With the projects assembled so far attached
    """
    paths: Sequence[str] = config_dirs
    if len(outs) == 1 and len(config_dirs) != 1:
        paths = [root]

    projects: list[Project] = []
    for path, out in zip(paths, outs):
        project = Project(
            name=project_name(root, path),
            path=path,
            type=project_type,
            has_diff=has_diff,
        )
        try:
            past_resources, resources = parser.parse(out)
        except ValueError as e:
            raise ParseError(
                "Error parsing Terraform JSON",
                projects=projects,
                details={"path": path, "error": str(e)},
            ) from e

        if has_diff:
            project.past_resources = past_resources
        project.resources = resources
        projects.append(project)

    logger.debug("assembled_projects", count=len(projects))
    return projects
