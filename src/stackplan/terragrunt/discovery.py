"""
Sub-configuration discovery.

``terragrunt run-all terragrunt-info`` prints one JSON object per
sub-configuration, concatenated with no enclosing array. The stream is
decoded one top-level value at a time instead of splitting the bytes on a
delimiter, so object values containing ``}\\n`` decode correctly.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Iterator

import structlog

from stackplan.core.errors import DiscoveryDecodeError

logger = structlog.get_logger()

DISCOVERY_ARGS = ("run-all", "--terragrunt-ignore-external-dependencies", "terragrunt-info")

_WHITESPACE = " \t\n\r"


@dataclass(frozen=True)
class DirectoryRecord:
    """Where a sub-configuration is defined and where the tool executes it."""

    config_dir: str
    working_dir: str

    @classmethod
    def from_info(cls, info: Any) -> DirectoryRecord:
        if not isinstance(info, dict):
            raise ValueError(f"expected a JSON object, got {type(info).__name__}")
        config_path = info.get("ConfigPath")
        if not config_path or not isinstance(config_path, str):
            raise ValueError("missing ConfigPath")
        working_dir = info.get("WorkingDir") or ""
        return cls(
            config_dir=os.path.dirname(config_path),
            working_dir=str(working_dir),
        )


def iter_json_documents(text: str) -> Iterator[Any]:
    """Yield consecutive top-level JSON values from ``text``.

    Raises:
        json.JSONDecodeError: At the first value that fails to decode
    """
    decoder = json.JSONDecoder()
    idx = 0
    end = len(text)
    while True:
        while idx < end and text[idx] in _WHITESPACE:
            idx += 1
        if idx >= end:
            return
        value, idx = decoder.raw_decode(text, idx)
        yield value


def parse_discovery_output(out: bytes) -> tuple[list[str], list[str]]:
    """
    Decode a discovery stream into config and working directories.

    Returns:
        Tuple of (config_dirs, working_dirs) in stream order

    Raises:
        DiscoveryDecodeError: With the directories decoded so far attached
    """
    config_dirs: list[str] = []
    working_dirs: list[str] = []

    try:
        text = out.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DiscoveryDecodeError(
            "Discovery output is not valid UTF-8", details={"error": str(e)}
        ) from e

    documents = iter_json_documents(text)
    while True:
        try:
            info = next(documents)
            record = DirectoryRecord.from_info(info)
        except StopIteration:
            break
        except (json.JSONDecodeError, ValueError) as e:
            raise DiscoveryDecodeError(
                "Failed to decode terragrunt-info output",
                config_dirs=config_dirs,
                working_dirs=working_dirs,
                details={"index": len(config_dirs), "error": str(e)},
            ) from e

        config_dirs.append(record.config_dir)
        working_dirs.append(record.working_dir)

    logger.debug("discovered_directories", count=len(config_dirs))
    return config_dirs, working_dirs
