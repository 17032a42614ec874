"""Root test configuration."""

import json
import logging

import pytest
import structlog

from stackplan.config.project import ProjectConfig, ProjectContext
from stackplan.config.settings import Settings


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def settings():
    """Settings with spinners off and no cloud credentials."""
    return Settings(
        terragrunt_binary="",
        show_spinners=False,
        terraform_cloud_token=None,
        command_timeout=None,
    )


@pytest.fixture
def make_ctx(settings):
    """Factory for a ProjectContext rooted at a given path."""

    def _make(path, **kwargs):
        return ProjectContext(ProjectConfig(path=str(path), **kwargs), settings)

    return _make


@pytest.fixture
def info_stream():
    """Render (config_path, working_dir) pairs the way terragrunt-info prints them."""

    def _render(records):
        return b"".join(
            json.dumps({"ConfigPath": c, "WorkingDir": w}, indent=2).encode() + b"\n"
            for c, w in records
        )

    return _render
