"""Tests for terragrunt/options.py."""

import os
from unittest.mock import patch

import pytest

from stackplan.config.project import ProjectConfig, ProjectContext
from stackplan.core.errors import OptionBuildError
from stackplan.terragrunt.options import build_command_opts, render_cli_config


class TestBuildCommandOpts:
    """Tests for build_command_opts."""

    def test_basic_options(self, make_ctx):
        """Test options carry binary, dir, workspace and env."""
        ctx = make_ctx("/infra", terraform_workspace="prod", env={"AWS_PROFILE": "prod"})

        opts = build_command_opts(ctx, "/infra/vpc")

        assert opts.binary == "terragrunt"
        assert opts.dir == "/infra/vpc"
        assert opts.workspace == "prod"
        assert opts.env == {"AWS_PROFILE": "prod"}
        assert opts.config_file == ""

    def test_env_is_copied(self, make_ctx):
        """Test each options object gets its own env dict."""
        ctx = make_ctx("/infra", env={"A": "1"})

        opts = build_command_opts(ctx, "/infra/a")
        opts.env["B"] = "2"

        assert ctx.project.env == {"A": "1"}

    def test_creates_cli_config_file_with_token(self, settings):
        """Test a credentials file is written when a cloud token is set."""
        ctx = ProjectContext(
            ProjectConfig(
                path="/infra",
                terraform_cloud_host="tfe.example.com",
                terraform_cloud_token="secret-token",
            ),
            settings,
        )

        opts = build_command_opts(ctx, "/infra/vpc")
        try:
            assert opts.config_file.endswith(".tfrc")
            with open(opts.config_file) as f:
                content = f.read()
            assert 'credentials "tfe.example.com"' in content
            assert 'token = "secret-token"' in content
        finally:
            os.remove(opts.config_file)

    @patch("tempfile.mkstemp")
    def test_config_file_failure(self, mock_mkstemp, make_ctx):
        """Test a failed write raises OptionBuildError."""
        mock_mkstemp.side_effect = OSError("disk full")
        ctx = make_ctx("/infra", terraform_cloud_token="secret-token")

        with pytest.raises(OptionBuildError) as exc_info:
            build_command_opts(ctx, "/infra/vpc")

        assert exc_info.value.details["dir"] == "/infra/vpc"
        assert exc_info.value.outputs == []


def test_render_cli_config():
    """Test the rendered credentials block."""
    assert render_cli_config("app.terraform.io", "t") == (
        'credentials "app.terraform.io" {\n  token = "t"\n}\n'
    )


def test_render_cli_config_escapes_quotes():
    """Test quotes and backslashes in the token stay inside the HCL string."""
    rendered = render_cli_config("app.terraform.io", 'ab"c\\d')

    assert rendered == (
        'credentials "app.terraform.io" {\n  token = "ab\\"c\\\\d"\n}\n'
    )
