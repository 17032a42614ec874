"""Tests for terragrunt/discovery.py.

Tests for decoding the multi-document terragrunt-info stream into
configuration and working directories.
"""

import json

import pytest

from stackplan.core.errors import DiscoveryDecodeError
from stackplan.terragrunt.discovery import (
    DirectoryRecord,
    iter_json_documents,
    parse_discovery_output,
)


class TestDirectoryRecord:
    """Tests for DirectoryRecord."""

    def test_config_dir_is_directory_of_config_path(self):
        """Test the config file name is stripped from ConfigPath."""
        record = DirectoryRecord.from_info(
            {"ConfigPath": "/infra/prod/vpc/terragrunt.hcl", "WorkingDir": "/cache/abc"}
        )

        assert record.config_dir == "/infra/prod/vpc"
        assert record.working_dir == "/cache/abc"

    def test_missing_config_path(self):
        """Test a record without ConfigPath is rejected."""
        with pytest.raises(ValueError):
            DirectoryRecord.from_info({"WorkingDir": "/cache/abc"})

    def test_non_object(self):
        """Test a non-object document is rejected."""
        with pytest.raises(ValueError):
            DirectoryRecord.from_info(["not", "an", "object"])

    def test_record_is_immutable(self):
        """Test DirectoryRecord is frozen."""
        record = DirectoryRecord(config_dir="a", working_dir="b")

        with pytest.raises(AttributeError):
            record.config_dir = "c"


class TestIterJsonDocuments:
    """Tests for iter_json_documents."""

    def test_concatenated_objects(self):
        """Test objects with no separator are read one at a time."""
        docs = list(iter_json_documents('{"a": 1}{"b": 2}\n{"c": 3}\n'))

        assert docs == [{"a": 1}, {"b": 2}, {"c": 3}]

    def test_whitespace_only(self):
        """Test a blank stream yields nothing."""
        assert list(iter_json_documents("  \n\t\n")) == []

    def test_invalid_document(self):
        """Test decode errors propagate after earlier documents."""
        docs = iter_json_documents('{"a": 1}\n{"b": \n')

        assert next(docs) == {"a": 1}
        with pytest.raises(json.JSONDecodeError):
            next(docs)


class TestParseDiscoveryOutput:
    """Tests for parse_discovery_output."""

    def test_n_documents_in_stream_order(self, info_stream):
        """Test N documents give N directories in order."""
        out = info_stream(
            [
                ("/infra/a/terragrunt.hcl", "/infra/a/.terragrunt-cache/x/a"),
                ("/infra/b/terragrunt.hcl", "/infra/b/.terragrunt-cache/y/b"),
                ("/infra/c/terragrunt.hcl", "/infra/c/.terragrunt-cache/z/c"),
            ]
        )

        config_dirs, working_dirs = parse_discovery_output(out)

        assert config_dirs == ["/infra/a", "/infra/b", "/infra/c"]
        assert working_dirs == [
            "/infra/a/.terragrunt-cache/x/a",
            "/infra/b/.terragrunt-cache/y/b",
            "/infra/c/.terragrunt-cache/z/c",
        ]

    def test_single_document_with_trailing_newline(self, info_stream):
        """Test a single-document stream is not dropped."""
        out = info_stream([("/infra/only/terragrunt.hcl", "/infra/only")])

        config_dirs, working_dirs = parse_discovery_output(out)

        assert config_dirs == ["/infra/only"]
        assert working_dirs == ["/infra/only"]

    def test_single_document_without_trailing_newline(self):
        """Test a single document with no trailing newline is kept."""
        out = b'{"ConfigPath": "/infra/only/terragrunt.hcl", "WorkingDir": "/infra/only"}'

        config_dirs, working_dirs = parse_discovery_output(out)

        assert config_dirs == ["/infra/only"]
        assert working_dirs == ["/infra/only"]

    def test_nested_object_closing_on_its_own_line(self):
        """Test a nested object followed by a newline does not split the document."""
        out = (
            b'{"ConfigPath": "/infra/a/terragrunt.hcl", "Extra": {"k": 1}\n'
            b', "WorkingDir": "/w/a"}\n'
        )

        config_dirs, working_dirs = parse_discovery_output(out)

        assert config_dirs == ["/infra/a"]
        assert working_dirs == ["/w/a"]

    def test_empty_output(self):
        """Test an empty stream discovers nothing."""
        assert parse_discovery_output(b"") == ([], [])

    def test_duplicate_config_dirs_kept(self, info_stream):
        """Test config dirs are not deduplicated."""
        out = info_stream(
            [
                ("/infra/a/terragrunt.hcl", "/w1"),
                ("/infra/a/terragrunt.hcl", "/w2"),
            ]
        )

        config_dirs, working_dirs = parse_discovery_output(out)

        assert config_dirs == ["/infra/a", "/infra/a"]
        assert working_dirs == ["/w1", "/w2"]

    def test_decode_error_keeps_partial_result(self, info_stream):
        """Test directories before a bad document are returned on the error."""
        out = info_stream([("/infra/a/terragrunt.hcl", "/w/a")]) + b'{"ConfigPath": \n'

        with pytest.raises(DiscoveryDecodeError) as exc_info:
            parse_discovery_output(out)

        assert exc_info.value.config_dirs == ["/infra/a"]
        assert exc_info.value.working_dirs == ["/w/a"]
        assert exc_info.value.details["index"] == 1

    def test_record_without_config_path_is_decode_error(self, info_stream):
        """Test a document lacking ConfigPath fails decoding."""
        out = info_stream([("/infra/a/terragrunt.hcl", "/w/a")]) + b'{"WorkingDir": "/w/b"}\n'

        with pytest.raises(DiscoveryDecodeError) as exc_info:
            parse_discovery_output(out)

        assert exc_info.value.config_dirs == ["/infra/a"]

    def test_invalid_utf8(self):
        """Test undecodable bytes raise DiscoveryDecodeError."""
        with pytest.raises(DiscoveryDecodeError) as exc_info:
            parse_discovery_output(b"\xff\xfe{}")

        assert exc_info.value.config_dirs == []
