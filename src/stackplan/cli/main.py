"""
stackplan command-line entry point.
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from stackplan.config.settings import get_settings
from stackplan.logging import LOG_LEVELS, configure_logging


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", nargs="?", help="Root path containing sub-configurations")
    parser.add_argument("--config", dest="config_file", help="Path to config file")
    parser.add_argument("--binary", help="Terragrunt binary to run (default: terragrunt)")
    parser.add_argument(
        "--json",
        dest="output_format",
        action="store_const",
        const="json",
        default="table",
        help="Output as JSON",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stackplan", description="Plan generation for nested Terragrunt projects"
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Log level (default: from STACKPLAN_LOG_LEVEL)",
    )
    subparsers = parser.add_subparsers(dest="command")

    dirs_parser = subparsers.add_parser("dirs", help="List discovered sub-configurations")
    _add_common_arguments(dirs_parser)

    plan_parser = subparsers.add_parser(
        "plan", help="Generate plan JSON for every sub-configuration"
    )
    _add_common_arguments(plan_parser)
    plan_parser.add_argument("--workspace", help="Terraform workspace to select")
    plan_parser.add_argument(
        "--use-state",
        action="store_true",
        help="Read persisted state instead of running a plan",
    )

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        configure_logging(args.log_level or get_settings().log_level)
    except ValueError as e:
        parser.error(str(e))

    if args.command == "dirs":
        from stackplan.cli.dirs import dirs_command

        sys.exit(
            dirs_command(
                path=args.path,
                config_file=args.config_file,
                binary=args.binary,
                output_format=args.output_format,
            )
        )

    if args.command == "plan":
        from stackplan.cli.plan import plan_command

        sys.exit(
            plan_command(
                path=args.path,
                config_file=args.config_file,
                binary=args.binary,
                workspace=args.workspace,
                use_state=args.use_state,
                output_format=args.output_format,
            )
        )

    parser.print_help()
    sys.exit(2)


if __name__ == "__main__":
    main()
