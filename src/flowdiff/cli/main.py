"""CLI entry point for the flow2apex PR diff report."""
import argparse
from dotenv import load_dotenv
import json
import logging
import os
import sys
import traceback
from pathlib import Path

from flowdiff.models import DiffFormat, ReportSettings, RunConfig
from flowdiff.models.config_models import DEFAULT_TIMEOUT
from flowdiff.orchestrator.exceptions import OrchestratorError
from flowdiff.stages.differ import normalize_diff_format
from flowdiff.stages.exceptions import FlowDiffError, InvalidDiffFormatError

load_dotenv()

# Exit codes
EXIT_SUCCESS = 0
EXIT_INVALID_INPUT = 1
EXIT_RUN_ERROR = 2
EXIT_ORCHESTRATOR_ERROR = 3
EXIT_UNEXPECTED = 5
EXIT_KEYBOARD_INTERRUPT = 130

# Default artifact locations, relative to the workspace
DEFAULT_OUTPUT_FILE = os.path.join(".github", "flow2apex-step-output.txt")
DEFAULT_COMMENT_FILE = os.path.join(".github", "flow2apex-pr-comment.md")
DEFAULT_HTML_FILE = os.path.join(".github", "flow2apex-pr-diff.html")

LOG_FORMAT = "%(levelname)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser.

    Every run argument falls back to the environment variable a CI step
    would set.
    """
    parser = argparse.ArgumentParser(
        prog="flowdiff",
        description="Render changed flows at two revisions and report the generated Apex diff",
    )
    parser.add_argument("--base-sha", default=os.getenv("BASE_SHA", ""), help="base commit sha")
    parser.add_argument("--head-sha", default=os.getenv("HEAD_SHA", ""), help="head commit sha")
    parser.add_argument(
        "--workspace",
        default=os.getenv("GITHUB_WORKSPACE", ""),
        help="repository root (default: current directory)",
    )
    parser.add_argument(
        "--output-file",
        default=os.getenv("GITHUB_OUTPUT", ""),
        help=f"step output file (default: <workspace>/{DEFAULT_OUTPUT_FILE})",
    )
    parser.add_argument(
        "--comment-file",
        default="",
        help=f"comment markdown output path (default: <workspace>/{DEFAULT_COMMENT_FILE})",
    )
    parser.add_argument(
        "--html-file",
        default="",
        help=f"side-by-side html output path (default: <workspace>/{DEFAULT_HTML_FILE})",
    )
    parser.add_argument(
        "--flow2apex-bin",
        default=os.getenv("FLOW2APEX_BIN", ""),
        help="path to the flow2apex binary (default: flow2apex on PATH)",
    )
    parser.add_argument(
        "--diff-format",
        default=os.getenv("DIFF_FORMAT", ""),
        help=(
            f"diff format: {DiffFormat.UNIFIED.value} (default) "
            f"or {DiffFormat.SIDE_BY_SIDE.value}"
        ),
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"seconds allowed per external command, 0 disables (default: {DEFAULT_TIMEOUT})",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument(
        "--dry-run", action="store_true", help="Print resolved config as JSON and exit"
    )
    return parser


def resolve_config(args: argparse.Namespace) -> RunConfig:
    """Fill in defaults and validate parsed arguments.

    Raises:
        InvalidDiffFormatError: If --diff-format is not recognized.
        ValueError: If base or head sha is missing.
    """
    if not args.base_sha or not args.head_sha:
        raise ValueError("base-sha and head-sha are required")

    workspace = args.workspace or os.getcwd()
    diff_format = normalize_diff_format(args.diff_format)
    timeout = args.timeout if args.timeout and args.timeout > 0 else None

    return RunConfig(
        base_sha=args.base_sha,
        head_sha=args.head_sha,
        workspace=workspace,
        output_file=args.output_file or str(Path(workspace) / DEFAULT_OUTPUT_FILE),
        comment_file=args.comment_file or str(Path(workspace) / DEFAULT_COMMENT_FILE),
        html_file=args.html_file or str(Path(workspace) / DEFAULT_HTML_FILE),
        converter_bin=args.flow2apex_bin,
        diff_format=diff_format,
        settings=ReportSettings(timeout_seconds=timeout),
    )


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def _handle_error(label: str, exc: BaseException, verbose: bool, exit_code: int) -> int:
    """Print error message to stderr and return the exit code."""
    print(f"{label}: {exc}", file=sys.stderr)
    if verbose:
        traceback.print_exc(file=sys.stderr)
    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code integer.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = resolve_config(args)
    except (InvalidDiffFormatError, ValueError) as exc:
        return _handle_error("Invalid input", exc, args.verbose, EXIT_INVALID_INPUT)

    if args.dry_run:
        print(json.dumps(config.model_dump(mode="json"), indent=2))
        return EXIT_SUCCESS

    try:
        from flowdiff.orchestrator.runner import run_flow_diff

        outputs = run_flow_diff(config)
        if args.verbose:
            print(f"has_flow_changes={str(outputs.has_flow_changes).lower()}", file=sys.stderr)
        return EXIT_SUCCESS

    except FlowDiffError as exc:
        return _handle_error("Run error", exc, args.verbose, EXIT_RUN_ERROR)

    except OrchestratorError as exc:
        return _handle_error("Orchestrator error", exc, args.verbose, EXIT_ORCHESTRATOR_ERROR)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_KEYBOARD_INTERRUPT

    except Exception as exc:
        return _handle_error("Unexpected error", exc, args.verbose, EXIT_UNEXPECTED)
