"""Main CLI entry point for the diff-tree harness."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import HarnessConfig
from .errors import HarnessError
from .harness import HarnessResult, run_harness
from .logging_utils import configure_logging
from .serialize import ResultSerializer
from .settings import get_commits_override, get_progress_batch


class HarnessArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit status 1."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = HarnessArgumentParser(
        prog="difftreecheck",
        usage="%(prog)s [options] (path_to_repo | url_of_repo)",
        description="Compare dulwich tree diffs against git diff-tree over a first-parent history",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  difftreecheck /path/to/repo
  difftreecheck https://github.com/git/git.git
  difftreecheck /path/to/repo --commit 18d0fec --commit bb831db --json result.json
        """,
    )

    parser.add_argument(
        "repo",
        help="Local repository path or http://, https://, git:// URL",
    )
    parser.add_argument(
        "--commit",
        dest="commits",
        action="append",
        default=None,
        metavar="HASH",
        help="Pin the commit list (newest first, repeat at least twice) "
        "instead of walking history; defaults to $DIFFTREECHECK_COMMITS",
    )
    parser.add_argument(
        "--progress-batch",
        type=int,
        default=None,
        help="Print one progress dot per this many pairs (default: 100)",
    )
    parser.add_argument(
        "--json",
        help="Also write the result envelope as JSON to this file",
    )
    parser.add_argument(
        "--keep-workdir",
        action="store_true",
        help="Keep the temporary clone of a remote repository",
    )
    parser.add_argument(
        "--keep-on-error",
        action="store_true",
        help="Keep the temporary clone when the run fails",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        type=str.upper,
        help="Log level (default: $LOG_LEVEL or INFO)",
    )

    return parser


def create_config(args: argparse.Namespace) -> HarnessConfig:
    """Create configuration from command line arguments."""
    commits = tuple(args.commits) if args.commits else get_commits_override()
    progress_batch = args.progress_batch if args.progress_batch is not None else get_progress_batch()
    return HarnessConfig(
        repo=args.repo,
        commits_override=commits,
        progress_batch=progress_batch,
        json_output_path=args.json,
        keep_workdir=args.keep_workdir,
        keep_on_error=args.keep_on_error,
    )


def print_result(result: HarnessResult) -> None:
    """Print the SUCCESS/FAIL line and every divergent pair."""
    report = result.comparison.report()
    status = "SUCCESS" if result.passed else "FAIL"
    print(f"{status} {report}".rstrip())


def write_json(envelope: dict, output_path: Optional[str]) -> None:
    """Write an envelope to ``output_path`` if one was requested."""
    if not output_path:
        return
    serializer = ResultSerializer()
    Path(output_path).write_text(serializer.to_json_string(envelope), encoding="utf-8")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = create_config(args)
    except ValueError as e:
        parser.error(str(e))

    print(f"repo = {config.repo}")

    try:
        result = run_harness(config, show_progress=True)

    except HarnessError as e:
        print(e.describe(), file=sys.stderr)
        write_json(ResultSerializer(config).error_envelope_for(e), config.json_output_path)
        return 1

    except Exception as e:
        print(f"internal error: {e}", file=sys.stderr)
        write_json(ResultSerializer(config).error_envelope_for(e), config.json_output_path)
        return 1

    print_result(result)

    serializer = ResultSerializer(config)
    write_json(
        serializer.create_success_envelope(serializer.serialize_result(result)),
        config.json_output_path,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
