"""Command-line interface for cypress-extractor."""

import argparse
import json
import os
import sys
from functools import lru_cache
from pathlib import Path

from cypress_extractor.core.config import get_settings
from cypress_extractor.core.errors import (
    InvalidCommandNameError,
    PathResolutionError,
    SourceParseError,
)
from cypress_extractor.core.logging import logger, setup_logging
from cypress_extractor.core.utils import safe_decode
from cypress_extractor.models.schemas import AnalyzeOptions, FindOptions, Location
from cypress_extractor.services.finder import CommandMatch, find_command, format_usage
from cypress_extractor.services.loader import resolve_paths
from cypress_extractor.services.locations import LineIndex
from cypress_extractor.services.project import analyze_paths
from cypress_extractor.services.vocabulary import Vocabulary

PROG = "cypress-extractor"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Parse and identify Cypress tests and commands",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log progress to stderr",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of files analysed in parallel (default: MAX_WORKERS setting)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # dump subcommand
    dump_parser = subparsers.add_parser(
        "dump",
        help="Dump parse results to stdout as JSON",
        epilog=(
            f"examples:\n"
            f"  {PROG} dump ./cypress                      # all *.js files under ./cypress\n"
            f"  {PROG} dump ./cypress/e2e ./cypress/support\n"
            f"  {PROG} dump ./cypress/e2e/login.cy.js      # a single file"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    dump_parser.add_argument(
        "--scenarios",
        action="store_true",
        help="Run the scenario-factory checks and report scenarios",
    )
    dump_parser.add_argument(
        "--no-nested",
        action="store_true",
        help="Do not list the calls made inside commands, tests and hooks",
    )
    dump_parser.add_argument("paths", nargs="+", metavar="file_or_dir")

    # find subcommand
    find_parser = subparsers.add_parser(
        "find",
        help="Find declaration and usage of a specific Cypress command",
        epilog=(
            f"examples:\n"
            f"  {PROG} find navigateToLogin ./cypress\n"
            f"  {PROG} find navigateToLogin ./cypress/e2e ./cypress/support"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    find_parser.add_argument("name", metavar="cy_command", help="Command to search for")
    find_parser.add_argument("paths", nargs="+", metavar="file_or_dir")

    return parser


@lru_cache(maxsize=None)
def _line_index(filename: str) -> LineIndex:
    return LineIndex(safe_decode(Path(filename).read_bytes()))


def _locate(match: CommandMatch) -> str:
    loc: Location = _line_index(match.filename).locate(match.start)
    return f"{os.path.abspath(match.filename)}:{loc.line}:{loc.column}"


def format_parse_error(exc: SourceParseError) -> str:
    arrow = " " * max(exc.column - 1, 0) + "^"
    return (
        f"Syntax Error : {exc.message}\n\n"
        f"{exc.line_text}\n"
        f"{arrow}\n\n"
        f"at ({exc.filename}:{exc.line}:{exc.column})"
    )


def run_dump(paths: list[str], options: AnalyzeOptions, vocabulary: Vocabulary, workers: int) -> int:
    """Run the dump command."""
    results = analyze_paths(resolve_paths(paths), options, vocabulary, max_workers=workers)
    logger.info(f"Analyzed {len(results)} file(s) in {analyze_paths.last_duration_ms} ms")

    out = {path: result.to_json_dict() for path, result in results.items()}
    print(json.dumps(out, indent=2))
    return 0


def run_find(name: str, paths: list[str], vocabulary: Vocabulary, workers: int) -> int:
    """Run the find command.

    Definitions and usages are printed with their path:line:column.
    Nested calls are not needed and are skipped.
    """
    options = AnalyzeOptions(
        find=FindOptions(added=True, used=True, tests=False, hooks=False),
        include_nested_calls=False,
    )
    results = analyze_paths(resolve_paths(paths), options, vocabulary, max_workers=workers)
    lookup = find_command(name, results)

    print("")
    if lookup.status == "missing":
        print(f'Could not find definition or usage of "{name}".\n')
        return 0

    if not lookup.definitions:
        print(f'Could not find where Cypress command "{name}" was defined!\n')
    elif len(lookup.definitions) == 1:
        print(f'Found definition of Cypress command "{name}":')
        print(f"    at ({_locate(lookup.definitions[0])})")
        print("")
    else:
        print(f'Found MULTIPLE definitions of Cypress command "{name}":')
        for match in lookup.definitions:
            print(f"    at ({_locate(match)})")
        print("")

    if not lookup.usages:
        print(f'Cypress command "{name}" never used!\n')
    else:
        print(
            f"Found {len(lookup.usages)} place(s) where "
            f"{vocabulary.command_prefix}{name} was used:"
        )
        for match in lookup.usages:
            print(f"  {format_usage(name, match.chain, vocabulary)}")
            print(f"        at ({_locate(match)})")
    print("")
    return 0


def run_cli(args: list[str]) -> int:
    """Run the CLI with the given arguments.

    Args:
        args: Command-line arguments (without program name)

    Returns:
        Exit code (0 for success, 1 for errors)
    """
    try:
        parsed = create_parser().parse_args(args)
    except SystemExit as e:
        return e.code if e.code else 1

    settings = get_settings()
    setup_logging("INFO" if parsed.verbose else "WARNING", stream=sys.stderr)

    if parsed.command is None:
        create_parser().print_help(sys.stderr)
        return 1

    vocabulary = Vocabulary.from_settings(settings)
    workers = parsed.workers or settings.MAX_WORKERS

    try:
        if parsed.command == "dump":
            options = AnalyzeOptions(
                include_nested_calls=settings.INCLUDE_NESTED_CALLS and not parsed.no_nested,
                scenarios=parsed.scenarios or settings.ENABLE_SCENARIOS,
            )
            return run_dump(parsed.paths, options, vocabulary, workers)
        if parsed.command == "find":
            return run_find(parsed.name, parsed.paths, vocabulary, workers)

    except PathResolutionError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except SourceParseError as e:
        print(format_parse_error(e), file=sys.stderr)
        return 1
    except InvalidCommandNameError as e:
        where = e.filename or "<unknown file>"
        print(f"ERROR: {e} (at {where}, offset {e.location})", file=sys.stderr)
        return 1

    return 1


def main():
    """Entry point for the CLI."""
    sys.exit(run_cli(sys.argv[1:]))


if __name__ == "__main__":
    main()
