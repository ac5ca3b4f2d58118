"""CLI entrypoints for overviewgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict, List

from .classification import ClassificationConflict
from .config import ConfigError
from .logging import configure_logging
from .orchestrator import Orchestrator, RunOutcome

_UNCATEGORIZED = "uncategorized"
_PREVIEW_COUNT = 3


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_scan_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the workspace root (defaults to current directory).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Configuration file to use instead of the one found in the workspace root.",
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=1,
        help="Number of files to scan concurrently.",
    )


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="overviewgen",
        description="Scan a source tree and generate categorized project overview reports.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only report warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write a debug-level log to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Scan, classify and write the overview reports.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_scan_options(generate_parser)
    generate_parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for the reports (defaults to <path>/PROJECT_OVERVIEW).",
    )
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Render the reports without writing them.",
    )

    classify_parser = subparsers.add_parser(
        "classify",
        help="Scan and print the category each file falls into.",
    )
    _add_verbose_option(classify_parser, suppress_default=True)
    _add_scan_options(classify_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for overviewgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=args.quiet, log_file=args.log_file)

    orchestrator = Orchestrator()

    try:
        if args.command == "generate":
            outcome = orchestrator.run(
                args.path,
                config_path=args.config,
                output_dir=args.output_dir,
                workers=args.workers,
                dry_run=bool(getattr(args, "dry_run", False)),
            )
        elif args.command == "classify":
            outcome = orchestrator.classify(args.path, config_path=args.config, workers=args.workers)
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except ConfigError as exc:
        parser.exit(1, f"Configuration error: {exc}\n")
    except ClassificationConflict as exc:
        parser.exit(1, f"Classification failed:\n{exc}\n")

    print(format_assignments(outcome))
    if args.command == "generate":
        _print_generated(outcome)


def format_assignments(outcome: RunOutcome) -> str:
    """Per category: the file count and the first few file names."""
    groups: Dict[str, List[str]] = {}
    for item in outcome.files:
        groups.setdefault(item.category or _UNCATEGORIZED, []).append(item.path)

    lines = ["Category assignments:"]
    for name in sorted(groups):
        paths = groups[name]
        lines.append(f"  [{name}] {len(paths)} file(s)")
        for rel_path in paths[:_PREVIEW_COUNT]:
            lines.append(f"    - {Path(rel_path).name}")
        if len(paths) > _PREVIEW_COUNT:
            lines.append(f"    ... and {len(paths) - _PREVIEW_COUNT} more")
    if outcome.unparsed:
        lines.append(f"Files without types: {len(outcome.unparsed)}")
    return "\n".join(lines)


def _print_generated(outcome: RunOutcome) -> None:
    if outcome.dry_run:
        print("Reports rendered (dry-run):")
    else:
        print(f"Reports written to {_relativize(outcome.output_dir or outcome.root)}:")
    for name in outcome.generated:
        print(f"  - {name}")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
