"""CLI entrypoint for knowledge extraction."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import __version__
from .config import OUTPUT_FORMATS, ConfigError, load_config
from .logging import configure_logging, get_logger
from .output import FragmentWriter, build_document, format_summary
from .pipeline import Pipeline, read_batch_file


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="knowledge-extractor",
        description="Extract classified best-practice fragments from repository docs and config.",
    )
    parser.add_argument(
        "repos",
        nargs="*",
        help="GitHub URLs, owner/repo shorthands or local repository paths.",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output file path (default: <output_dir>/<owner>--<repo>.<format>).",
    )
    parser.add_argument(
        "-b",
        "--batch",
        type=Path,
        default=None,
        help="File with one repository identifier per line.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (default: json, or output_format from config).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .knowledge-extractor.yml file or the directory holding it.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for knowledge-extractor."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.repos and args.batch is None:
        parser.error("provide at least one repository or --batch FILE")

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    logger = get_logger("cli")

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")

    identifiers = list(args.repos)
    if args.batch is not None:
        try:
            batch = read_batch_file(args.batch)
        except OSError as exc:
            parser.exit(1, f"Could not read batch file {args.batch}: {exc}\n")
        logger.info("Batch mode: %d repos to process", len(batch))
        identifiers.extend(batch)

    fragments = Pipeline(config).run_batch(identifiers)
    if not fragments:
        logger.warning("No knowledge fragments extracted from any repo")
        return

    fmt = args.format or config.output_format
    writer = FragmentWriter(config.output_dir)
    written = writer.write(fragments, path=args.output, fmt=fmt)
    print(format_summary(build_document(fragments)))
    print(f"{len(fragments)} knowledge fragments written to {_relativize(written)}")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
