"""
code-to-prompt: concatenate files and directories into a single prompt.

Overview
--------
Walks the given paths, keeps the files that survive the filters (hidden
files, `.gitignore`, `--ignore` globs, binary extensions, `--extension`
allow-list) and prints their content in one of three layouts:

1) **Default**: path, `---`, content, `---`.
2) **Markdown (`--markdown`)**: path followed by a fenced code block.
3) **Claude XML (`--cxml`)**: `<documents>` wrapping one `<document>` per file.

`--tree` prepends an ASCII tree of the same file set, and `--add-to-tree`
shows extra paths in that tree without exporting them. Output goes to
stdout, `--output FILE` or `--clipboard`. Paths may also be piped through
stdin (`--null` for `find -print0`).

Defaults can be stored in `~/.config/code-to-prompt/config.json`; run
`code-to-prompt init` to create one.

Usage
-----
    code-to-prompt src tests -e .py --markdown --tree
    find . -name "*.ts" -print0 | code-to-prompt --null --cxml -o prompt.xml
    code-to-prompt init
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

from pydantic import ValidationError

from code_to_prompt import __version__
from code_to_prompt.config import DEFAULT_CONCURRENCY
from code_to_prompt.exceptions import CodeToPromptError, NoInputPathsError
from code_to_prompt.file_manipulation import format_bytes, normalize_globs, read_paths_from_stdin
from code_to_prompt.file_tree import write_tree_preview
from code_to_prompt.filters import FilterChain
from code_to_prompt.ignore import load_ignore
from code_to_prompt.limiter import ConcurrencyLimiter
from code_to_prompt.logging import logger, setup_logging
from code_to_prompt.output_construction import DocumentPrinter
from code_to_prompt.settings import Settings, get_xdg_config_path, init_config, load_config
from code_to_prompt.traversal import RunStats, TraversalOptions, traverse
from code_to_prompt.writers import create_writer

if TYPE_CHECKING:
    from collections.abc import Sequence

INIT_COMMAND = "init"
LIST_OPTIONS = ("extension", "ignore", "add_to_tree")


def parse_preliminary(argv: Sequence[str]) -> argparse.Namespace:
    """Extract `--config` and `--verbose` before the config file is read."""
    p = argparse.ArgumentParser(add_help=False, allow_abbrev=False)
    p.add_argument("--config", type=str, default=None)
    p.add_argument("-V", "--verbose", action="store_true")
    p.add_argument("--log-file", type=str, default="")
    known, _ = p.parse_known_args(list(argv))
    return known


def resolve_config_path(config: str | None) -> Path:
    return Path(config).resolve() if config else get_xdg_config_path()


def build_parser(config_path: Path) -> argparse.ArgumentParser:
    """Build the argument parser for a run.

    Args:
        config_path (Path): configuration file in effect, shown as the `--config` default

    Returns:
        argparse.ArgumentParser: the parser
    """
    p = argparse.ArgumentParser(
        prog="code-to-prompt",
        usage="%(prog)s [init] [options] [paths...]",
        description="Concatenate files and directories into a single LLM prompt.",
    )
    p.add_argument("paths", nargs="*", help="Files or directories to export.")
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument(
        "--config",
        type=str,
        default=str(config_path),
        help=f"Path to configuration file. Defaults to {get_xdg_config_path()}",
    )
    p.add_argument(
        "-e",
        "--extension",
        action="append",
        default=None,
        help="File extension to include, e.g. .py (repeatable).",
    )
    p.add_argument(
        "--include-hidden",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Include hidden files/folders.",
    )
    p.add_argument(
        "--include-binary",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Include binary files.",
    )
    p.add_argument(
        "--ignore-files-only",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="--ignore only ignores files.",
    )
    p.add_argument(
        "--ignore-gitignore",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Ignore .gitignore files.",
    )
    p.add_argument(
        "--ignore",
        action="append",
        default=None,
        help="Glob pattern to ignore (repeatable).",
    )
    p.add_argument("-o", "--output", type=str, default=None, help="Output to file.")
    p.add_argument("-c", "--cxml", action=argparse.BooleanOptionalAction, default=False, help="Claude XML format.")
    p.add_argument(
        "-m",
        "--markdown",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Markdown format.",
    )
    p.add_argument(
        "-n",
        "--line-numbers",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Add line numbers.",
    )
    p.add_argument(
        "-C",
        "--clipboard",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Copy output to clipboard.",
    )
    p.add_argument(
        "-0",
        "--null",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Use NUL separator for stdin.",
    )
    p.add_argument("--tree", action=argparse.BooleanOptionalAction, default=False, help="Generate file tree at top.")
    p.add_argument(
        "--add-to-tree",
        action="append",
        default=None,
        help="Add path to the file tree only, without exporting its contents (repeatable).",
    )
    p.add_argument("--concurrency", type=int, default=DEFAULT_CONCURRENCY, help="Concurrent filesystem operations.")
    p.add_argument(
        "-V",
        "--verbose",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Enable verbose debug logging.",
    )
    p.add_argument("--log-file", type=str, default="", help="Log file path.")
    return p


def _as_list(value: Any) -> list[str]:  # noqa: ANN401
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse the command line, layering it over the configuration file.

    Precedence is built-in defaults, then the config file, then explicit
    flags. List options from the config file apply only when the command
    line gives none.

    Args:
        argv (Sequence[str] | None): arguments without the program name, `sys.argv[1:]` when None

    Raises:
        ConflictingOptionsError: if mutually exclusive options are combined

    Returns:
        Settings: the validated settings
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    pre = parse_preliminary(argv)
    setup_logging(pre.log_file or None, verbose=pre.verbose)

    config_path = resolve_config_path(pre.config)
    logger.debug("Using config path", path=str(config_path), custom=pre.config is not None)
    config_values = load_config(config_path, logger.debug)

    p = build_parser(config_path)
    p.set_defaults(**{k: v for k, v in config_values.items() if k not in LIST_OPTIONS})
    args = vars(p.parse_args(argv))
    for key in LIST_OPTIONS:
        if args[key] is None:
            args[key] = _as_list(config_values.get(key))
    args["config"] = config_path
    settings = Settings(**args)
    setup_logging(settings.log_file or None, verbose=settings.verbose)
    logger.debug("Verbose logging enabled.")
    return settings


def collect_input_paths(settings: Settings, stdin: TextIO | None = None) -> list[str]:
    """Merge positional paths with paths piped through stdin.

    Raises:
        NoInputPathsError: if there is no path at all

    Returns:
        list[str]: the input paths, command-line ones first
    """
    paths = [*settings.paths, *read_paths_from_stdin(stdin, null_separator=settings.null)]
    if not paths:
        raise NoInputPathsError
    return paths


def report_stats(stats: RunStats, settings: Settings, elapsed: float, stream: TextIO | None = None) -> None:
    """Print the run summary to stderr."""
    stream = stream or sys.stderr
    print("\nStats:", file=stream)
    print(f"Total files found: {stats.found_files}", file=stream)
    print(f"Files skipped: {stats.skipped_files}", file=stream)
    if settings.output:
        try:
            size = settings.output.stat().st_size
        except OSError:
            size = None
        if size is not None:
            print(f"Output file size: {format_bytes(size)}", file=stream)
    print(f"Generation time: {elapsed:.2f}s", file=stream)


async def run(settings: Settings, *, stdin: TextIO | None = None) -> RunStats:
    """Execute one export run.

    Args:
        settings (Settings): the run configuration
        stdin (TextIO | None): stream to read extra input paths from, `sys.stdin` when None

    Raises:
        NoInputPathsError: if no input path was given
        OutputDestinationError: if the output file cannot be created
        OSError: if writing the output fails outside a single file (the sink is still finalized)
        ClipboardError: if the clipboard copy fails

    Returns:
        RunStats: the found/skipped counters
    """
    start = time.perf_counter()
    debug = logger.debug
    absolute_paths = [os.path.abspath(p) for p in collect_input_paths(settings, stdin)]
    absolute_add_to_tree = [os.path.abspath(p) for p in settings.add_to_tree]

    sink = create_writer(settings.output, clipboard=settings.clipboard, debug=debug)

    base = Path.cwd()
    filters = FilterChain(
        base_path=base,
        ignore_rules=load_ignore(base, use_gitignore=not settings.ignore_gitignore, debug=debug),
        include_hidden=settings.include_hidden,
        include_binary=settings.include_binary,
        ignore_patterns=tuple(normalize_globs(settings.ignore)),
        ignore_files_only=settings.ignore_files_only,
        extensions=tuple(settings.extension),
    )

    stats = RunStats()
    options = TraversalOptions(
        filters=filters,
        writer=sink,
        printer=DocumentPrinter(),
        output_format=settings.output_format,
        line_numbers=settings.line_numbers,
        debug=debug,
        stats=stats,
        limiter=ConcurrencyLimiter(settings.concurrency),
    )
    try:
        if settings.tree:
            write_tree_preview(sink, [*absolute_paths, *absolute_add_to_tree], filters, debug=debug)

        if settings.cxml:
            sink("<documents>")

        for target in absolute_paths:
            if not os.path.exists(target):
                logger.error("Input path not found or inaccessible", path=target)
                continue
            await traverse(target, options)

        if settings.cxml:
            sink("</documents>")
    finally:
        sink.finalize()
    report_stats(stats, settings, time.perf_counter() - start)
    return stats


def run_init(argv: Sequence[str]) -> int:
    """Handle `code-to-prompt init [--config PATH]`."""
    pre = parse_preliminary(argv)
    setup_logging(pre.log_file or None, verbose=pre.verbose)
    init_config(Path(pre.config).resolve() if pre.config else None, logger.debug)
    return 0


def main(argv: Sequence[str] | None = None, *, stdin: TextIO | None = None) -> int:
    """Command-line entry point.

    Args:
        argv (Sequence[str] | None): arguments without the program name, `sys.argv[1:]` when None
        stdin (TextIO | None): stream to read extra input paths from, `sys.stdin` when None

    Returns:
        int: process exit code
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    try:
        if argv and argv[0] == INIT_COMMAND:
            return run_init(argv[1:])
        settings = parse_args(argv)
        asyncio.run(run(settings, stdin=stdin))
    except CodeToPromptError as e:
        logger.error(str(e))
        return 1
    except ValidationError as e:
        logger.error("Invalid options", error=str(e))
        return 1
    except OSError as e:
        logger.error("Output failed", error=str(e))
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
