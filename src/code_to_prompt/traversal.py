"""Concurrent, filtered walk that emits the content of every surviving file."""

from __future__ import annotations

import asyncio
import locale
import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from code_to_prompt.config import OutputFormat
from code_to_prompt.file_manipulation import directory_key
from code_to_prompt.filters import FilterChain, Verdict
from code_to_prompt.limiter import ConcurrencyLimiter
from code_to_prompt.logging import DebugLogger, logger, noop_debug
from code_to_prompt.output_construction import DocumentPrinter, Printer, Writer

if TYPE_CHECKING:
    from code_to_prompt.file_manipulation import DirectoryKey


class RunStats(BaseModel):
    """Counters shared by every branch of one run.

    Attributes:
        found_files: Files read and handed to the printer.
        skipped_files: Files rejected by a custom pattern, the binary
            denylist or the extension allow-list.
    """

    found_files: int = 0
    skipped_files: int = 0


class TraversalOptions(BaseModel):
    """Everything one run passes down the recursion, unchanged.

    `stats` and `limiter` are mutable and shared by all branches.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    filters: FilterChain = Field(..., description="Ordered inclusion/exclusion stages")
    writer: Writer = Field(..., description="Receives one output line per call")
    printer: Printer = Field(default_factory=DocumentPrinter, description="Formats one file")
    output_format: OutputFormat = Field(default=OutputFormat.DEFAULT, description="Printer layout")
    line_numbers: bool = Field(default=False, description="Number content lines")
    debug: DebugLogger = Field(default=noop_debug, description="Diagnostic sink")
    stats: RunStats = Field(default_factory=RunStats, description="Run counters")
    limiter: ConcurrencyLimiter = Field(default_factory=ConcurrencyLimiter, description="Bounds filesystem work")


def sort_entry_names(names: list[str]) -> list[str]:
    """Order directory entry names with the current locale's collation."""
    return sorted(names, key=lambda name: (locale.strxfrm(name), name))


def _list_directory(path: Path) -> list[str]:
    with os.scandir(path) as it:
        return [entry.name for entry in it]


async def _emit_file(path: Path, rel: str, options: TraversalOptions) -> None:
    debug = options.debug
    verdict = options.filters.check_file(path, rel)
    if not verdict.admitted:
        debug(f"Skipping file ({verdict}): {path.name}")
        if verdict.counts_as_skipped:
            options.stats.skipped_files += 1
        return

    try:
        debug(f"Reading file: {path}")
        content = await asyncio.to_thread(path.read_text, encoding="utf-8", errors="replace")
    except Exception as e:  # noqa: BLE001
        logger.warning("Skipping file due to read error", path=str(path), error=str(e))
        return

    try:
        debug(f"Printing file: {path}")
        options.printer(options.writer, str(path), content, options.output_format, options.line_numbers)
    except Exception as e:  # noqa: BLE001
        logger.error("Error writing file output", path=str(path), error=str(e))
        return
    options.stats.found_files += 1


async def _list_children(path: Path, rel: str, options: TraversalOptions) -> list[Path]:
    debug = options.debug
    verdict = options.filters.check_directory(rel)
    if not verdict.admitted:
        debug(f"Skipping directory ({verdict}): {path.name}")
        return []

    try:
        names = await asyncio.to_thread(_list_directory, path)
    except OSError as e:
        logger.error("Error reading directory", path=str(path), error=str(e))
        return []
    debug(f"Found {len(names)} entries in {path}")
    return [path / name for name in sort_entry_names(names)]


async def visit_path(
    path: Path,
    options: TraversalOptions,
    ancestors: frozenset[DirectoryKey] = frozenset(),
) -> tuple[list[Path], frozenset[DirectoryKey]]:
    """Process one path without descending.

    Runs the filter chain, emits the file if it survives, and for a
    directory returns its children in sorted order. A directory already
    among `ancestors` is a symlink cycle and is skipped. Every expected
    failure is logged and turned into an empty result.

    Args:
        path (Path): the absolute path to process
        options (TraversalOptions): run-wide options
        ancestors (frozenset[DirectoryKey]): directories open on this branch

    Returns:
        tuple[list[Path], frozenset[DirectoryKey]]: child paths still to be visited
            (empty for files and skips) and the ancestors to hand to them
    """
    debug = options.debug
    debug(f"Processing path: {path}")
    try:
        st = await asyncio.to_thread(os.stat, path)
    except OSError as e:
        logger.error("Error accessing path", path=str(path), error=str(e))
        return [], ancestors

    is_dir = stat.S_ISDIR(st.st_mode)
    rel = options.filters.relative(path)
    verdict = options.filters.check_common(path, rel, is_dir=is_dir)
    if verdict == Verdict.HIDDEN:
        debug(f"Skipping hidden: {path.name}")
        return [], ancestors
    if verdict == Verdict.GITIGNORED:
        debug(f"Skipping due to ignore rules: {path.name} (path: {rel})")
        return [], ancestors

    if stat.S_ISREG(st.st_mode):
        await _emit_file(path, rel, options)
        return [], ancestors
    if is_dir:
        key = directory_key(st)
        if key in ancestors:
            debug(f"Skipping directory cycle: {path}")
            return [], ancestors
        return await _list_children(path, rel, options), ancestors | {key}
    debug(f"Skipping special file: {path}")
    return [], ancestors


async def traverse(
    target_path: str | os.PathLike[str],
    options: TraversalOptions,
    ancestors: frozenset[DirectoryKey] = frozenset(),
) -> None:
    """Walk `target_path` recursively, emitting every file that passes the filters.

    Siblings are visited concurrently, each visit holding a limiter slot
    only while it touches the filesystem. The call returns once the whole
    subtree has settled, and never raises for per-path failures.

    Args:
        target_path (str | os.PathLike[str]): absolute file or directory path
        options (TraversalOptions): run-wide options
        ancestors (frozenset[DirectoryKey]): directories above `target_path` on this branch
    """
    children, ancestors = await options.limiter.run(visit_path, Path(target_path), options, ancestors)
    if not children:
        return
    async with asyncio.TaskGroup() as tg:
        for child in children:
            tg.create_task(traverse(child, options, ancestors))
