"""Destinations for output lines: stdout, a file, or the clipboard."""

from __future__ import annotations

import io
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

import pyperclip

from code_to_prompt.exceptions import ClipboardError, OutputDestinationError
from code_to_prompt.logging import logger, noop_debug

if TYPE_CHECKING:
    from code_to_prompt.logging import DebugLogger

# Undecodable bytes in file names reach us as lone surrogates (PEP 383).
SURROGATE_ERRORS = "surrogateescape"


class OutputSink:
    """Base sink: `write` receives one line at a time, `finalize` flushes it out."""

    def write(self, line: str) -> None:
        raise NotImplementedError

    def finalize(self) -> None:
        """Flush and release the destination."""

    def __call__(self, line: str) -> None:
        self.write(line)


class StdoutSink(OutputSink):
    """Write to stdout, passing undecodable file-name bytes through unchanged."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout
        if isinstance(self.stream, io.TextIOWrapper):
            self.stream.reconfigure(errors=SURROGATE_ERRORS)

    def write(self, line: str) -> None:
        self.stream.write(line + "\n")

    def finalize(self) -> None:
        self.stream.flush()


class FileSink(OutputSink):
    """Stream lines into a UTF-8 file, creating its directory first."""

    def __init__(self, path: Path, debug: DebugLogger = noop_debug) -> None:
        self.path = path
        self.debug = debug
        out_dir = path.parent
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputDestinationError(path=path, reason=str(e)) from e
        if not os.access(out_dir, os.W_OK):
            raise OutputDestinationError(path=path, reason=f"directory {out_dir} is not writable")
        self._handle = path.open("w", encoding="utf-8", errors=SURROGATE_ERRORS)

    def write(self, line: str) -> None:
        self._handle.write(line + "\n")

    def finalize(self) -> None:
        self._handle.close()
        self.debug(f"Output successfully written to {self.path}")
        try:
            os.utime(self.path)
        except OSError:
            self.debug(f"Could not update modification time of {self.path}")


class ClipboardSink(OutputSink):
    """Buffer every line and copy the whole text on finalize."""

    def __init__(self) -> None:
        self.buffer = io.StringIO()

    def write(self, line: str) -> None:
        # The clipboard only takes valid text.
        line = line.encode("utf-8", SURROGATE_ERRORS).decode("utf-8", "replace")
        self.buffer.write(line + "\n")

    def finalize(self) -> None:
        try:
            pyperclip.copy(self.buffer.getvalue())
        except pyperclip.PyperclipException as e:
            raise ClipboardError(reason=str(e)) from e
        logger.info("Output successfully copied to clipboard.")


def create_writer(
    output: Path | None = None,
    *,
    clipboard: bool = False,
    debug: DebugLogger = noop_debug,
) -> OutputSink:
    """Pick the output sink for a run.

    Args:
        output (Path | None): file to write to
        clipboard (bool): buffer the output for the clipboard
        debug (DebugLogger): diagnostic sink

    Raises:
        OutputDestinationError: if the output directory cannot be created or written

    Returns:
        OutputSink: the clipboard sink, else the file sink when `output` is set, else stdout
    """
    if clipboard:
        debug("Clipboard output mode enabled. Buffering output.")
        return ClipboardSink()
    if output:
        debug(f"File output mode enabled. Writing to: {output}")
        return FileSink(Path(output), debug=debug)
    debug("Standard output mode enabled.")
    return StdoutSink()
