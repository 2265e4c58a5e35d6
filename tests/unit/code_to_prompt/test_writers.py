from __future__ import annotations

import io
from pathlib import Path
from typing import TYPE_CHECKING

import pyperclip
import pytest

from code_to_prompt import writers
from code_to_prompt.exceptions import ClipboardError, OutputDestinationError
from code_to_prompt.writers import ClipboardSink, FileSink, StdoutSink, create_writer

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.mark.unit
def test_stdout_sink_writes_lines() -> None:
    stream = io.StringIO()
    sink = StdoutSink(stream)

    sink("first")
    sink.write("second")
    sink.finalize()

    assert stream.getvalue() == "first\nsecond\n"


@pytest.mark.unit
def test_file_sink_creates_directory_and_writes(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "out" / "prompt.txt"
    messages: list[str] = []

    sink = FileSink(target, debug=messages.append)
    sink("line one")
    sink("line two")
    sink.finalize()

    assert target.read_text(encoding="utf-8") == "line one\nline two\n"
    assert f"Output successfully written to {target}" in messages


@pytest.mark.unit
def test_file_sink_rejects_unwritable_directory(tmp_path: Path, mocker: MockerFixture) -> None:
    mocker.patch.object(writers.os, "access", return_value=False)

    with pytest.raises(OutputDestinationError) as exc_info:
        FileSink(tmp_path / "out.txt")

    assert "not writable" in str(exc_info.value)


@pytest.mark.unit
def test_file_sink_reports_directory_creation_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory", encoding="utf-8")

    with pytest.raises(OutputDestinationError):
        FileSink(blocker / "out.txt")


@pytest.mark.unit
def test_clipboard_sink_copies_on_finalize(mocker: MockerFixture) -> None:
    copy = mocker.patch.object(writers.pyperclip, "copy")
    sink = ClipboardSink()

    sink("a")
    sink("b")
    copy.assert_not_called()
    sink.finalize()

    copy.assert_called_once_with("a\nb\n")


@pytest.mark.unit
def test_clipboard_failure_raises(mocker: MockerFixture) -> None:
    mocker.patch.object(writers.pyperclip, "copy", side_effect=pyperclip.PyperclipException("no clipboard"))
    sink = ClipboardSink()
    sink("a")

    with pytest.raises(ClipboardError, match="no clipboard"):
        sink.finalize()


@pytest.mark.unit
def test_create_writer_selects_sink(tmp_path: Path) -> None:
    assert isinstance(create_writer(clipboard=True), ClipboardSink)
    assert isinstance(create_writer(), StdoutSink)
    file_sink = create_writer(tmp_path / "o.txt")
    assert isinstance(file_sink, FileSink)
    file_sink.finalize()


UNDECODABLE_NAME = "caf\udce9.txt"


@pytest.mark.unit
def test_file_sink_writes_undecodable_names_as_original_bytes(tmp_path: Path) -> None:
    target = tmp_path / "out.txt"

    sink = FileSink(target)
    sink(UNDECODABLE_NAME)
    sink.finalize()

    assert target.read_bytes() == b"caf\xe9.txt\n"


@pytest.mark.unit
def test_stdout_sink_tolerates_undecodable_names() -> None:
    raw = io.BytesIO()
    stream = io.TextIOWrapper(raw, encoding="utf-8")

    sink = StdoutSink(stream)
    sink(UNDECODABLE_NAME)
    sink.finalize()

    assert raw.getvalue() == b"caf\xe9.txt\n"


@pytest.mark.unit
def test_clipboard_sink_replaces_undecodable_bytes(mocker: MockerFixture) -> None:
    copy = mocker.patch.object(writers.pyperclip, "copy")
    sink = ClipboardSink()

    sink(UNDECODABLE_NAME)
    sink.finalize()

    copy.assert_called_once_with("caf�.txt\n")
