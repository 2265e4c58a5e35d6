from __future__ import annotations

import io
import json
import os
import sys
from pathlib import Path

import pytest

from code_to_prompt import cli
from code_to_prompt.config import DEFAULT_CONFIG


@pytest.fixture
def repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    (tmp_path / "src" / "pkg").mkdir(parents=True)
    (tmp_path / "src" / "pkg" / "core.py").write_text("def core():\n    return 1\n", encoding="utf-8")
    (tmp_path / "src" / "main.py").write_text("from pkg import core\n", encoding="utf-8")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "index.md").write_text("# Docs\n", encoding="utf-8")
    (tmp_path / ".env").write_text("TOKEN=secret\n", encoding="utf-8")
    return tmp_path


def test_end_to_end_tree_and_markdown_export(repo: Path) -> None:
    output = repo / "export" / "prompt.md"

    exit_code = cli.main(
        ["--tree", "--markdown", "--add-to-tree", "docs", "-o", str(output), "src"],
        stdin=io.StringIO(""),
    )

    assert exit_code == 0
    content = output.read_text(encoding="utf-8")
    assert content.startswith(
        "\n".join(
            [
                "Folder structure:",
                str(repo) + os.sep,
                "---",
                ".",
                "├── docs",
                "│   └── index.md",
                "└── src",
                "    ├── main.py",
                "    └── pkg",
                "        └── core.py",
                "---",
                "",
            ],
        ),
    )
    assert f"{repo / 'src' / 'main.py'}\n```python\nfrom pkg import core\n\n```\n" in content
    assert "# Docs" not in content
    assert "secret" not in content


def test_end_to_end_cxml_export(repo: Path) -> None:
    output = repo / "export" / "prompt.xml"

    exit_code = cli.main(["--cxml", "-o", str(output), "src", "docs"], stdin=io.StringIO(""))

    assert exit_code == 0
    lines = output.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "<documents>"
    assert lines[-1] == "</documents>"
    indexes = [line for line in lines if line.startswith("<document index=")]
    assert indexes == [f'<document index="{i}">' for i in range(1, 4)]


def test_end_to_end_hidden_files_opt_in(repo: Path) -> None:
    output = repo / "export" / "prompt.txt"

    exit_code = cli.main(["--include-hidden", "-o", str(output), ".env"], stdin=io.StringIO(""))

    assert exit_code == 0
    assert "TOKEN=secret" in output.read_text(encoding="utf-8")


def test_end_to_end_no_paths_fails(repo: Path) -> None:
    assert cli.main([], stdin=io.StringIO("")) == 1


def test_end_to_end_init_then_run(repo: Path) -> None:
    config = repo / "xdg" / "code-to-prompt" / "config.json"

    assert cli.main(["init"]) == 0
    assert json.loads(config.read_text(encoding="utf-8")) == DEFAULT_CONFIG
    assert cli.main(["init"]) == 0

    (repo / "run.log").write_text("log line\n", encoding="utf-8")
    output = repo / "export" / "prompt.txt"
    assert cli.main(["-o", str(output), "src", "run.log"], stdin=io.StringIO("")) == 0
    assert "log line" not in output.read_text(encoding="utf-8")


@pytest.mark.skipif(sys.platform != "linux", reason="needs a filesystem that accepts arbitrary name bytes")
def test_end_to_end_undecodable_file_name(repo: Path) -> None:
    odd = repo / "odd"
    odd.mkdir()
    (odd / os.fsdecode(b"caf\xe9.txt")).write_text("latin name\n", encoding="utf-8")
    output = repo / "out.txt"

    exit_code = cli.main(["--tree", "-o", str(output), str(odd)], stdin=io.StringIO(""))

    assert exit_code == 0
    raw = output.read_bytes()
    assert b"\xe2\x94\x94\xe2\x94\x80\xe2\x94\x80 caf\xe9.txt" in raw
    assert b"caf\xe9.txt\n---\nlatin name\n" in raw
