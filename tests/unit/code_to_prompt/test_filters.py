from __future__ import annotations

from pathlib import Path

import pytest

from code_to_prompt.filters import FilterChain, Verdict
from code_to_prompt.ignore import IgnoreRules


@pytest.fixture
def base() -> Path:
    return Path("/project")


@pytest.mark.unit
def test_relative_paths(base: Path) -> None:
    chain = FilterChain(base_path=base)

    assert chain.relative(base) == "."
    assert chain.relative(base / "src" / "a.py") == "src/a.py"


@pytest.mark.unit
def test_hidden_checked_before_gitignore(base: Path) -> None:
    chain = FilterChain(base_path=base, ignore_rules=IgnoreRules([".env"]))

    assert chain.check(base / ".env", is_dir=False) == Verdict.HIDDEN
    assert FilterChain(base_path=base, ignore_rules=IgnoreRules([".env"]), include_hidden=True).check(
        base / ".env",
        is_dir=False,
    ) == Verdict.GITIGNORED


@pytest.mark.unit
def test_dot_directory_is_hidden(base: Path) -> None:
    chain = FilterChain(base_path=base)

    assert chain.check(base / ".git", is_dir=True) == Verdict.HIDDEN


@pytest.mark.unit
def test_custom_pattern_on_directory_respects_files_only(base: Path) -> None:
    patterns = ("build",)

    assert FilterChain(base_path=base, ignore_patterns=patterns).check_directory("build") == Verdict.CUSTOM_IGNORED
    files_only = FilterChain(base_path=base, ignore_patterns=patterns, ignore_files_only=True)
    assert files_only.check_directory("build") == Verdict.ADMIT


@pytest.mark.unit
def test_custom_pattern_on_file_ignores_files_only_flag(base: Path) -> None:
    chain = FilterChain(base_path=base, ignore_patterns=("*.lock",), ignore_files_only=True)

    assert chain.check_file(base / "poetry.lock", "poetry.lock") == Verdict.CUSTOM_IGNORED


@pytest.mark.unit
def test_binary_checked_before_extension(base: Path) -> None:
    chain = FilterChain(base_path=base, extensions=(".png",))

    assert chain.check_file(base / "logo.png", "logo.png") == Verdict.BINARY
    with_binary = chain.model_copy(update={"include_binary": True})
    assert with_binary.check_file(base / "logo.png", "logo.png") == Verdict.ADMIT


@pytest.mark.unit
def test_binary_classification_is_case_insensitive(base: Path) -> None:
    chain = FilterChain(base_path=base)

    assert chain.check_file(base / "PHOTO.JPG", "PHOTO.JPG") == Verdict.BINARY


@pytest.mark.unit
def test_extension_allow_list(base: Path) -> None:
    chain = FilterChain(base_path=base, extensions=(".py",))

    assert chain.check_file(base / "a.py", "a.py") == Verdict.ADMIT
    assert chain.check_file(base / "A.PY", "A.PY") == Verdict.EXTENSION_MISMATCH
    assert chain.check_file(base / "a.txt", "a.txt") == Verdict.EXTENSION_MISMATCH
    assert chain.check_file(base / "Makefile", "Makefile") == Verdict.EXTENSION_MISMATCH


@pytest.mark.unit
def test_extension_allow_list_does_not_apply_to_directories(base: Path) -> None:
    chain = FilterChain(base_path=base, extensions=(".py",))

    assert chain.check(base / "src", is_dir=True) == Verdict.ADMIT


@pytest.mark.unit
def test_skipped_counter_verdicts() -> None:
    assert {v for v in Verdict if v.counts_as_skipped} == {
        Verdict.CUSTOM_IGNORED,
        Verdict.BINARY,
        Verdict.EXTENSION_MISMATCH,
    }
    assert [v for v in Verdict if v.admitted] == [Verdict.ADMIT]
