"""Ordered inclusion/exclusion checks shared by the tree builder and the traversal engine."""

from __future__ import annotations

import os
from enum import StrEnum, auto
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from code_to_prompt.config import file_extension, is_binary_file
from code_to_prompt.file_manipulation import match_any_glob, relpath
from code_to_prompt.ignore import IgnoreRules


class Verdict(StrEnum):
    """Outcome of running one entry through the filter chain."""

    ADMIT = auto()
    HIDDEN = auto()
    GITIGNORED = auto()
    CUSTOM_IGNORED = auto()
    BINARY = auto()
    EXTENSION_MISMATCH = auto()

    @property
    def admitted(self) -> bool:
        return self is Verdict.ADMIT

    @property
    def counts_as_skipped(self) -> bool:
        """Whether a file rejected with this verdict feeds the skipped-files counter.

        Hidden and gitignored entries are dropped before statistics apply.
        """
        return self in {Verdict.CUSTOM_IGNORED, Verdict.BINARY, Verdict.EXTENSION_MISMATCH}


class FilterChain(BaseModel):
    """The filter stages, always evaluated in the same order.

    1. hidden (name starts with `.`)
    2. gitignore rules
    3. custom glob patterns (directories are exempt in files-only mode)
    4. binary denylist (files only)
    5. extension allow-list (files only, empty means no restriction)

    Attributes:
        base_path: Directory the gitignore rules and glob patterns are relative to.
        ignore_rules: Loaded gitignore rules.
        include_hidden: Keep dot-files and dot-directories.
        include_binary: Keep files on the binary denylist.
        ignore_patterns: Custom glob patterns matched against base-relative paths.
        ignore_files_only: Custom patterns never exclude a directory itself.
        extensions: Dot-inclusive extension allow-list.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    base_path: Path = Field(..., description="Anchor for relative paths")
    ignore_rules: IgnoreRules = Field(default_factory=IgnoreRules, description="Gitignore matcher")
    include_hidden: bool = Field(default=False, description="Keep hidden entries")
    include_binary: bool = Field(default=False, description="Keep binary files")
    ignore_patterns: tuple[str, ...] = Field(default=(), description="Custom ignore globs")
    ignore_files_only: bool = Field(default=False, description="Custom globs skip files only")
    extensions: tuple[str, ...] = Field(default=(), description="Extension allow-list")

    def relative(self, path: str | os.PathLike[str]) -> str:
        """Path of `path` relative to the base, `.` for the base itself."""
        return relpath(path, self.base_path) or "."

    def check_common(self, path: str | os.PathLike[str], rel: str, *, is_dir: bool) -> Verdict:
        """Run the stages that apply to files and directories alike.

        Args:
            path (str | os.PathLike[str]): the entry's absolute path
            rel (str): the entry's path relative to the base
            is_dir (bool): the entry is a directory

        Returns:
            Verdict: HIDDEN, GITIGNORED or ADMIT
        """
        if not self.include_hidden and os.path.basename(path).startswith("."):
            return Verdict.HIDDEN
        if self.ignore_rules.ignores(rel, is_dir=is_dir):
            return Verdict.GITIGNORED
        return Verdict.ADMIT

    def check_directory(self, rel: str) -> Verdict:
        """Decide whether a directory that passed the common stages is descended into."""
        if not self.ignore_files_only and match_any_glob(rel, self.ignore_patterns):
            return Verdict.CUSTOM_IGNORED
        return Verdict.ADMIT

    def check_file(self, path: str | os.PathLike[str], rel: str) -> Verdict:
        """Decide whether a file that passed the common stages is emitted.

        Custom patterns apply to files regardless of files-only mode. The
        extension test compares the dot-inclusive file extension exactly,
        and case-sensitively, against the allow-list entries.
        """
        if match_any_glob(rel, self.ignore_patterns):
            return Verdict.CUSTOM_IGNORED
        if not self.include_binary and is_binary_file(path):
            return Verdict.BINARY
        if self.extensions and file_extension(path) not in self.extensions:
            return Verdict.EXTENSION_MISMATCH
        return Verdict.ADMIT

    def check(self, path: str | os.PathLike[str], *, is_dir: bool) -> Verdict:
        """Run every applicable stage for one entry, stopping at the first rejection.

        Args:
            path (str | os.PathLike[str]): the entry's absolute path
            is_dir (bool): the entry is a directory

        Returns:
            Verdict: the first rejecting stage, or ADMIT
        """
        rel = self.relative(path)
        verdict = self.check_common(path, rel, is_dir=is_dir)
        if not verdict.admitted:
            return verdict
        return self.check_directory(rel) if is_dir else self.check_file(path, rel)
