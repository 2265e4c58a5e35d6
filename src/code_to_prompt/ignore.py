"""Gitignore-style exclusion rules anchored at a base directory."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pathspec

from code_to_prompt.logging import noop_debug

if TYPE_CHECKING:
    from collections.abc import Iterable

    from code_to_prompt.logging import DebugLogger

GITIGNORE_FILENAME = ".gitignore"


class IgnoreRules:
    """A gitignore matcher that never raises.

    Paths are expressed relative to the base directory the rules were loaded
    from. The base itself (an empty path or `.`) and anything outside the base
    (absolute, or climbing out with `..`) are never ignored, and any error
    raised while matching is treated as "not ignored".
    """

    def __init__(self, rules: Iterable[str] = ()) -> None:
        self.rules: tuple[str, ...] = tuple(rules)
        self._spec = pathspec.GitIgnoreSpec.from_lines(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __repr__(self) -> str:
        return f"IgnoreRules({list(self.rules)!r})"

    def ignores(self, relative_path: str, *, is_dir: bool = False) -> bool:
        """Tell whether `relative_path` is excluded by the loaded rules.

        Args:
            relative_path (str): path relative to the base directory, with either separator
            is_dir (bool): the path names a directory, so directory-only rules (`build/`) apply

        Returns:
            bool: True if the path is excluded, False otherwise or on any matching error
        """
        if not self.rules:
            return False
        rel = relative_path.replace("\\", "/")
        if rel in {"", "."} or rel.startswith(("/", "../")) or rel == ".." or Path(rel).is_absolute():
            return False
        if is_dir and not rel.endswith("/"):
            rel += "/"
        try:
            return self._spec.match_file(rel)
        except Exception:  # noqa: BLE001
            return False


def parse_ignore_rules(text: str) -> list[str]:
    """Split gitignore text into rules, dropping blank lines and comments.

    Args:
        text (str): raw `.gitignore` content

    Returns:
        list[str]: the trimmed, non-empty, non-comment lines in file order
    """
    rules: list[str] = []
    for line in text.split("\n"):
        rule = line.strip()
        if not rule or rule.startswith("#"):
            continue
        rules.append(rule)
    return rules


def load_ignore(
    base: Path,
    *,
    use_gitignore: bool = True,
    debug: DebugLogger = noop_debug,
) -> IgnoreRules:
    """Load the `.gitignore` located directly in `base`.

    A missing, unreadable or comment-only file yields an empty rule set that
    ignores nothing.

    Args:
        base (Path): directory holding the `.gitignore` and anchoring its rules
        use_gitignore (bool): when False, skip loading and return an empty rule set
        debug (DebugLogger): diagnostic sink

    Returns:
        IgnoreRules: the loaded rule set
    """
    if not use_gitignore:
        debug("Ignoring .gitignore due to flag.")
        return IgnoreRules()

    gitignore = base / GITIGNORE_FILENAME
    try:
        content = gitignore.read_text(encoding="utf-8")
    except FileNotFoundError:
        debug(f"No .gitignore file found at {base}.")
        return IgnoreRules()
    except OSError as e:
        debug(f"Could not read .gitignore: {e}")
        return IgnoreRules()

    rules = parse_ignore_rules(content)
    if not rules:
        debug(f"No rules found in {gitignore}.")
        return IgnoreRules()
    debug(f"Initializing ignore patterns from {gitignore} ({len(rules)} rules).")
    return IgnoreRules(rules)
