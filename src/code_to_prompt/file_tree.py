from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING, Any

from code_to_prompt.file_manipulation import common_ancestor, directory_key, relpath
from code_to_prompt.filters import FilterChain
from code_to_prompt.logging import noop_debug

if TYPE_CHECKING:
    from collections.abc import Sequence

    from code_to_prompt.file_manipulation import DirectoryKey
    from code_to_prompt.logging import DebugLogger
    from code_to_prompt.output_construction import Writer


def collect_tree_files(paths: Sequence[str | os.PathLike[str]], filters: FilterChain) -> set[str]:
    """Walk `paths` depth-first and collect the files the filter chain admits.

    The walk is sequential; any entry that cannot be stat'ed or listed is
    silently left out, and so is a directory that loops back to one of its
    own ancestors through a symlink.

    Args:
        paths (Sequence[str | os.PathLike[str]]): absolute files or directories to walk
        filters (FilterChain): the filter stages to apply

    Returns:
        set[str]: absolute paths of admitted files
    """
    found: set[str] = set()

    def recurse(p: str, ancestors: frozenset[DirectoryKey]) -> None:
        try:
            st = os.stat(p)
        except (OSError, ValueError):
            return
        is_dir = stat.S_ISDIR(st.st_mode)
        is_file = stat.S_ISREG(st.st_mode)
        if not (is_dir or is_file):
            return
        if not filters.check(p, is_dir=is_dir).admitted:
            return
        if is_file:
            found.add(p)
            return
        key = directory_key(st)
        if key in ancestors:
            return
        try:
            with os.scandir(p) as it:
                names = [entry.name for entry in it]
        except OSError:
            return
        for name in names:
            recurse(os.path.join(p, name), ancestors | {key})

    for p in paths:
        recurse(os.fspath(p), frozenset())
    return found


def build_tree_lines(rel_paths: Sequence[str]) -> list[str]:
    """Build a visual tree representation of file paths.

    Paths are sorted by their full string, so siblings appear in the order
    their first descendant sorts in. The root line is `.`.

    Args:
        rel_paths (Sequence[str]): file paths relative to the root, using POSIX separators (e.g. "src/main.py")

    Returns:
        list[str]: a list of strings representing the tree structure, suitable for printing
    """
    tree: dict[str, Any] = {}
    for rp in sorted({p for p in rel_paths if p}):
        cur = tree
        for part in rp.split("/"):
            cur = cur.setdefault(part, {})

    lines: list[str] = ["."]

    def walk(node: dict[str, Any], prefix: str) -> None:
        names = list(node)
        for idx, name in enumerate(names):
            last = idx == len(names) - 1
            branch = "└── " if last else "├── "
            lines.append(prefix + branch + name)
            ext = "    " if last else "│   "
            walk(node[name], prefix + ext)

    walk(tree, "")
    return lines


def build_tree(paths: Sequence[str | os.PathLike[str]], filters: FilterChain) -> str:
    """Render the filtered file set under `filters.base_path` as an ASCII tree.

    The extension allow-list never applies to the tree. Output is independent
    of directory-listing order.

    Args:
        paths (Sequence[str | os.PathLike[str]]): absolute files or directories to include
        filters (FilterChain): filter stages; `base_path` is the tree root

    Returns:
        str: newline-joined tree lines
    """
    tree_filters = filters.model_copy(update={"extensions": ()})
    files = collect_tree_files(paths, tree_filters)
    rels = [relpath(f, tree_filters.base_path) for f in files]
    return "\n".join(build_tree_lines(rels))


def write_tree_preview(
    writer: Writer,
    paths: Sequence[str | os.PathLike[str]],
    filters: FilterChain,
    *,
    debug: DebugLogger = noop_debug,
) -> str:
    """Write the `Folder structure:` block that precedes file contents.

    The tree is rooted at the common ancestor of `paths`, which also becomes
    the anchor for ignore matching while the tree is built.

    Args:
        writer (Writer): output sink
        paths (Sequence[str | os.PathLike[str]]): input paths plus tree-only paths
        filters (FilterChain): filter stages; its `base_path` is replaced by the tree root
        debug (DebugLogger): diagnostic sink

    Returns:
        str: the tree root directory
    """
    root = common_ancestor(paths)
    debug(f"Tree display root: {root}")
    writer("Folder structure:")
    writer(root if root.endswith(os.sep) else root + os.sep)
    writer("---")
    tree = build_tree(paths, filters.model_copy(update={"base_path": Path(root)}))
    writer(tree.rstrip())
    writer("---")
    writer("")
    return root
