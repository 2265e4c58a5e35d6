from __future__ import annotations

import math
import os
import sys
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from collections.abc import Sequence

BYTE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")

# (st_dev, st_ino): identifies a directory however it was reached.
DirectoryKey = tuple[int, int]


def directory_key(st: os.stat_result) -> DirectoryKey:
    return (st.st_dev, st.st_ino)


def relpath(path: str | os.PathLike[str], root: str | os.PathLike[str]) -> str:
    """Send the relative path of path from root.

    Unlike `Path.relative_to`, this climbs out of `root` with `..` segments
    when `path` is not underneath it, the way gitignore-style matchers expect.

    Args:
        path (str | os.PathLike[str]): the path to "relativise"
        root (str | os.PathLike[str]): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            "" when path is root itself. If no relative path exists (e.g.
            another drive on Windows), returns the original path as a string.
    """
    try:
        rel = os.path.relpath(path, root)
    except ValueError:
        return str(path).replace("\\", "/")
    if rel == os.curdir:
        return ""
    return rel.replace("\\", "/")


def normalize_globs(globs: Sequence[str]) -> list[str]:
    """Normalize a sequence of path glob patterns.

    Normalize a sequence of glob patterns by stripping whitespace and
    replacing backslashes with forward slashes.

    Args:
        globs (Sequence[str]): the glob patterns to normalize

    Returns:
        list[str]: the normalized glob patterns
    """
    out: list[str] = []
    for g in globs:
        g2 = (g or "").strip()
        if not g2:
            continue
        out.append(g2.replace("\\", "/"))
    return out


def match_glob(rel: str, pattern: str) -> bool:
    """Check a relative POSIX path against one glob pattern.

    `*` and `?` stay within a segment, `**` spans any number of segments
    (zero included) and dot-files are matched like any other name.

    Args:
        rel (str): the relative path to check
        pattern (str): the glob pattern

    Returns:
        bool: True if the whole of `rel` matches `pattern`
    """
    if rel in {"", "."} or not pattern:
        return False
    try:
        return PurePath(rel).full_match(pattern)
    except ValueError:
        return False


def match_any_glob(rel: str, globs: Sequence[str]) -> bool:
    """Check if a relative path matches any of the provided glob patterns.

    Args:
        rel (str): the relative path to check
        globs (Sequence[str]): the glob patterns to match against

    Returns:
        bool: True if `rel` matches any pattern in `globs`, False otherwise
    """
    return any(match_glob(rel, g) for g in globs)


def _shared_parts(paths: Sequence[PurePath]) -> PurePath | None:
    """Longest common run of leading parts, the anchor counting as one part.

    Parts are compared as plain strings, so the comparison is case-sensitive
    even for Windows paths.

    Returns:
        PurePath | None: the shared prefix, or None when not even the anchor
            (root, drive or UNC share) is shared
    """
    split = [p.parts for p in paths]
    shared: list[str] = []
    for column in zip(*split, strict=False):
        head = column[0]
        if any(part != head for part in column[1:]):
            break
        shared.append(head)
    if not shared:
        return None
    return type(paths[0])(*shared)


def common_ancestor(paths: Sequence[str | os.PathLike[str]]) -> str:
    """Compute the directory anchoring a set of absolute input paths.

    - no paths: the current working directory
    - one path: the path itself if it is a directory, else its parent
      (also when it does not exist or cannot be stat'ed)
    - several paths: the deepest directory shared by all of them, compared
      segment by segment after normalization. Paths on different drives or
      UNC shares share nothing and yield "".

    Args:
        paths (Sequence[str | os.PathLike[str]]): absolute input paths

    Returns:
        str: the common ancestor directory
    """
    if not paths:
        return str(Path.cwd())
    if len(paths) == 1:
        single = os.fspath(paths[0])
        try:
            return single if Path(single).is_dir() else os.path.dirname(single)
        except OSError:
            return os.path.dirname(single)

    shared = _shared_parts([PurePath(os.path.abspath(p)) for p in paths])
    return "" if shared is None else str(shared)


def _round_half_up(value: float, decimals: int) -> float:
    factor = 10**decimals
    return math.floor(value * factor + 0.5) / factor


def format_bytes(num_bytes: float, decimals: int = 2) -> str:
    """Convert a byte count into a human-readable string.

    Args:
        num_bytes (float): the number of bytes (may be negative, NaN or infinite)
        decimals (int, optional): decimals shown for units above bytes. Defaults to 2.

    Returns:
        str: e.g. "0 B", "512 B", "1.50 KB", "-2.00 MB"
    """
    if num_bytes == 0 or math.isnan(num_bytes):
        return "0 B"
    if math.isinf(num_bytes):
        return f"{'-' if num_bytes < 0 else ''}Infinity B"

    sign = "-" if num_bytes < 0 else ""
    absolute = abs(num_bytes)
    k = 1024
    dm = max(decimals, 0)

    i = max(0, math.floor(math.log(absolute) / math.log(k)))
    i = min(i, len(BYTE_UNITS) - 1)
    value = absolute / k**i
    if i < len(BYTE_UNITS) - 1 and value >= k - 1e-9:
        i += 1
        value /= k

    if i == 0:
        shown = str(int(_round_half_up(value, 0)))
    else:
        shown = f"{_round_half_up(value, dm):.{dm}f}"
    return f"{sign}{shown} {BYTE_UNITS[i]}"


def read_paths_from_stdin(stream: TextIO | None = None, *, null_separator: bool = False) -> list[str]:
    """Read input paths piped through standard input.

    Args:
        stream (TextIO | None): the stream to read, `sys.stdin` when None
        null_separator (bool): split on NUL bytes (`find -print0`) instead of whitespace

    Returns:
        list[str]: the non-empty paths, or [] when the stream is an interactive
            terminal, closed or unreadable
    """
    stream = sys.stdin if stream is None else stream
    if stream is None:
        return []
    try:
        if stream.isatty():
            return []
        content = stream.read()
    except (OSError, ValueError):
        return []
    if not content:
        return []
    parts = content.split("\0") if null_separator else content.split()
    return [p for p in parts if p]
